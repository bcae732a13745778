import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "attendance_guard")
    DB_CONNECT_TIMEOUT = int(os.environ.get("DB_CONNECT_TIMEOUT", "5"))
    DB_POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", "10"))

    # Fraud engine
    EXPECTED_TIMEZONE = os.environ.get("EXPECTED_TIMEZONE", "UTC")
    LOOKUP_TIMEOUT_SECONDS = float(os.environ.get("LOOKUP_TIMEOUT_SECONDS", "3"))
    AUDIT_QUEUE_SIZE = int(os.environ.get("AUDIT_QUEUE_SIZE", "1000"))
    DEVICE_CHECK_SITE = os.environ.get("DEVICE_CHECK_SITE", "client")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def db_config_from(cfg=Config) -> dict:
    return {
        "host": cfg.DB_HOST,
        "port": cfg.DB_PORT,
        "user": cfg.DB_USER,
        "password": cfg.DB_PASSWORD,
        "database": cfg.DB_NAME,
        "connection_timeout": cfg.DB_CONNECT_TIMEOUT,
        "pool_size": cfg.DB_POOL_SIZE,
    }
