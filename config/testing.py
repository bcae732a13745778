import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_guard_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

EXPECTED_TIMEZONE = "UTC"
LOOKUP_TIMEOUT_SECONDS = 0.5
AUDIT_QUEUE_SIZE = 100
DEVICE_CHECK_SITE = "client"
