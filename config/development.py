import os

from .config import Config, db_config_from

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = db_config_from(Config)

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

# If enabled, app applies database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

EXPECTED_TIMEZONE = Config.EXPECTED_TIMEZONE
LOOKUP_TIMEOUT_SECONDS = Config.LOOKUP_TIMEOUT_SECONDS
AUDIT_QUEUE_SIZE = Config.AUDIT_QUEUE_SIZE
DEVICE_CHECK_SITE = Config.DEVICE_CHECK_SITE
