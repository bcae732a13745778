import os

from .config import Config, db_config_from

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = db_config_from(Config)

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

EXPECTED_TIMEZONE = Config.EXPECTED_TIMEZONE
LOOKUP_TIMEOUT_SECONDS = Config.LOOKUP_TIMEOUT_SECONDS
AUDIT_QUEUE_SIZE = Config.AUDIT_QUEUE_SIZE
DEVICE_CHECK_SITE = Config.DEVICE_CHECK_SITE
