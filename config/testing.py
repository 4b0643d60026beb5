import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "church_checkin_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

API_BASE_URL = "http://testserver/api/v1"
API_TIMEOUT_SECONDS = 2.0
# Short timings keep the async workflow tests fast
LOOKUP_DEBOUNCE_SECONDS = 0.01
LOOKUP_MIN_NAME_LENGTH = 2
ROSTER_REFRESH_SECONDS = 0.05
ROSTER_PAGE_SIZE = 6
NOTIFICATION_SECONDS = 0.05
