import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "church_checkin"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:5000/api/v1")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))
LOOKUP_DEBOUNCE_SECONDS = float(os.getenv("LOOKUP_DEBOUNCE_SECONDS", "0.5"))
LOOKUP_MIN_NAME_LENGTH = int(os.getenv("LOOKUP_MIN_NAME_LENGTH", "2"))
ROSTER_REFRESH_SECONDS = float(os.getenv("ROSTER_REFRESH_SECONDS", "30"))
ROSTER_PAGE_SIZE = int(os.getenv("ROSTER_PAGE_SIZE", "6"))
NOTIFICATION_SECONDS = float(os.getenv("NOTIFICATION_SECONDS", "4"))
