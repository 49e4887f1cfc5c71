import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "site_attendance"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "site_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

CHECKIN_OPENS_AT = os.getenv("CHECKIN_OPENS_AT", "06:00")
GEOFENCE_GRACE_METERS = float(os.getenv("GEOFENCE_GRACE_METERS", "30"))
DEFAULT_MAX_ALLOWED_EXITS = int(os.getenv("DEFAULT_MAX_ALLOWED_EXITS", "3"))
ENFORCE_EXIT_LIMIT = bool(int(os.getenv("ENFORCE_EXIT_LIMIT", "0")))
BLACKLIST_WINDOW_DAYS = int(os.getenv("BLACKLIST_WINDOW_DAYS", "3"))

SYNC_MAX_BATCH_SIZE = int(os.getenv("SYNC_MAX_BATCH_SIZE", "100"))
SYNC_MAX_CLOCK_SKEW_MINUTES = int(os.getenv("SYNC_MAX_CLOCK_SKEW_MINUTES", "5"))
