import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "site_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

CHECKIN_OPENS_AT = "06:00"
GEOFENCE_GRACE_METERS = 30.0
DEFAULT_MAX_ALLOWED_EXITS = 3
ENFORCE_EXIT_LIMIT = False
BLACKLIST_WINDOW_DAYS = 3

SYNC_MAX_BATCH_SIZE = 100
SYNC_MAX_CLOCK_SKEW_MINUTES = 5
