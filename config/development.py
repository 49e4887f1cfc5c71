import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "site_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Applies database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

CHECKIN_OPENS_AT = os.getenv("CHECKIN_OPENS_AT", "06:00")
GEOFENCE_GRACE_METERS = float(os.getenv("GEOFENCE_GRACE_METERS", "30"))
DEFAULT_MAX_ALLOWED_EXITS = int(os.getenv("DEFAULT_MAX_ALLOWED_EXITS", "3"))
ENFORCE_EXIT_LIMIT = bool(int(os.getenv("ENFORCE_EXIT_LIMIT", "0")))
BLACKLIST_WINDOW_DAYS = int(os.getenv("BLACKLIST_WINDOW_DAYS", "3"))

SYNC_MAX_BATCH_SIZE = int(os.getenv("SYNC_MAX_BATCH_SIZE", "100"))
SYNC_MAX_CLOCK_SKEW_MINUTES = int(os.getenv("SYNC_MAX_CLOCK_SKEW_MINUTES", "5"))
