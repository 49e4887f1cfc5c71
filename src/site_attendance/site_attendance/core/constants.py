"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000

DEFAULT_CHECKIN_OPENS_AT = "06:00"
DEFAULT_GEOFENCE_GRACE_METERS = 30
DEFAULT_MAX_ALLOWED_EXITS = 3
DEFAULT_BLACKLIST_WINDOW_DAYS = 3

MIN_BREAK_MINUTES = 60
MAX_BREAK_MINUTES = 120

DEFAULT_SYNC_MAX_BATCH_SIZE = 100
DEFAULT_SYNC_MAX_CLOCK_SKEW_MINUTES = 5
MAX_ACTION_ID_LENGTH = 64
