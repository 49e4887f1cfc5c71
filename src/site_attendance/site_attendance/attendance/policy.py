from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time, timedelta

from ..common.datetime_utils import parse_hhmm
from ..core.constants import (
    DEFAULT_BLACKLIST_WINDOW_DAYS,
    DEFAULT_CHECKIN_OPENS_AT,
    DEFAULT_GEOFENCE_GRACE_METERS,
    DEFAULT_MAX_ALLOWED_EXITS,
)


@dataclass(frozen=True)
class LedgerPolicy:
    """Tunable guards of the attendance state machine.

    ``enforce_exit_limit`` toggles the exit-count blacklist; the transition
    stays wired either way.
    """

    checkin_opens_at: time = field(default_factory=lambda: parse_hhmm(DEFAULT_CHECKIN_OPENS_AT))
    grace_meters: float = float(DEFAULT_GEOFENCE_GRACE_METERS)
    default_max_exits: int = DEFAULT_MAX_ALLOWED_EXITS
    enforce_exit_limit: bool = False
    blacklist_window: timedelta = timedelta(days=DEFAULT_BLACKLIST_WINDOW_DAYS)

    @classmethod
    def from_settings(cls, settings) -> "LedgerPolicy":
        return cls(
            checkin_opens_at=parse_hhmm(str(getattr(settings, "CHECKIN_OPENS_AT", DEFAULT_CHECKIN_OPENS_AT))),
            grace_meters=float(getattr(settings, "GEOFENCE_GRACE_METERS", DEFAULT_GEOFENCE_GRACE_METERS)),
            default_max_exits=int(getattr(settings, "DEFAULT_MAX_ALLOWED_EXITS", DEFAULT_MAX_ALLOWED_EXITS)),
            enforce_exit_limit=bool(getattr(settings, "ENFORCE_EXIT_LIMIT", False)),
            blacklist_window=timedelta(
                days=int(getattr(settings, "BLACKLIST_WINDOW_DAYS", DEFAULT_BLACKLIST_WINDOW_DAYS))
            ),
        )
