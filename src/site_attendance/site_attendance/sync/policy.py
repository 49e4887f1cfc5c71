from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from ..core.constants import DEFAULT_SYNC_MAX_BATCH_SIZE, DEFAULT_SYNC_MAX_CLOCK_SKEW_MINUTES


@dataclass(frozen=True)
class SyncPolicy:
    max_batch_size: int = DEFAULT_SYNC_MAX_BATCH_SIZE
    max_clock_skew: timedelta = timedelta(minutes=DEFAULT_SYNC_MAX_CLOCK_SKEW_MINUTES)

    @classmethod
    def from_settings(cls, settings) -> "SyncPolicy":
        return cls(
            max_batch_size=int(getattr(settings, "SYNC_MAX_BATCH_SIZE", DEFAULT_SYNC_MAX_BATCH_SIZE)),
            max_clock_skew=timedelta(
                minutes=int(getattr(settings, "SYNC_MAX_CLOCK_SKEW_MINUTES", DEFAULT_SYNC_MAX_CLOCK_SKEW_MINUTES))
            ),
        )
