from __future__ import annotations

import math
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse HH:MM (or HH:MM:SS) into time."""
    fmt = "%H:%M:%S" if value.count(":") == 2 else "%H:%M"
    return datetime.strptime(value.strip(), fmt).time()


def parse_client_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 client timestamp into naive local time.

    Aware timestamps are converted to the server's local zone so they compare
    with ``now_local()``.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid timestamp: {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def elapsed_minutes(start: datetime, end: datetime) -> Decimal:
    """Minutes between two instants, to the hundredth (half-up)."""
    seconds = Decimal(str((end - start).total_seconds()))
    return (seconds / 60).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def ceil_minutes_between(start: datetime, end: datetime) -> int:
    return max(math.ceil((end - start).total_seconds() / 60), 0)


def ceil_hours_between(start: datetime, end: datetime) -> int:
    return max(math.ceil((end - start).total_seconds() / 3600), 0)
