from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ..common.datetime_utils import ceil_minutes_between
from ..geofence.model import Geofence


@dataclass(frozen=True)
class BreakWindow:
    """A site-wide pause declared by a site engineer, ``[started_at, ended_at)``."""

    break_id: int
    project_id: int
    started_at: datetime
    ended_at: datetime
    reason: Optional[str] = None
    created_by: Optional[int] = None

    def is_active(self, at: datetime) -> bool:
        return self.started_at <= at < self.ended_at

    def remaining_minutes(self, at: datetime) -> int:
        return ceil_minutes_between(at, self.ended_at)


@dataclass(frozen=True)
class Project:
    """Domain entity: a project site. Read-only for the attendance core."""

    project_id: int
    org_id: int
    name: str
    geofence: Geofence
    shift_start: Optional[time] = None
    shift_end: Optional[time] = None
