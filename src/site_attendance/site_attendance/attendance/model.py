from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from ..core.enums import ApprovalStatus, AttendanceOrigin, AttendanceState
from ..geofence.model import Coordinates


@dataclass(frozen=True)
class AttendanceSession:
    """A contiguous, fence-confirmed work interval.

    ``worked_minutes`` is fixed when the session closes and never recomputed;
    it is the exact elapsed time in minutes, kept to the hundredth.
    """

    session_id: int
    attendance_id: int
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    worked_minutes: Optional[Decimal] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one per (worker, project, calendar day).

    ``state`` is a cache of ``derive_state``; it is only ever written by the
    ledger after recomputing it.
    """

    attendance_id: int
    worker_id: int
    project_id: int
    org_id: int
    work_date: date
    state: AttendanceState
    approval_status: ApprovalStatus = ApprovalStatus.APPROVED
    origin: AttendanceOrigin = AttendanceOrigin.AUTOMATIC
    approved_by: Optional[int] = None
    worked_minutes: Decimal = Decimal("0.00")
    is_breached: bool = False
    exit_count: int = 0
    max_allowed_exits: int = 3
    last_known: Optional[Coordinates] = None
    last_event_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None

    @property
    def exits_remaining(self) -> int:
        return max(self.max_allowed_exits - self.exit_count, 0)


@dataclass(frozen=True)
class BlacklistEntry:
    entry_id: int
    org_id: int
    worker_id: int
    created_at: datetime
    reason: Optional[str] = None

    def expires_at(self, window: timedelta) -> datetime:
        return self.created_at + window

    def is_active(self, at: datetime, window: timedelta) -> bool:
        return self.expires_at(window) > at
