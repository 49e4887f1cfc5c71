from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus, AttendanceOrigin
from .model import AttendanceRecord, AttendanceSession, BlacklistEntry


class AttendanceRepository(Protocol):
    def lock_worker(self, worker_id: int) -> None:
        """Serialize all transitions of one worker until the transaction ends."""

        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_for_day(self, worker_id: int, project_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_open_for_worker(self, worker_id: int, work_date: date) -> Optional[AttendanceRecord]:
        """The worker's ACTIVE or PAUSED record of the day, on any project."""

        raise NotImplementedError

    def find_latest_for_worker(self, worker_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_ids_for_date(self, work_date: date) -> Sequence[int]:
        raise NotImplementedError

    def list_for_worker(self, worker_id: int, limit: int) -> Sequence[AttendanceRecord]:
        """Newest day first."""

        raise NotImplementedError

    def create_record(
        self,
        *,
        worker_id: int,
        project_id: int,
        org_id: int,
        work_date: date,
        approval_status: ApprovalStatus,
        origin: AttendanceOrigin,
        max_allowed_exits: int,
        created_at: datetime,
    ) -> AttendanceRecord:
        raise NotImplementedError

    def save(self, record: AttendanceRecord) -> None:
        raise NotImplementedError

    def set_approval(
        self,
        attendance_id: int,
        *,
        approval_status: ApprovalStatus,
        origin: AttendanceOrigin,
        approved_by: Optional[int],
    ) -> AttendanceRecord:
        raise NotImplementedError

    def list_sessions(self, attendance_id: int) -> Sequence[AttendanceSession]:
        raise NotImplementedError

    def open_session(self, *, attendance_id: int, check_in_time: datetime) -> AttendanceSession:
        """Raises ConflictError if the record already has an open session."""

        raise NotImplementedError

    def close_session(self, *, session_id: int, check_out_time: datetime, worked_minutes: Decimal) -> AttendanceSession:
        """Raises ConflictError if the session was already closed or would end before it began."""

        raise NotImplementedError


class BlacklistRepository(Protocol):
    def get_latest(self, org_id: int, worker_id: int) -> Optional[BlacklistEntry]:
        raise NotImplementedError

    def add(self, *, org_id: int, worker_id: int, reason: str, created_at: datetime) -> BlacklistEntry:
        raise NotImplementedError

    def get_by_id(self, entry_id: int) -> Optional[BlacklistEntry]:
        raise NotImplementedError

    def list_for_orgs(self, org_ids: Sequence[int]) -> Sequence[BlacklistEntry]:
        """Newest entry first."""

        raise NotImplementedError

    def remove(self, entry_id: int) -> bool:
        raise NotImplementedError
