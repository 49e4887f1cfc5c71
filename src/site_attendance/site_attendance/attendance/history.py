from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..database.unit_of_work import Transaction, UnitOfWork
from .model import AttendanceRecord, AttendanceSession


def _session_to_dict(s: AttendanceSession) -> dict:
    return {
        "session_id": s.session_id,
        "check_in_time": s.check_in_time.isoformat(),
        "check_out_time": s.check_out_time.isoformat() if s.check_out_time else None,
        "worked_minutes": str(s.worked_minutes) if s.worked_minutes is not None else None,
    }


@dataclass(frozen=True)
class AttendanceDay:
    record: AttendanceRecord
    project_name: Optional[str] = None
    sessions: tuple[AttendanceSession, ...] = ()

    def to_dict(self) -> dict:
        r = self.record
        return {
            "attendance_id": r.attendance_id,
            "project_id": r.project_id,
            "project_name": self.project_name,
            "work_date": r.work_date.isoformat(),
            "state": r.state.value,
            "approval_status": r.approval_status.value,
            "origin": r.origin.value,
            "approved_by": r.approved_by,
            "worked_minutes": str(r.worked_minutes),
            "exit_count": r.exit_count,
            "checked_out_at": r.checked_out_at.isoformat() if r.checked_out_at else None,
            "sessions": [_session_to_dict(s) for s in self.sessions],
        }


class AttendanceHistory:
    """Read-only views of a worker's own attendance."""

    def __init__(self, uow: UnitOfWork):
        self._uow = uow

    @staticmethod
    def _project_names(t: Transaction, records: Sequence[AttendanceRecord]) -> dict[int, str]:
        names = {}
        for project_id in {r.project_id for r in records}:
            project = t.projects.get_by_id(project_id)
            if project:
                names[project_id] = project.name
        return names

    def history(self, worker_id: int, *, limit: int = 30) -> list[AttendanceDay]:
        with self._uow.begin() as t:
            records = list(t.attendance.list_for_worker(worker_id, max(int(limit), 1)))
            names = self._project_names(t, records)
        return [AttendanceDay(record=r, project_name=names.get(r.project_id)) for r in records]

    def today(self, worker_id: int, *, now: Optional[datetime] = None) -> Optional[AttendanceDay]:
        today = (now or now_local()).date()
        with self._uow.begin() as t:
            record = t.attendance.find_open_for_worker(worker_id, today) or t.attendance.find_latest_for_worker(
                worker_id, today
            )
            if not record:
                return None
            sessions = tuple(t.attendance.list_sessions(record.attendance_id))
            names = self._project_names(t, [record])
        return AttendanceDay(record=record, project_name=names.get(record.project_id), sessions=sessions)
