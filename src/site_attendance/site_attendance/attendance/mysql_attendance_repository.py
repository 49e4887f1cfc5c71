from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import ApprovalStatus, AttendanceOrigin, AttendanceState
from ..core.exceptions import ConflictError
from ..database.mysql_base import as_decimal, fetchall, fetchone
from ..geofence.model import Coordinates
from .model import AttendanceRecord, AttendanceSession, BlacklistEntry
from .repository import AttendanceRepository, BlacklistRepository

_RECORD_COLUMNS = """
    attendance_id, worker_id, project_id, org_id, work_date, state, approval_status, origin, approved_by,
    worked_minutes, is_breached, exit_count, max_allowed_exits,
    last_known_lat, last_known_lng, last_event_at, checked_out_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    last_known = None
    if r.get("last_known_lat") is not None and r.get("last_known_lng") is not None:
        last_known = Coordinates(latitude=float(r["last_known_lat"]), longitude=float(r["last_known_lng"]))

    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        worker_id=int(r["worker_id"]),
        project_id=int(r["project_id"]),
        org_id=int(r["org_id"]),
        work_date=r["work_date"],
        state=AttendanceState(r["state"]),
        approval_status=ApprovalStatus(r["approval_status"]),
        origin=AttendanceOrigin(r["origin"]),
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        worked_minutes=as_decimal(r.get("worked_minutes")) or Decimal("0.00"),
        is_breached=bool(r.get("is_breached")),
        exit_count=int(r.get("exit_count") or 0),
        max_allowed_exits=int(r["max_allowed_exits"]),
        last_known=last_known,
        last_event_at=r.get("last_event_at"),
        checked_out_at=r.get("checked_out_at"),
    )


def _to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        attendance_id=int(r["attendance_id"]),
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        worked_minutes=as_decimal(r.get("worked_minutes")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    """Cursor-bound repository; every call runs inside the caller's transaction."""

    def __init__(self, cur):
        self._cur = cur

    def lock_worker(self, worker_id: int) -> None:
        self._cur.execute("SELECT worker_id FROM workers WHERE worker_id=%s FOR UPDATE", (int(worker_id),))
        fetchone(self._cur)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        self._cur.execute(
            f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE attendance_id=%s",
            (int(attendance_id),),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

    def find_for_day(self, worker_id: int, project_id: int, work_date: date) -> Optional[AttendanceRecord]:
        self._cur.execute(
            f"""
            SELECT {_RECORD_COLUMNS} FROM attendance_records
            WHERE worker_id=%s AND project_id=%s AND work_date=%s
            """,
            (int(worker_id), int(project_id), work_date),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

    def find_open_for_worker(self, worker_id: int, work_date: date) -> Optional[AttendanceRecord]:
        self._cur.execute(
            f"""
            SELECT {_RECORD_COLUMNS} FROM attendance_records
            WHERE worker_id=%s AND work_date=%s AND state IN ('ACTIVE', 'PAUSED')
            ORDER BY attendance_id DESC
            LIMIT 1
            """,
            (int(worker_id), work_date),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

    def find_latest_for_worker(self, worker_id: int, work_date: date) -> Optional[AttendanceRecord]:
        self._cur.execute(
            f"""
            SELECT {_RECORD_COLUMNS} FROM attendance_records
            WHERE worker_id=%s AND work_date=%s
            ORDER BY attendance_id DESC
            LIMIT 1
            """,
            (int(worker_id), work_date),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

    def list_ids_for_date(self, work_date: date) -> Sequence[int]:
        self._cur.execute(
            "SELECT attendance_id FROM attendance_records WHERE work_date=%s ORDER BY attendance_id",
            (work_date,),
        )
        return [int(r["attendance_id"]) for r in fetchall(self._cur)]

    def list_for_worker(self, worker_id: int, limit: int) -> Sequence[AttendanceRecord]:
        self._cur.execute(
            f"""
            SELECT {_RECORD_COLUMNS} FROM attendance_records
            WHERE worker_id=%s
            ORDER BY work_date DESC, attendance_id DESC
            LIMIT %s
            """,
            (int(worker_id), int(limit)),
        )
        return [_to_record(r) for r in fetchall(self._cur)]

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
        try:
            self._cur.execute(
                """
                INSERT INTO attendance_records(
                    worker_id, project_id, org_id, work_date, state, approval_status, origin,
                    max_allowed_exits, last_event_at, created_at
                )
                VALUES(%s,%s,%s,%s,'INACTIVE',%s,%s,%s,%s,%s)
                """,
                (
                    int(worker_id),
                    int(project_id),
                    int(org_id),
                    work_date,
                    approval_status.value,
                    origin.value,
                    int(max_allowed_exits),
                    created_at,
                    created_at,
                ),
            )
        except mysql.connector.IntegrityError as exc:
            raise ConflictError(f"Attendance already exists for worker {worker_id} on {work_date}") from exc
        return self.get_by_id(int(self._cur.lastrowid))

    def save(self, record: AttendanceRecord) -> None:
        self._cur.execute(
            """
            UPDATE attendance_records
            SET state=%s, worked_minutes=%s, is_breached=%s, exit_count=%s,
                last_known_lat=%s, last_known_lng=%s, last_event_at=%s, checked_out_at=%s
            WHERE attendance_id=%s
            """,
            (
                record.state.value,
                record.worked_minutes,
                1 if record.is_breached else 0,
                int(record.exit_count),
                record.last_known.latitude if record.last_known else None,
                record.last_known.longitude if record.last_known else None,
                record.last_event_at,
                record.checked_out_at,
                int(record.attendance_id),
            ),
        )

    def set_approval(
        self,
        attendance_id: int,
        *,
        approval_status: ApprovalStatus,
        origin: AttendanceOrigin,
        approved_by: Optional[int],
    ) -> AttendanceRecord:
        self._cur.execute(
            """
            UPDATE attendance_records
            SET approval_status=%s, origin=%s, approved_by=%s
            WHERE attendance_id=%s
            """,
            (approval_status.value, origin.value, approved_by, int(attendance_id)),
        )
        return self.get_by_id(attendance_id)

    def list_sessions(self, attendance_id: int) -> Sequence[AttendanceSession]:
        self._cur.execute(
            """
            SELECT session_id, attendance_id, check_in_time, check_out_time, worked_minutes
            FROM attendance_sessions
            WHERE attendance_id=%s
            ORDER BY check_in_time, session_id
            """,
            (int(attendance_id),),
        )
        return [_to_session(r) for r in fetchall(self._cur)]

    def open_session(self, *, attendance_id: int, check_in_time: datetime) -> AttendanceSession:
        try:
            self._cur.execute(
                "INSERT INTO attendance_sessions(attendance_id, check_in_time) VALUES(%s,%s)",
                (int(attendance_id), check_in_time),
            )
        except mysql.connector.IntegrityError as exc:
            # uq_one_open_session: a second open row for the same record.
            raise ConflictError(f"Attendance {attendance_id} already has an open session") from exc
        return AttendanceSession(
            session_id=int(self._cur.lastrowid),
            attendance_id=int(attendance_id),
            check_in_time=check_in_time,
        )

    def close_session(self, *, session_id: int, check_out_time: datetime, worked_minutes: Decimal) -> AttendanceSession:
        try:
            self._cur.execute(
                """
                UPDATE attendance_sessions
                SET check_out_time=%s, worked_minutes=%s
                WHERE session_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, worked_minutes, int(session_id)),
            )
        except mysql.connector.IntegrityError as exc:
            # chk_session_order: check-out must be after check-in.
            raise ConflictError(f"Session {session_id} cannot close at {check_out_time.isoformat()}") from exc
        if self._cur.rowcount == 0:
            raise ConflictError(f"Session {session_id} is already closed")

        self._cur.execute(
            """
            SELECT session_id, attendance_id, check_in_time, check_out_time, worked_minutes
            FROM attendance_sessions
            WHERE session_id=%s
            """,
            (int(session_id),),
        )
        return _to_session(fetchone(self._cur))


_BLACKLIST_COLUMNS = "entry_id, org_id, worker_id, reason, created_at"


def _to_entry(r: dict) -> BlacklistEntry:
    return BlacklistEntry(
        entry_id=int(r["entry_id"]),
        org_id=int(r["org_id"]),
        worker_id=int(r["worker_id"]),
        created_at=r["created_at"],
        reason=r.get("reason"),
    )


class MySQLBlacklistRepository(BlacklistRepository):
    def __init__(self, cur):
        self._cur = cur

    def get_latest(self, org_id: int, worker_id: int) -> Optional[BlacklistEntry]:
        self._cur.execute(
            f"""
            SELECT {_BLACKLIST_COLUMNS}
            FROM organization_blacklist
            WHERE org_id=%s AND worker_id=%s
            ORDER BY created_at DESC
            LIMIT 1
            """,
            (int(org_id), int(worker_id)),
        )
        r = fetchone(self._cur)
        return _to_entry(r) if r else None

    def add(self, *, org_id: int, worker_id: int, reason: str, created_at: datetime) -> BlacklistEntry:
        # One row per (org, worker); a repeat offence restarts the window.
        self._cur.execute(
            """
            INSERT INTO organization_blacklist(org_id, worker_id, reason, created_at)
            VALUES(%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE reason=VALUES(reason), created_at=VALUES(created_at)
            """,
            (int(org_id), int(worker_id), reason, created_at),
        )
        return self.get_latest(org_id, worker_id)

    def get_by_id(self, entry_id: int) -> Optional[BlacklistEntry]:
        self._cur.execute(
            f"SELECT {_BLACKLIST_COLUMNS} FROM organization_blacklist WHERE entry_id=%s",
            (int(entry_id),),
        )
        r = fetchone(self._cur)
        return _to_entry(r) if r else None

    def list_for_orgs(self, org_ids: Sequence[int]) -> Sequence[BlacklistEntry]:
        if not org_ids:
            return []
        placeholders = ",".join(["%s"] * len(org_ids))
        self._cur.execute(
            f"""
            SELECT {_BLACKLIST_COLUMNS}
            FROM organization_blacklist
            WHERE org_id IN ({placeholders})
            ORDER BY created_at DESC, entry_id DESC
            """,
            tuple(int(o) for o in org_ids),
        )
        return [_to_entry(r) for r in fetchall(self._cur)]

    def remove(self, entry_id: int) -> bool:
        self._cur.execute("DELETE FROM organization_blacklist WHERE entry_id=%s", (int(entry_id),))
        return self._cur.rowcount > 0
