from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import WageStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import WageRecord
from .repository import RateTable, WageRepository


def _to_wage(r: dict) -> WageRecord:
    return WageRecord(
        wage_id=int(r["wage_id"]),
        attendance_id=int(r["attendance_id"]),
        worker_id=int(r["worker_id"]),
        project_id=int(r["project_id"]),
        hourly_rate=as_decimal(r["hourly_rate"]),
        worked_hours=as_decimal(r["worked_hours"]),
        total_amount=as_decimal(r["total_amount"]),
        status=WageStatus(r["status"]),
        updated_at=r.get("updated_at"),
        work_date=r.get("work_date"),
    )


class MySQLWageRepository(WageRepository):
    def __init__(self, cur):
        self._cur = cur

    def get_for_attendance(self, attendance_id: int) -> Optional[WageRecord]:
        self._cur.execute(
            """
            SELECT w.wage_id, w.attendance_id, w.worker_id, w.project_id, w.hourly_rate, w.worked_hours,
                   w.total_amount, w.status, w.updated_at, a.work_date
            FROM wages w
            JOIN attendance_records a ON a.attendance_id = w.attendance_id
            WHERE w.attendance_id=%s
            """,
            (int(attendance_id),),
        )
        r = fetchone(self._cur)
        return _to_wage(r) if r else None

    def list_for_worker(self, worker_id: int) -> Sequence[WageRecord]:
        self._cur.execute(
            """
            SELECT w.wage_id, w.attendance_id, w.worker_id, w.project_id, w.hourly_rate, w.worked_hours,
                   w.total_amount, w.status, w.updated_at, a.work_date
            FROM wages w
            JOIN attendance_records a ON a.attendance_id = w.attendance_id
            WHERE w.worker_id=%s
            ORDER BY a.work_date DESC, w.wage_id DESC
            """,
            (int(worker_id),),
        )
        return [_to_wage(r) for r in fetchall(self._cur)]

    def upsert(
        self,
        *,
        attendance_id: int,
        worker_id: int,
        project_id: int,
        hourly_rate: Decimal,
        worked_hours: Decimal,
        total_amount: Decimal,
        updated_at: datetime,
    ) -> WageRecord:
        self._cur.execute(
            """
            INSERT INTO wages(attendance_id, worker_id, project_id, hourly_rate, worked_hours, total_amount, status, updated_at)
            VALUES(%s,%s,%s,%s,%s,%s,'PENDING',%s)
            ON DUPLICATE KEY UPDATE
                hourly_rate=VALUES(hourly_rate),
                worked_hours=VALUES(worked_hours),
                total_amount=VALUES(total_amount),
                updated_at=VALUES(updated_at)
            """,
            (int(attendance_id), int(worker_id), int(project_id), hourly_rate, worked_hours, total_amount, updated_at),
        )
        return self.get_for_attendance(attendance_id)


class MySQLRateTable(RateTable):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_hourly_rate(self, project_id: int, skill_type: str, category: str) -> Optional[Decimal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT hourly_rate FROM wage_rates
                WHERE project_id=%s AND skill_type=%s AND category=%s
                """,
                (int(project_id), skill_type, category),
            )
            r = fetchone(cur)
            return as_decimal(r["hourly_rate"]) if r else None
