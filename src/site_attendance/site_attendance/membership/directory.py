"""Membership/authorization collaborator.

The attendance core asks whether a worker is an approved participant of a
project and whether their category still has capacity. The supervision
services ask which organizations a manager runs and which projects a site
engineer is assigned to.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone


@dataclass(frozen=True)
class CapacityCheck:
    has_capacity: bool
    category: Optional[str] = None
    current_count: int = 0
    required_count: int = 0

    def as_detail(self) -> dict:
        return {
            "category": self.category,
            "current_count": self.current_count,
            "required_count": self.required_count,
        }


class MembershipDirectory(Protocol):
    def is_authorized(self, worker_id: int, project_id: int) -> bool:
        raise NotImplementedError

    def has_category_capacity(self, worker_id: int, project_id: int) -> CapacityCheck:
        raise NotImplementedError

    def managed_organizations(self, manager_id: int) -> Sequence[int]:
        raise NotImplementedError

    def is_site_engineer_of(self, engineer_id: int, project_id: int) -> bool:
        raise NotImplementedError


class MySQLMembershipDirectory(MembershipDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def is_authorized(self, worker_id: int, project_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT pp.participant_id
                FROM project_participants pp
                JOIN labour_requests lr ON lr.request_id = pp.request_id
                WHERE pp.worker_id=%s AND lr.project_id=%s AND pp.status='APPROVED'
                LIMIT 1
                """,
                (int(worker_id), int(project_id)),
            )
            return fetchone(cur) is not None

    def has_category_capacity(self, worker_id: int, project_id: int) -> CapacityCheck:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT lr.request_id, lr.category, lr.required_count
                FROM project_participants pp
                JOIN labour_requests lr ON lr.request_id = pp.request_id
                WHERE pp.worker_id=%s AND lr.project_id=%s AND pp.status='APPROVED'
                ORDER BY pp.joined_at DESC
                LIMIT 1
                """,
                (int(worker_id), int(project_id)),
            )
            req = fetchone(cur)
            if not req:
                return CapacityCheck(has_capacity=False)

            cur.execute(
                """
                SELECT COUNT(*) AS approved_count
                FROM project_participants
                WHERE request_id=%s AND status='APPROVED'
                """,
                (int(req["request_id"]),),
            )
            current = int((fetchone(cur) or {}).get("approved_count") or 0)
            required = int(req["required_count"] or 0)
            return CapacityCheck(
                has_capacity=current <= required,
                category=req["category"],
                current_count=current,
                required_count=required,
            )

    def managed_organizations(self, manager_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT org_id FROM organization_managers WHERE manager_id=%s ORDER BY org_id",
                (int(manager_id),),
            )
            return [int(r["org_id"]) for r in fetchall(cur)]

    def is_site_engineer_of(self, engineer_id: int, project_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS assigned FROM project_site_engineers WHERE engineer_id=%s AND project_id=%s",
                (int(engineer_id), int(project_id)),
            )
            return fetchone(cur) is not None
