from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.mysql_base import fetchall, fetchone, load_json, to_time
from ..geofence.model import Geofence
from .model import BreakWindow, Project
from .repository import ProjectRepository


def _to_break(r: dict) -> BreakWindow:
    return BreakWindow(
        break_id=int(r["break_id"]),
        project_id=int(r["project_id"]),
        started_at=r["started_at"],
        ended_at=r["ended_at"],
        reason=r.get("reason"),
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, cur):
        self._cur = cur

    def get_by_id(self, project_id: int) -> Optional[Project]:
        self._cur.execute(
            """
            SELECT project_id, org_id, name, geofence, shift_start, shift_end
            FROM projects
            WHERE project_id=%s
            """,
            (int(project_id),),
        )
        r = fetchone(self._cur)
        if not r:
            return None
        return Project(
            project_id=int(r["project_id"]),
            org_id=int(r["org_id"]),
            name=r["name"],
            geofence=Geofence.from_json(load_json(r.get("geofence")), project_id=int(r["project_id"])),
            shift_start=to_time(r.get("shift_start")),
            shift_end=to_time(r.get("shift_end")),
        )

    def get_active_break(self, project_id: int, at: datetime) -> Optional[BreakWindow]:
        self._cur.execute(
            """
            SELECT break_id, project_id, started_at, ended_at, reason, created_by
            FROM project_breaks
            WHERE project_id=%s AND started_at <= %s AND ended_at > %s
            ORDER BY started_at DESC
            LIMIT 1
            """,
            (int(project_id), at, at),
        )
        r = fetchone(self._cur)
        return _to_break(r) if r else None

    def create_break(
        self,
        *,
        project_id: int,
        started_at: datetime,
        ended_at: datetime,
        reason: Optional[str],
        created_by: int,
    ) -> int:
        self._cur.execute(
            """
            INSERT INTO project_breaks(project_id, started_at, ended_at, reason, created_by)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (int(project_id), started_at, ended_at, reason, int(created_by)),
        )
        return int(self._cur.lastrowid)

    def list_breaks(self, project_id: int, limit: int) -> Sequence[BreakWindow]:
        self._cur.execute(
            """
            SELECT break_id, project_id, started_at, ended_at, reason, created_by
            FROM project_breaks
            WHERE project_id=%s
            ORDER BY started_at DESC
            LIMIT %s
            """,
            (int(project_id), int(limit)),
        )
        return [_to_break(r) for r in fetchall(self._cur)]
