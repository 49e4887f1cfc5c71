from __future__ import annotations

from typing import Optional

from ..database.mysql_base import fetchone
from ..geofence.model import Coordinates
from .model import Worker
from .repository import WorkerRepository


class MySQLWorkerRepository(WorkerRepository):
    def __init__(self, cur):
        self._cur = cur

    def get_by_id(self, worker_id: int) -> Optional[Worker]:
        self._cur.execute(
            """
            SELECT worker_id, full_name, skill_type, category, home_lat, home_lng, travel_radius_km
            FROM workers
            WHERE worker_id=%s
            """,
            (int(worker_id),),
        )
        r = fetchone(self._cur)
        if not r:
            return None

        home = None
        if r.get("home_lat") is not None and r.get("home_lng") is not None:
            home = Coordinates(latitude=float(r["home_lat"]), longitude=float(r["home_lng"]))

        return Worker(
            worker_id=int(r["worker_id"]),
            full_name=r["full_name"],
            skill_type=r["skill_type"],
            category=r["category"],
            home=home,
            travel_radius_km=float(r["travel_radius_km"]) if r.get("travel_radius_km") is not None else None,
        )
