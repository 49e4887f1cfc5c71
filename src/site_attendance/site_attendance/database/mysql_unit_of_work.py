from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..attendance.mysql_attendance_repository import MySQLAttendanceRepository, MySQLBlacklistRepository
from ..events.audit import EventBus, TransitionEvent
from ..payroll.mysql_wage_repository import MySQLWageRepository
from ..projects.mysql_project_repository import MySQLProjectRepository
from ..sync.mysql_idempotency_repository import MySQLIdempotencyStore
from ..workers.mysql_worker_repository import MySQLWorkerRepository
from .connection import DatabaseConnection
from .mysql_base import transaction


@dataclass
class MySQLTransaction:
    attendance: MySQLAttendanceRepository
    blacklist: MySQLBlacklistRepository
    wages: MySQLWageRepository
    projects: MySQLProjectRepository
    workers: MySQLWorkerRepository
    idempotency: MySQLIdempotencyStore
    events: list[TransitionEvent] = field(default_factory=list)

    @classmethod
    def over(cls, cur) -> "MySQLTransaction":
        return cls(
            attendance=MySQLAttendanceRepository(cur),
            blacklist=MySQLBlacklistRepository(cur),
            wages=MySQLWageRepository(cur),
            projects=MySQLProjectRepository(cur),
            workers=MySQLWorkerRepository(cur),
            idempotency=MySQLIdempotencyStore(cur),
        )


class MySQLUnitOfWork:
    def __init__(self, conn_factory: DatabaseConnection, *, events: Optional[EventBus] = None):
        self._conn_factory = conn_factory
        self._events = events or EventBus()

    @contextmanager
    def begin(self) -> Iterator[MySQLTransaction]:
        with transaction(self._conn_factory) as (_, cur):
            tx = MySQLTransaction.over(cur)
            yield tx
        # Reached only after COMMIT succeeded.
        self._events.publish(tx.events)
