"""Transition events and the audit/notification sinks that consume them.

The ledger only appends events to the open transaction; the unit of work
publishes them once the transaction has committed. A listener that fails is
logged and skipped: audit trails never change a transition's outcome.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional, Protocol

from ..core.enums import TransitionKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionEvent:
    kind: TransitionKind
    worker_id: int
    project_id: int
    attendance_id: Optional[int]
    occurred_at: datetime
    detail: dict[str, Any] = field(default_factory=dict)


class TransitionListener(Protocol):
    def __call__(self, event: TransitionEvent) -> None:
        ...


class EventBus:
    def __init__(self, listeners: Iterable[TransitionListener] = ()):
        self._listeners: list[TransitionListener] = list(listeners)

    def subscribe(self, listener: TransitionListener) -> None:
        self._listeners.append(listener)

    def publish(self, events: Iterable[TransitionEvent]) -> None:
        for event in events:
            for listener in self._listeners:
                try:
                    listener(event)
                except Exception:
                    logger.exception("Audit listener %r failed for %s", listener, event.kind.value)


class LoggingAuditListener:
    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logging.getLogger("site_attendance.audit")

    def __call__(self, event: TransitionEvent) -> None:
        self._log.info(
            "%s worker=%s project=%s attendance=%s at=%s %s",
            event.kind.value,
            event.worker_id,
            event.project_id,
            event.attendance_id,
            event.occurred_at.isoformat(),
            event.detail,
        )


class MySQLAuditListener:
    """Writes every transition into audit_logs for the compliance trail."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def __call__(self, event: TransitionEvent) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(entity_type, entity_id, action, worker_id, project_id, occurred_at, change_summary)
                VALUES('ATTENDANCE', %s, %s, %s, %s, %s, %s)
                """,
                (
                    event.attendance_id,
                    event.kind.value,
                    event.worker_id,
                    event.project_id,
                    event.occurred_at,
                    json.dumps(event.detail, default=str),
                ),
            )
