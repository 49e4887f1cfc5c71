from __future__ import annotations

from datetime import datetime
from typing import Optional

import mysql.connector

from ..core.enums import SyncActionType, SyncOutcomeStatus
from ..core.exceptions import DuplicateActionError
from ..database.mysql_base import fetchone
from .model import IdempotencyRecord
from .repository import IdempotencyStore


class MySQLIdempotencyStore(IdempotencyStore):
    def __init__(self, cur):
        self._cur = cur

    def get(self, action_id: str) -> Optional[IdempotencyRecord]:
        self._cur.execute(
            """
            SELECT action_id, actor_id, action_type, status, entity_id, reason, processed_at
            FROM sync_action_log
            WHERE action_id=%s
            """,
            (action_id,),
        )
        r = fetchone(self._cur)
        if not r:
            return None
        return IdempotencyRecord(
            action_id=r["action_id"],
            actor_id=int(r["actor_id"]),
            action_type=SyncActionType(r["action_type"]),
            status=SyncOutcomeStatus(r["status"]),
            entity_id=int(r["entity_id"]) if r.get("entity_id") is not None else None,
            reason=r.get("reason"),
            processed_at=r.get("processed_at"),
        )

    def record(
        self,
        *,
        action_id: str,
        actor_id: int,
        action_type: SyncActionType,
        status: SyncOutcomeStatus,
        entity_id: Optional[int],
        reason: Optional[str],
        processed_at: datetime,
    ) -> IdempotencyRecord:
        try:
            self._cur.execute(
                """
                INSERT INTO sync_action_log(action_id, actor_id, action_type, status, entity_id, reason, processed_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (action_id, int(actor_id), action_type.value, status.value, entity_id, reason, processed_at),
            )
        except mysql.connector.IntegrityError as exc:
            raise DuplicateActionError(action_id) from exc
        return IdempotencyRecord(
            action_id=action_id,
            actor_id=int(actor_id),
            action_type=action_type,
            status=status,
            entity_id=entity_id,
            reason=reason,
            processed_at=processed_at,
        )
