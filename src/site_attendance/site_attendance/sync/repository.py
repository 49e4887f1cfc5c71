from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import SyncActionType, SyncOutcomeStatus
from .model import IdempotencyRecord


class IdempotencyStore(Protocol):
    def get(self, action_id: str) -> Optional[IdempotencyRecord]:
        raise NotImplementedError

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
        """Raises DuplicateActionError if ``action_id`` was already recorded."""

        raise NotImplementedError
