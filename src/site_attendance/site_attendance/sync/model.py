from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.enums import RejectionReason, SyncActionType, SyncOutcomeStatus
from ..geofence.model import Coordinates


@dataclass(frozen=True)
class SyncAction:
    """A client-authored action, already validated. Never persisted as-is."""

    action_id: str
    action_type: SyncActionType
    payload: dict
    project_id: Optional[int] = None
    timestamp: Optional[datetime] = None
    point: Optional[Coordinates] = None


@dataclass(frozen=True)
class IdempotencyRecord:
    action_id: str
    actor_id: int
    action_type: SyncActionType
    status: SyncOutcomeStatus
    entity_id: Optional[int] = None
    reason: Optional[str] = None
    processed_at: Optional[datetime] = None


@dataclass
class SyncReport:
    applied: list[dict] = field(default_factory=list)
    rejected: list[dict] = field(default_factory=list)
    skipped: list[dict] = field(default_factory=list)

    def add_applied(self, action: SyncAction, entity_id: Optional[int]) -> None:
        self.applied.append({"id": action.action_id, "action_type": action.action_type.value, "entity_id": entity_id})

    def add_rejected(
        self,
        action_id: Any,
        action_type: Any,
        reason: RejectionReason,
        message: str,
        *,
        detail: Optional[dict] = None,
        retryable: bool = False,
    ) -> None:
        item = {
            "id": action_id,
            "action_type": action_type,
            "reason": reason.value,
            "message": message,
            "retryable": retryable,
        }
        if detail:
            item["detail"] = detail
        self.rejected.append(item)

    def add_skipped(self, prior: IdempotencyRecord) -> None:
        item = {
            "id": prior.action_id,
            "action_type": prior.action_type.value,
            "status": prior.status.value,
            "entity_id": prior.entity_id,
            "reason": "DUPLICATE",
        }
        if prior.reason:
            item["original_reason"] = prior.reason
        self.skipped.append(item)

    @property
    def summary(self) -> dict:
        return {
            "total": len(self.applied) + len(self.rejected) + len(self.skipped),
            "applied": len(self.applied),
            "rejected": len(self.rejected),
            "skipped": len(self.skipped),
        }

    def to_dict(self) -> dict:
        return {
            "applied": self.applied,
            "rejected": self.rejected,
            "skipped": self.skipped,
            "summary": self.summary,
        }
