from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Union

from ..attendance.ledger import AttendanceLedger
from ..attendance.results import CheckInResult, CheckOutResult, Rejection, TrackResult
from ..common.datetime_utils import now_local
from ..core.enums import RejectionReason, Role, SyncActionType, SyncOutcomeStatus
from ..core.exceptions import DuplicateActionError, ValidationError
from ..database.unit_of_work import Transaction, UnitOfWork
from ..membership.directory import MembershipDirectory
from .model import SyncAction, SyncReport
from .policy import SyncPolicy
from .validation import parse_action, validate_batch

logger = logging.getLogger(__name__)

LedgerOutcome = Union[CheckInResult, CheckOutResult, TrackResult, Rejection]


class SyncReconciler:
    """Replays an offline batch through the live ledger operations.

    Actions run strictly in submission order, each in its own transaction
    together with its idempotency row. One action failing never touches the
    others.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: AttendanceLedger,
        membership: MembershipDirectory,
        *,
        policy: Optional[SyncPolicy] = None,
    ):
        self._uow = uow
        self._ledger = ledger
        self._membership = membership
        self._policy = policy or SyncPolicy()

    def sync_batch(
        self,
        actor_id: int,
        actor_role: str,
        actions: Any,
        *,
        now: Optional[datetime] = None,
    ) -> SyncReport:
        validate_batch(actions, max_size=self._policy.max_batch_size)
        now = now or now_local()
        report = SyncReport()

        for raw in actions:
            try:
                action = parse_action(raw, now=now, max_clock_skew=self._policy.max_clock_skew)
            except ValidationError as exc:
                raw_id = raw.get("id") if isinstance(raw, dict) else None
                raw_type = raw.get("action_type") if isinstance(raw, dict) else None
                report.add_rejected(raw_id, raw_type, RejectionReason.INVALID_ACTION, str(exc))
                continue

            try:
                self._process(actor_id, actor_role, action, report, now=now)
            except DuplicateActionError:
                # A concurrent replay committed first; ours was rolled back.
                with self._uow.begin() as tx:
                    prior = tx.idempotency.get(action.action_id)
                if prior:
                    report.add_skipped(prior)
                else:
                    report.add_rejected(
                        action.action_id,
                        action.action_type.value,
                        RejectionReason.INTERNAL_ERROR,
                        "Concurrent replay could not be resolved",
                        retryable=True,
                    )
            except Exception:
                logger.exception("Sync action %s failed", action.action_id)
                report.add_rejected(
                    action.action_id,
                    action.action_type.value,
                    RejectionReason.INTERNAL_ERROR,
                    "Unexpected error while applying action",
                    retryable=True,
                )

        logger.info("Sync batch for worker %s: %s", actor_id, report.summary)
        return report

    def _process(self, actor_id: int, actor_role: str, action: SyncAction, report: SyncReport, *, now: datetime) -> None:
        with self._uow.begin() as tx:
            prior = tx.idempotency.get(action.action_id)
            if prior:
                report.add_skipped(prior)
                return

            denial = self._authorize(tx, actor_id, actor_role, action)
            if denial:
                logger.warning("Sync action %s denied for %s: %s", action.action_id, actor_id, denial)
                report.add_rejected(action.action_id, action.action_type.value, RejectionReason.UNAUTHORIZED, denial)
                return

            outcome = self._apply(tx, actor_id, action, now=now)
            if isinstance(outcome, Rejection):
                tx.idempotency.record(
                    action_id=action.action_id,
                    actor_id=actor_id,
                    action_type=action.action_type,
                    status=SyncOutcomeStatus.REJECTED,
                    entity_id=None,
                    reason=outcome.reason.value,
                    processed_at=now,
                )
                report.add_rejected(
                    action.action_id,
                    action.action_type.value,
                    outcome.reason,
                    outcome.message,
                    detail=outcome.detail,
                )
                return

            tx.idempotency.record(
                action_id=action.action_id,
                actor_id=actor_id,
                action_type=action.action_type,
                status=SyncOutcomeStatus.APPLIED,
                entity_id=outcome.attendance_id,
                reason=None,
                processed_at=now,
            )
            report.add_applied(action, outcome.attendance_id)

    def _authorize(self, tx: Transaction, actor_id: int, actor_role: str, action: SyncAction) -> Optional[str]:
        if actor_role != Role.LABOUR.value:
            return "Only labour accounts can sync attendance actions"
        if not tx.workers.get_by_id(actor_id):
            return "Worker profile not found"

        payload_worker = action.payload.get("worker_id")
        if payload_worker is not None and str(payload_worker) != str(actor_id):
            return "Action belongs to another worker"

        attendance_id = action.payload.get("attendance_id")
        if attendance_id is not None:
            try:
                record = tx.attendance.get_by_id(int(attendance_id))
            except (TypeError, ValueError):
                return "attendance_id is not valid"
            if not record or record.worker_id != actor_id:
                return "Attendance record belongs to another worker"

        if action.action_type == SyncActionType.CHECK_IN and not self._membership.is_authorized(
            actor_id, action.project_id
        ):
            return "Worker is not assigned to this project"
        return None

    def _apply(self, tx: Transaction, actor_id: int, action: SyncAction, *, now: datetime) -> LedgerOutcome:
        at = action.timestamp or now
        if action.action_type == SyncActionType.CHECK_IN:
            return self._ledger.check_in(actor_id, action.project_id, action.point, tx=tx, now=at)
        if action.action_type == SyncActionType.CHECK_OUT:
            return self._ledger.check_out(actor_id, tx=tx, now=at)
        return self._ledger.track_location(actor_id, action.point, tx=tx, now=at)
