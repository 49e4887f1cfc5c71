from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import ceil_hours_between, now_local
from ..core.exceptions import AuthorizationError, NotFoundError
from ..database.unit_of_work import UnitOfWork
from ..membership.directory import MembershipDirectory
from .model import BlacklistEntry
from .policy import LedgerPolicy

logger = logging.getLogger(__name__)

DEFAULT_REASON = "Manually blacklisted"


@dataclass(frozen=True)
class BlacklistStatus:
    entry: BlacklistEntry
    active: bool
    blacklisted_until: datetime
    remaining_hours: int

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry.entry_id,
            "org_id": self.entry.org_id,
            "worker_id": self.entry.worker_id,
            "reason": self.entry.reason,
            "created_at": self.entry.created_at.isoformat(),
            "active": self.active,
            "blacklisted_until": self.blacklisted_until.isoformat(),
            "remaining_hours": self.remaining_hours,
        }


class BlacklistService:
    """Manager-side view of the organization blacklist.

    Entries written here block check-in exactly like the ones the ledger
    writes on an exit-limit breach; the window always counts from
    ``created_at``.
    """

    def __init__(self, uow: UnitOfWork, membership: MembershipDirectory, *, policy: Optional[LedgerPolicy] = None):
        self._uow = uow
        self._membership = membership
        self._policy = policy or LedgerPolicy()

    def _status(self, entry: BlacklistEntry, now: datetime) -> BlacklistStatus:
        until = entry.expires_at(self._policy.blacklist_window)
        return BlacklistStatus(
            entry=entry,
            active=entry.is_active(now, self._policy.blacklist_window),
            blacklisted_until=until,
            remaining_hours=ceil_hours_between(now, until),
        )

    def _require_manager_of(self, manager_id: int, org_id: int) -> None:
        if org_id not in self._membership.managed_organizations(manager_id):
            raise AuthorizationError(f"Not a manager of organization {org_id}")

    def list_entries(
        self,
        manager_id: int,
        *,
        org_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Sequence[BlacklistStatus]:
        now = now or now_local()
        if org_id is not None:
            self._require_manager_of(manager_id, org_id)
            org_ids = [org_id]
        else:
            org_ids = list(self._membership.managed_organizations(manager_id))

        with self._uow.begin() as tx:
            entries = tx.blacklist.list_for_orgs(org_ids)
        return [self._status(e, now) for e in entries]

    def add(
        self,
        manager_id: int,
        *,
        org_id: int,
        worker_id: int,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BlacklistStatus:
        self._require_manager_of(manager_id, org_id)
        now = now or now_local()

        with self._uow.begin() as tx:
            tx.attendance.lock_worker(worker_id)
            if not tx.workers.get_by_id(worker_id):
                raise NotFoundError(f"Worker {worker_id} not found")
            entry = tx.blacklist.add(
                org_id=org_id,
                worker_id=worker_id,
                reason=(reason or "").strip() or DEFAULT_REASON,
                created_at=now,
            )

        logger.info("Manager %s blacklisted worker %s in org %s", manager_id, worker_id, org_id)
        return self._status(entry, now)

    def lift(self, manager_id: int, entry_id: int) -> BlacklistEntry:
        with self._uow.begin() as tx:
            entry = tx.blacklist.get_by_id(entry_id)
            if not entry:
                raise NotFoundError(f"Blacklist entry {entry_id} not found")
            self._require_manager_of(manager_id, entry.org_id)
            tx.attendance.lock_worker(entry.worker_id)
            tx.blacklist.remove(entry_id)

        logger.info("Manager %s lifted blacklist entry %s (worker %s)", manager_id, entry_id, entry.worker_id)
        return entry
