from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, ContextManager, Iterator, Optional, Protocol

if TYPE_CHECKING:
    from ..attendance.repository import AttendanceRepository, BlacklistRepository
    from ..events.audit import TransitionEvent
    from ..payroll.repository import WageRepository
    from ..projects.repository import ProjectRepository
    from ..sync.repository import IdempotencyStore
    from ..workers.repository import WorkerRepository


class Transaction(Protocol):
    """Repositories bound to one database transaction.

    ``events`` collects transition events; they are published only after the
    transaction commits.
    """

    attendance: "AttendanceRepository"
    blacklist: "BlacklistRepository"
    wages: "WageRepository"
    projects: "ProjectRepository"
    workers: "WorkerRepository"
    idempotency: "IdempotencyStore"
    events: "list[TransitionEvent]"


class UnitOfWork(Protocol):
    def begin(self) -> ContextManager[Transaction]:
        raise NotImplementedError


@contextmanager
def reuse_or_begin(uow: UnitOfWork, tx: Optional[Transaction] = None) -> Iterator[Transaction]:
    """Join the caller's transaction when given one, otherwise open a new one."""

    if tx is not None:
        yield tx
        return
    with uow.begin() as new_tx:
        yield new_tx
