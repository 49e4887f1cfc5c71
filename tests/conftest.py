from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest

from src.site_attendance.site_attendance.attendance.model import (
    AttendanceRecord,
    AttendanceSession,
    BlacklistEntry,
)
from src.site_attendance.site_attendance.attendance.policy import LedgerPolicy
from src.site_attendance.site_attendance.container import assemble
from src.site_attendance.site_attendance.core.enums import AttendanceState, WageStatus
from src.site_attendance.site_attendance.core.exceptions import ConflictError, DuplicateActionError
from src.site_attendance.site_attendance.events.audit import EventBus
from src.site_attendance.site_attendance.geofence.model import Coordinates, Geofence
from src.site_attendance.site_attendance.membership.directory import CapacityCheck
from src.site_attendance.site_attendance.payroll.model import WageRecord
from src.site_attendance.site_attendance.projects.model import BreakWindow, Project
from src.site_attendance.site_attendance.sync.model import IdempotencyRecord
from src.site_attendance.site_attendance.sync.policy import SyncPolicy
from src.site_attendance.site_attendance.workers.model import Worker

SITE = Coordinates(latitude=12.9716, longitude=77.5946)
# ~500 m due north of SITE
FAR_AWAY = Coordinates(latitude=12.9761, longitude=77.5946)

WORKER_ID = 1
OTHER_WORKER_ID = 2
PROJECT_ID = 10
ORG_ID = 100
MANAGER_ID = 500
ENGINEER_ID = 600


@dataclass
class InMemoryStore:
    workers: dict[int, Worker] = field(default_factory=dict)
    projects: dict[int, Project] = field(default_factory=dict)
    breaks: dict[int, BreakWindow] = field(default_factory=dict)
    records: dict[int, AttendanceRecord] = field(default_factory=dict)
    sessions: dict[int, AttendanceSession] = field(default_factory=dict)
    wages: dict[int, WageRecord] = field(default_factory=dict)
    blacklist: dict[tuple[int, int], BlacklistEntry] = field(default_factory=dict)
    actions: dict[str, IdempotencyRecord] = field(default_factory=dict)
    next_id: int = 0
    locked_workers: list[int] = field(default_factory=list)

    def new_id(self) -> int:
        self.next_id += 1
        return self.next_id

    def snapshot(self) -> dict:
        return copy.deepcopy(self.__dict__)

    def restore(self, state: dict) -> None:
        self.__dict__.update(state)

    def sessions_for(self, attendance_id: int) -> list[AttendanceSession]:
        items = [s for s in self.sessions.values() if s.attendance_id == attendance_id]
        return sorted(items, key=lambda s: (s.check_in_time, s.session_id))


class InMemoryAttendance:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def lock_worker(self, worker_id: int) -> None:
        self._s.locked_workers.append(worker_id)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._s.records.get(attendance_id)

    def find_for_day(self, worker_id: int, project_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for r in self._s.records.values():
            if (r.worker_id, r.project_id, r.work_date) == (worker_id, project_id, work_date):
                return r
        return None

    def find_open_for_worker(self, worker_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for r in self._s.records.values():
            if r.worker_id == worker_id and r.work_date == work_date and r.state in (
                AttendanceState.ACTIVE,
                AttendanceState.PAUSED,
            ):
                return r
        return None

    def find_latest_for_worker(self, worker_id: int, work_date: date) -> Optional[AttendanceRecord]:
        items = [r for r in self._s.records.values() if r.worker_id == worker_id and r.work_date == work_date]
        return max(items, key=lambda r: r.attendance_id) if items else None

    def list_ids_for_date(self, work_date: date):
        return sorted(r.attendance_id for r in self._s.records.values() if r.work_date == work_date)

    def list_for_worker(self, worker_id: int, limit: int):
        items = [r for r in self._s.records.values() if r.worker_id == worker_id]
        return sorted(items, key=lambda r: (r.work_date, r.attendance_id), reverse=True)[:limit]

    def create_record(self, *, worker_id, project_id, org_id, work_date, approval_status, origin, max_allowed_exits, created_at):
        if self.find_for_day(worker_id, project_id, work_date):
            raise ConflictError("duplicate attendance day")
        record = AttendanceRecord(
            attendance_id=self._s.new_id(),
            worker_id=worker_id,
            project_id=project_id,
            org_id=org_id,
            work_date=work_date,
            state=AttendanceState.INACTIVE,
            approval_status=approval_status,
            origin=origin,
            max_allowed_exits=max_allowed_exits,
            last_event_at=created_at,
        )
        self._s.records[record.attendance_id] = record
        return record

    def save(self, record: AttendanceRecord) -> None:
        self._s.records[record.attendance_id] = record

    def set_approval(self, attendance_id: int, *, approval_status, origin, approved_by) -> AttendanceRecord:
        record = replace(
            self._s.records[attendance_id], approval_status=approval_status, origin=origin, approved_by=approved_by
        )
        self._s.records[attendance_id] = record
        return record

    def list_sessions(self, attendance_id: int):
        return self._s.sessions_for(attendance_id)

    def open_session(self, *, attendance_id: int, check_in_time: datetime) -> AttendanceSession:
        if any(s.is_open for s in self._s.sessions_for(attendance_id)):
            raise ConflictError("already open")
        session = AttendanceSession(
            session_id=self._s.new_id(),
            attendance_id=attendance_id,
            check_in_time=check_in_time,
        )
        self._s.sessions[session.session_id] = session
        return session

    def close_session(self, *, session_id: int, check_out_time: datetime, worked_minutes: Decimal) -> AttendanceSession:
        session = self._s.sessions[session_id]
        if not session.is_open:
            raise ConflictError("already closed")
        closed = replace(session, check_out_time=check_out_time, worked_minutes=worked_minutes)
        self._s.sessions[session_id] = closed
        return closed


class InMemoryBlacklist:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def get_latest(self, org_id: int, worker_id: int) -> Optional[BlacklistEntry]:
        return self._s.blacklist.get((org_id, worker_id))

    def add(self, *, org_id: int, worker_id: int, reason: str, created_at: datetime) -> BlacklistEntry:
        entry = BlacklistEntry(
            entry_id=self._s.new_id(), org_id=org_id, worker_id=worker_id, created_at=created_at, reason=reason
        )
        self._s.blacklist[(org_id, worker_id)] = entry
        return entry

    def get_by_id(self, entry_id: int) -> Optional[BlacklistEntry]:
        return next((e for e in self._s.blacklist.values() if e.entry_id == entry_id), None)

    def list_for_orgs(self, org_ids):
        items = [e for e in self._s.blacklist.values() if e.org_id in set(org_ids)]
        return sorted(items, key=lambda e: (e.created_at, e.entry_id), reverse=True)

    def remove(self, entry_id: int) -> bool:
        entry = self.get_by_id(entry_id)
        if entry is None:
            return False
        del self._s.blacklist[(entry.org_id, entry.worker_id)]
        return True


class InMemoryWages:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def get_for_attendance(self, attendance_id: int) -> Optional[WageRecord]:
        return self._s.wages.get(attendance_id)

    def list_for_worker(self, worker_id: int):
        items = [w for w in self._s.wages.values() if w.worker_id == worker_id]
        return sorted(items, key=lambda w: (w.work_date, w.wage_id), reverse=True)

    def upsert(self, *, attendance_id, worker_id, project_id, hourly_rate, worked_hours, total_amount, updated_at):
        existing = self._s.wages.get(attendance_id)
        record = self._s.records.get(attendance_id)
        wage = WageRecord(
            wage_id=existing.wage_id if existing else self._s.new_id(),
            attendance_id=attendance_id,
            worker_id=worker_id,
            project_id=project_id,
            hourly_rate=hourly_rate,
            worked_hours=worked_hours,
            total_amount=total_amount,
            status=existing.status if existing else WageStatus.PENDING,
            updated_at=updated_at,
            work_date=record.work_date if record else None,
        )
        self._s.wages[attendance_id] = wage
        return wage


class InMemoryProjects:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def get_by_id(self, project_id: int) -> Optional[Project]:
        return self._s.projects.get(project_id)

    def get_active_break(self, project_id: int, at: datetime) -> Optional[BreakWindow]:
        for b in self._s.breaks.values():
            if b.project_id == project_id and b.is_active(at):
                return b
        return None

    def create_break(self, *, project_id, started_at, ended_at, reason, created_by) -> int:
        break_id = self._s.new_id()
        self._s.breaks[break_id] = BreakWindow(
            break_id=break_id,
            project_id=project_id,
            started_at=started_at,
            ended_at=ended_at,
            reason=reason,
            created_by=created_by,
        )
        return break_id

    def list_breaks(self, project_id: int, limit: int):
        items = [b for b in self._s.breaks.values() if b.project_id == project_id]
        return sorted(items, key=lambda b: b.started_at, reverse=True)[:limit]


class InMemoryWorkers:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def get_by_id(self, worker_id: int) -> Optional[Worker]:
        return self._s.workers.get(worker_id)


class InMemoryIdempotency:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def get(self, action_id: str) -> Optional[IdempotencyRecord]:
        return self._s.actions.get(action_id)

    def record(self, *, action_id, actor_id, action_type, status, entity_id, reason, processed_at):
        if action_id in self._s.actions:
            raise DuplicateActionError(action_id)
        rec = IdempotencyRecord(
            action_id=action_id,
            actor_id=actor_id,
            action_type=action_type,
            status=status,
            entity_id=entity_id,
            reason=reason,
            processed_at=processed_at,
        )
        self._s.actions[action_id] = rec
        return rec


@dataclass
class InMemoryTransaction:
    attendance: InMemoryAttendance
    blacklist: InMemoryBlacklist
    wages: InMemoryWages
    projects: InMemoryProjects
    workers: InMemoryWorkers
    idempotency: InMemoryIdempotency
    events: list = field(default_factory=list)


class InMemoryUnitOfWork:
    """Commits by keeping the mutations, rolls back by restoring a snapshot."""

    def __init__(self, store: InMemoryStore, events: EventBus):
        self.store = store
        self._events = events
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def begin(self):
        snapshot = self.store.snapshot()
        tx = InMemoryTransaction(
            attendance=InMemoryAttendance(self.store),
            blacklist=InMemoryBlacklist(self.store),
            wages=InMemoryWages(self.store),
            projects=InMemoryProjects(self.store),
            workers=InMemoryWorkers(self.store),
            idempotency=InMemoryIdempotency(self.store),
        )
        try:
            yield tx
        except BaseException:
            self.store.restore(snapshot)
            self.rollbacks += 1
            raise
        self.commits += 1
        self._events.publish(tx.events)


class FakeMembership:
    def __init__(self, members: set[tuple[int, int]]):
        self.members = set(members)
        self.full_projects: set[int] = set()
        self.managed: dict[int, list[int]] = {}
        self.engineers: set[tuple[int, int]] = set()

    def is_authorized(self, worker_id: int, project_id: int) -> bool:
        return (worker_id, project_id) in self.members

    def has_category_capacity(self, worker_id: int, project_id: int) -> CapacityCheck:
        if project_id in self.full_projects:
            return CapacityCheck(has_capacity=False, category="SKILLED", current_count=6, required_count=5)
        return CapacityCheck(has_capacity=True, category="SKILLED", current_count=1, required_count=5)

    def managed_organizations(self, manager_id: int) -> list[int]:
        return list(self.managed.get(manager_id, []))

    def is_site_engineer_of(self, engineer_id: int, project_id: int) -> bool:
        return (engineer_id, project_id) in self.engineers


class FakeRates:
    def __init__(self, rates: dict[tuple[int, str, str], Decimal]):
        self.rates = dict(rates)

    def get_hourly_rate(self, project_id: int, skill_type: str, category: str) -> Optional[Decimal]:
        return self.rates.get((project_id, skill_type, category))


class RecordingListener:
    def __init__(self):
        self.events = []

    def __call__(self, event) -> None:
        self.events.append(event)

    @property
    def kinds(self) -> list[str]:
        return [e.kind.value for e in self.events]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 8, 0, 0)


@pytest.fixture
def store() -> InMemoryStore:
    s = InMemoryStore()
    s.workers[WORKER_ID] = Worker(worker_id=WORKER_ID, full_name="Ravi", skill_type="MASON", category="SKILLED")
    s.workers[OTHER_WORKER_ID] = Worker(
        worker_id=OTHER_WORKER_ID, full_name="Meena", skill_type="HELPER", category="UNSKILLED"
    )
    s.projects[PROJECT_ID] = Project(
        project_id=PROJECT_ID,
        org_id=ORG_ID,
        name="Tower A",
        geofence=Geofence.circle(SITE, 200),
    )
    return s


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def bus(listener) -> EventBus:
    return EventBus([listener])


@pytest.fixture
def uow(store, bus) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(store, bus)


@pytest.fixture
def membership() -> FakeMembership:
    m = FakeMembership({(WORKER_ID, PROJECT_ID), (OTHER_WORKER_ID, PROJECT_ID)})
    m.managed[MANAGER_ID] = [ORG_ID]
    m.engineers.add((ENGINEER_ID, PROJECT_ID))
    return m


@pytest.fixture
def rates() -> FakeRates:
    return FakeRates({(PROJECT_ID, "MASON", "SKILLED"): Decimal("150.00")})


@pytest.fixture
def ledger_policy() -> LedgerPolicy:
    return LedgerPolicy()


@pytest.fixture
def container(uow, bus, membership, rates, ledger_policy):
    return assemble(
        uow=uow,
        events=bus,
        membership=membership,
        rates=rates,
        ledger_policy=ledger_policy,
        sync_policy=SyncPolicy(max_batch_size=5, max_clock_skew=timedelta(minutes=5)),
    )


@pytest.fixture
def ledger(container):
    return container.attendance_ledger


@pytest.fixture
def wage_engine(container):
    return container.wage_engine


@pytest.fixture
def reconciler(container):
    return container.sync_reconciler
