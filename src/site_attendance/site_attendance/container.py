from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.blacklist_service import BlacklistService
from .attendance.history import AttendanceHistory
from .attendance.ledger import AttendanceLedger
from .attendance.manual import ManualAttendanceService
from .attendance.policy import LedgerPolicy
from .database.connection import DBConfig, DatabaseConnection
from .database.mysql_unit_of_work import MySQLUnitOfWork
from .database.unit_of_work import UnitOfWork
from .events.audit import EventBus, LoggingAuditListener, MySQLAuditListener
from .membership.directory import MembershipDirectory, MySQLMembershipDirectory
from .payroll.mysql_wage_repository import MySQLRateTable
from .payroll.repository import RateTable
from .payroll.service import WageEngine
from .projects.service import BreakService
from .sync.policy import SyncPolicy
from .sync.service import SyncReconciler


@dataclass(frozen=True)
class Container:
    uow: UnitOfWork
    events: EventBus
    membership: MembershipDirectory
    rates: RateTable

    attendance_ledger: AttendanceLedger
    wage_engine: WageEngine
    sync_reconciler: SyncReconciler
    break_service: BreakService
    blacklist_service: BlacklistService
    attendance_history: AttendanceHistory
    manual_attendance: ManualAttendanceService


def assemble(
    *,
    uow: UnitOfWork,
    events: EventBus,
    membership: MembershipDirectory,
    rates: RateTable,
    ledger_policy: Optional[LedgerPolicy] = None,
    sync_policy: Optional[SyncPolicy] = None,
) -> Container:
    """Wire services over already-built ports (MySQL in production, fakes in tests)."""

    ledger_policy = ledger_policy or LedgerPolicy()
    wage_engine = WageEngine(uow, rates)
    ledger = AttendanceLedger(uow, membership, wage_engine, policy=ledger_policy)
    return Container(
        uow=uow,
        events=events,
        membership=membership,
        rates=rates,
        attendance_ledger=ledger,
        wage_engine=wage_engine,
        sync_reconciler=SyncReconciler(uow, ledger, membership, policy=sync_policy),
        break_service=BreakService(uow),
        blacklist_service=BlacklistService(uow, membership, policy=ledger_policy),
        attendance_history=AttendanceHistory(uow),
        manual_attendance=ManualAttendanceService(uow, membership, policy=ledger_policy),
    )


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    events = EventBus([LoggingAuditListener(), MySQLAuditListener(conn)])
    return assemble(
        uow=MySQLUnitOfWork(conn, events=events),
        events=events,
        membership=MySQLMembershipDirectory(conn),
        rates=MySQLRateTable(conn),
        ledger_policy=LedgerPolicy.from_settings(settings),
        sync_policy=SyncPolicy.from_settings(settings),
    )
