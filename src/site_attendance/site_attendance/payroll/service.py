from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.state import closed_minutes
from ..common.datetime_utils import now_local
from ..core.enums import WageComputation, WageStatus
from ..core.exceptions import DomainError, NotFoundError
from ..database.unit_of_work import Transaction, UnitOfWork, reuse_or_begin
from ..workers.model import Worker
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import RecomputeSummary, WageOutcome, WageStatement, WageSummary, WeeklyEarnings
from .repository import RateTable

logger = logging.getLogger(__name__)


class WageEngine:
    """Keeps one wage record per attendance in step with its closed sessions.

    Amounts are always recomputed from the full session list, so calling
    ``recompute`` twice in a row produces the same record.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        rates: RateTable,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._uow = uow
        self._rates = rates
        self._calculator = calculator or StandardPayrollCalculator()

    def _rate_for(self, worker: Worker, project_id: int) -> Optional[Decimal]:
        return self._rates.get_hourly_rate(project_id, worker.skill_type, worker.category)

    def _rate_missing(self, attendance_id: int, worker: Worker, project_id: int) -> WageOutcome:
        logger.warning(
            "No wage rate for project=%s skill=%s category=%s (attendance %s)",
            project_id,
            worker.skill_type,
            worker.category,
            attendance_id,
        )
        return WageOutcome(
            attendance_id=attendance_id,
            computation=WageComputation.RATE_NOT_CONFIGURED,
            message=f"Wage rate not configured for {worker.skill_type}/{worker.category}",
        )

    def open_wage(self, tx: Transaction, record: AttendanceRecord, worker: Worker, now: datetime) -> WageOutcome:
        """Seed a zero wage when the day starts; never blocks the check-in."""

        rate = self._rate_for(worker, record.project_id)
        if rate is None:
            return self._rate_missing(record.attendance_id, worker, record.project_id)

        existing = tx.wages.get_for_attendance(record.attendance_id)
        if existing:
            return WageOutcome(attendance_id=record.attendance_id, computation=WageComputation.COMPUTED, wage=existing)

        wage = tx.wages.upsert(
            attendance_id=record.attendance_id,
            worker_id=record.worker_id,
            project_id=record.project_id,
            hourly_rate=rate,
            worked_hours=Decimal("0.00"),
            total_amount=Decimal("0.00"),
            updated_at=now,
        )
        return WageOutcome(attendance_id=record.attendance_id, computation=WageComputation.COMPUTED, wage=wage)

    def recompute(
        self,
        attendance_id: int,
        *,
        tx: Optional[Transaction] = None,
        now: Optional[datetime] = None,
    ) -> WageOutcome:
        now = now or now_local()
        with reuse_or_begin(self._uow, tx) as t:
            record = t.attendance.get_by_id(attendance_id)
            if not record:
                raise NotFoundError(f"Attendance {attendance_id} not found")
            worker = t.workers.get_by_id(record.worker_id)
            if not worker:
                raise NotFoundError(f"Worker {record.worker_id} not found")

            rate = self._rate_for(worker, record.project_id)
            if rate is None:
                return self._rate_missing(record.attendance_id, worker, record.project_id)

            minutes = closed_minutes(t.attendance.list_sessions(attendance_id))
            wage = t.wages.upsert(
                attendance_id=record.attendance_id,
                worker_id=record.worker_id,
                project_id=record.project_id,
                hourly_rate=rate,
                worked_hours=self._calculator.worked_hours(minutes),
                total_amount=self._calculator.total(minutes, rate),
                updated_at=now,
            )
            return WageOutcome(attendance_id=record.attendance_id, computation=WageComputation.COMPUTED, wage=wage)

    def worked_hours(self, worked_minutes: Decimal) -> Decimal:
        return self._calculator.worked_hours(worked_minutes)

    def estimate(self, worker: Worker, project_id: int, worked_minutes: Decimal) -> Optional[Decimal]:
        """Projected pay for a running day; nothing is written."""

        rate = self._rate_for(worker, project_id)
        if rate is None:
            return None
        return self._calculator.total(worked_minutes, rate)

    def wages_for_worker(self, worker_id: int, *, limit: int = 50, weeks: int = 4) -> WageStatement:
        with self._uow.begin() as tx:
            wages = list(tx.wages.list_for_worker(worker_id))

        def earned(status: WageStatus) -> Decimal:
            return sum((w.total_amount for w in wages if w.status == status), Decimal("0.00"))

        summary = WageSummary(
            approved_days=sum(1 for w in wages if w.status == WageStatus.APPROVED),
            total_earnings=earned(WageStatus.APPROVED),
            pending_earnings=earned(WageStatus.PENDING),
            rejected_earnings=earned(WageStatus.REJECTED),
        )

        by_week: dict[date, Decimal] = defaultdict(lambda: Decimal("0.00"))
        for w in wages:
            if w.status == WageStatus.APPROVED and w.work_date:
                by_week[w.work_date - timedelta(days=w.work_date.weekday())] += w.total_amount
        weekly = tuple(WeeklyEarnings(week_start=k, amount=by_week[k]) for k in sorted(by_week, reverse=True)[:weeks])

        return WageStatement(worker_id=worker_id, wages=tuple(wages[: max(limit, 0)]), summary=summary, weekly=weekly)

    def recompute_day(self, work_date: date, *, now: Optional[datetime] = None) -> RecomputeSummary:
        """Back-fill wages for every record of a day, one transaction per record."""

        now = now or now_local()
        with self._uow.begin() as tx:
            attendance_ids = list(tx.attendance.list_ids_for_date(work_date))

        computed = rate_missing = failed = 0
        for attendance_id in attendance_ids:
            try:
                outcome = self.recompute(attendance_id, now=now)
            except DomainError:
                logger.exception("Wage recompute failed for attendance %s", attendance_id)
                failed += 1
                continue
            if outcome.computed:
                computed += 1
            else:
                rate_missing += 1

        logger.info(
            "Recomputed wages for %s: computed=%s rate_missing=%s failed=%s",
            work_date.isoformat(),
            computed,
            rate_missing,
            failed,
        )
        return RecomputeSummary(work_date=work_date, computed=computed, rate_missing=rate_missing, failed=failed)
