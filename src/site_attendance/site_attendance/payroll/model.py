from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import WageComputation, WageStatus


@dataclass(frozen=True)
class WageRate:
    project_id: int
    skill_type: str
    category: str
    hourly_rate: Decimal


@dataclass(frozen=True)
class WageRecord:
    """One per attendance record; refreshed whenever a session closes."""

    wage_id: int
    attendance_id: int
    worker_id: int
    project_id: int
    hourly_rate: Decimal
    worked_hours: Decimal
    total_amount: Decimal
    status: WageStatus = WageStatus.PENDING
    updated_at: Optional[datetime] = None
    work_date: Optional[date] = None


@dataclass(frozen=True)
class WageOutcome:
    """Result of seeding or recomputing a wage.

    ``RATE_NOT_CONFIGURED`` is a configuration gap, not a failure: the
    attendance stays valid and the wage is computed once a rate exists.
    """

    attendance_id: int
    computation: WageComputation
    wage: Optional[WageRecord] = None
    message: Optional[str] = None

    @property
    def computed(self) -> bool:
        return self.computation == WageComputation.COMPUTED

    def to_dict(self) -> dict:
        out = {"attendance_id": self.attendance_id, "computation": self.computation.value}
        if self.wage:
            out.update(
                wage_id=self.wage.wage_id,
                hourly_rate=str(self.wage.hourly_rate),
                worked_hours=str(self.wage.worked_hours),
                total_amount=str(self.wage.total_amount),
                status=self.wage.status.value,
            )
        if self.message:
            out["message"] = self.message
        return out


@dataclass(frozen=True)
class RecomputeSummary:
    work_date: date
    computed: int
    rate_missing: int
    failed: int

    def to_dict(self) -> dict:
        return {
            "work_date": self.work_date.isoformat(),
            "computed": self.computed,
            "rate_missing": self.rate_missing,
            "failed": self.failed,
        }


def _wage_to_dict(wage: WageRecord) -> dict:
    return {
        "wage_id": wage.wage_id,
        "attendance_id": wage.attendance_id,
        "project_id": wage.project_id,
        "work_date": wage.work_date.isoformat() if wage.work_date else None,
        "hourly_rate": str(wage.hourly_rate),
        "worked_hours": str(wage.worked_hours),
        "total_amount": str(wage.total_amount),
        "status": wage.status.value,
    }


@dataclass(frozen=True)
class WageSummary:
    approved_days: int
    total_earnings: Decimal
    pending_earnings: Decimal
    rejected_earnings: Decimal

    def to_dict(self) -> dict:
        return {
            "approved_days": self.approved_days,
            "total_earnings": str(self.total_earnings),
            "pending_earnings": str(self.pending_earnings),
            "rejected_earnings": str(self.rejected_earnings),
        }


@dataclass(frozen=True)
class WeeklyEarnings:
    week_start: date
    amount: Decimal

    def to_dict(self) -> dict:
        return {"week_start": self.week_start.isoformat(), "amount": str(self.amount)}


@dataclass(frozen=True)
class WageStatement:
    """A worker's wage history. ``summary`` and ``weekly`` cover every wage, not just the listed page."""

    worker_id: int
    wages: tuple[WageRecord, ...]
    summary: WageSummary
    weekly: tuple[WeeklyEarnings, ...] = ()

    def to_dict(self) -> dict:
        return {
            "worker_id": self.worker_id,
            "wages": [_wage_to_dict(w) for w in self.wages],
            "summary": self.summary.to_dict(),
            "weekly": [w.to_dict() for w in self.weekly],
        }
