"""Typed outcomes returned by the attendance ledger.

Every public ledger operation returns either its success dataclass or a
``Rejection``; neither is raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from ..core.enums import LiveStatus, RejectionReason, TrackStatus
from ..geofence.model import GeofenceResult
from ..payroll.model import WageOutcome


@dataclass(frozen=True)
class Rejection:
    reason: RejectionReason
    message: str
    detail: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"reason": self.reason.value, "message": self.message, "detail": self.detail}


@dataclass(frozen=True)
class CheckInResult:
    attendance_id: int
    session_id: int
    geofence: GeofenceResult
    wage: Optional[WageOutcome] = None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "session_id": self.session_id,
            "distance_meters": self.geofence.distance_meters,
            "wage": self.wage.to_dict() if self.wage else None,
        }


@dataclass(frozen=True)
class CheckOutResult:
    attendance_id: int
    session_id: Optional[int]
    worked_minutes: Decimal
    total_work_hours: Decimal
    exits_used: int
    exits_remaining: int
    wage: Optional[WageOutcome] = None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "session_id": self.session_id,
            "worked_minutes": str(self.worked_minutes),
            "total_work_hours": str(self.total_work_hours),
            "exits_used": self.exits_used,
            "exits_remaining": self.exits_remaining,
            "wage": self.wage.to_dict() if self.wage else None,
        }


@dataclass(frozen=True)
class TrackResult:
    attendance_id: int
    is_inside: bool
    status: TrackStatus
    exits_remaining: int
    blacklisted: bool
    distance_meters: int
    worked_minutes: Decimal
    session_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "is_inside": self.is_inside,
            "status": self.status.value,
            "exits_remaining": self.exits_remaining,
            "blacklisted": self.blacklisted,
            "distance_meters": self.distance_meters,
            "worked_minutes": str(self.worked_minutes),
            "session_id": self.session_id,
        }


@dataclass(frozen=True)
class LiveStatusView:
    status: LiveStatus
    work_hours_today: Decimal
    estimated_wages: Optional[Decimal] = None
    session_start: Optional[datetime] = None
    attendance_id: Optional[int] = None
    project_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "work_hours_today": str(self.work_hours_today),
            "estimated_wages": str(self.estimated_wages) if self.estimated_wages is not None else None,
            "session_start": self.session_start.isoformat() if self.session_start else None,
            "attendance_id": self.attendance_id,
            "project_id": self.project_id,
        }


CheckInOutcome = Union[CheckInResult, Rejection]
CheckOutOutcome = Union[CheckOutResult, Rejection]
TrackOutcome = Union[TrackResult, Rejection]
