from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import now_local
from ..core.enums import ApprovalStatus, AttendanceOrigin, TransitionKind
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..database.unit_of_work import UnitOfWork
from ..events.audit import TransitionEvent
from ..membership.directory import MembershipDirectory
from .model import AttendanceRecord
from .policy import LedgerPolicy

logger = logging.getLogger(__name__)


def parse_approval_status(value: Any) -> ApprovalStatus:
    try:
        return ApprovalStatus(str(value or "").strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in ApprovalStatus)
        raise ValidationError(f"status must be one of {allowed}")


class ManualAttendanceService:
    """Site-engineer marking of a worker's day without a location fix.

    The record is created when missing and otherwise only its approval
    fields change; sessions and wages are left as they are.
    """

    def __init__(self, uow: UnitOfWork, membership: MembershipDirectory, *, policy: Optional[LedgerPolicy] = None):
        self._uow = uow
        self._membership = membership
        self._policy = policy or LedgerPolicy()

    def mark(
        self,
        engineer_id: int,
        *,
        worker_id: int,
        project_id: int,
        status: Any,
        work_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        approval_status = parse_approval_status(status)
        now = now or now_local()
        work_date = work_date or now.date()
        if work_date > now.date():
            raise ValidationError("Attendance cannot be marked for a future date")
        if not self._membership.is_site_engineer_of(engineer_id, project_id):
            raise AuthorizationError(f"Engineer {engineer_id} is not assigned to project {project_id}")

        with self._uow.begin() as tx:
            tx.attendance.lock_worker(worker_id)
            project = tx.projects.get_by_id(project_id)
            if not project:
                raise NotFoundError(f"Project {project_id} not found")
            if not tx.workers.get_by_id(worker_id):
                raise NotFoundError(f"Worker {worker_id} not found")

            record = tx.attendance.find_for_day(worker_id, project_id, work_date)
            if record is None:
                record = tx.attendance.create_record(
                    worker_id=worker_id,
                    project_id=project_id,
                    org_id=project.org_id,
                    work_date=work_date,
                    approval_status=approval_status,
                    origin=AttendanceOrigin.MANUAL,
                    max_allowed_exits=self._policy.default_max_exits,
                    created_at=now,
                )
            record = tx.attendance.set_approval(
                record.attendance_id,
                approval_status=approval_status,
                origin=AttendanceOrigin.MANUAL,
                approved_by=engineer_id,
            )
            tx.events.append(
                TransitionEvent(
                    kind=TransitionKind.MANUAL_MARK,
                    worker_id=worker_id,
                    project_id=project_id,
                    attendance_id=record.attendance_id,
                    occurred_at=now,
                    detail={
                        "approval_status": approval_status.value,
                        "approved_by": engineer_id,
                        "work_date": work_date.isoformat(),
                    },
                )
            )

        logger.info(
            "Engineer %s marked worker %s on project %s for %s as %s",
            engineer_id,
            worker_id,
            project_id,
            work_date.isoformat(),
            approval_status.value,
        )
        return record
