from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from ..common.datetime_utils import ceil_hours_between, elapsed_minutes, now_local
from ..core.enums import (
    ApprovalStatus,
    AttendanceOrigin,
    AttendanceState,
    LiveStatus,
    RejectionReason,
    TrackStatus,
    TransitionKind,
)
from ..database.unit_of_work import Transaction, UnitOfWork, reuse_or_begin
from ..events.audit import TransitionEvent
from ..geofence.evaluator import evaluate
from ..geofence.factory import GeofenceStrategyFactory
from ..geofence.model import Coordinates
from ..membership.directory import MembershipDirectory
from ..payroll.service import WageEngine
from .model import AttendanceRecord, BlacklistEntry
from .policy import LedgerPolicy
from .results import (
    CheckInOutcome,
    CheckInResult,
    CheckOutOutcome,
    CheckOutResult,
    LiveStatusView,
    Rejection,
    TrackOutcome,
    TrackResult,
)
from .state import closed_minutes, derive_state, ensure_transition, open_session

logger = logging.getLogger(__name__)


def _reject(reason: RejectionReason, message: str, **detail: Any) -> Rejection:
    logger.info("Rejected %s: %s %s", reason.value, message, detail)
    return Rejection(reason=reason, message=message, detail=detail)


def _is_stale(record: AttendanceRecord, now: datetime) -> bool:
    return record.last_event_at is not None and now < record.last_event_at


class AttendanceLedger:
    """Owns attendance records and their sessions.

    Every operation locks the worker row first, so transitions of one worker
    are serialized. Pass ``tx`` to run inside a caller's transaction (the
    sync reconciler does this to write its idempotency row atomically).
    """

    def __init__(
        self,
        uow: UnitOfWork,
        membership: MembershipDirectory,
        wages: WageEngine,
        *,
        policy: Optional[LedgerPolicy] = None,
        geofence_factory: Optional[GeofenceStrategyFactory] = None,
    ):
        self._uow = uow
        self._membership = membership
        self._wages = wages
        self._policy = policy or LedgerPolicy()
        self._geofence_factory = geofence_factory

    @property
    def policy(self) -> LedgerPolicy:
        return self._policy

    def _active_blacklist(self, t: Transaction, org_id: int, worker_id: int, now: datetime) -> Optional[BlacklistEntry]:
        entry = t.blacklist.get_latest(org_id, worker_id)
        if entry and entry.is_active(now, self._policy.blacklist_window):
            return entry
        return None

    def _blacklisted(self, entry: BlacklistEntry, now: datetime) -> Rejection:
        expires_at = entry.expires_at(self._policy.blacklist_window)
        return _reject(
            RejectionReason.BLACKLISTED,
            "Worker is blacklisted for this organization",
            blacklisted=True,
            blacklisted_until=expires_at.isoformat(),
            remaining_hours=ceil_hours_between(now, expires_at),
        )

    def _evaluate(self, fence, point: Coordinates):
        return evaluate(fence, point, grace_meters=self._policy.grace_meters, factory=self._geofence_factory)

    def _emit(self, t: Transaction, kind: TransitionKind, record: AttendanceRecord, now: datetime, **detail: Any) -> None:
        t.events.append(
            TransitionEvent(
                kind=kind,
                worker_id=record.worker_id,
                project_id=record.project_id,
                attendance_id=record.attendance_id,
                occurred_at=now,
                detail=detail,
            )
        )
        logger.info("%s worker=%s attendance=%s", kind.value, record.worker_id, record.attendance_id)

    def check_in(
        self,
        worker_id: int,
        project_id: int,
        point: Coordinates,
        *,
        tx: Optional[Transaction] = None,
        now: Optional[datetime] = None,
    ) -> CheckInOutcome:
        now = now or now_local()
        today = now.date()

        with reuse_or_begin(self._uow, tx) as t:
            t.attendance.lock_worker(worker_id)

            project = t.projects.get_by_id(project_id)
            if not project:
                return _reject(RejectionReason.PROJECT_NOT_FOUND, f"Project {project_id} not found")
            worker = t.workers.get_by_id(worker_id)
            if not worker:
                return _reject(RejectionReason.WORKER_NOT_FOUND, f"Worker {worker_id} not found")

            running = t.attendance.find_open_for_worker(worker_id, today)
            if running:
                return _reject(
                    RejectionReason.ALREADY_CHECKED_IN,
                    "Already checked in today",
                    attendance_id=running.attendance_id,
                    project_id=running.project_id,
                    state=running.state.value,
                )

            record = t.attendance.find_for_day(worker_id, project_id, today)
            if record and record.state == AttendanceState.CLOSED:
                return _reject(
                    RejectionReason.DAY_CLOSED,
                    "Attendance for today is already closed",
                    attendance_id=record.attendance_id,
                )
            if record and _is_stale(record, now):
                return _reject(RejectionReason.STALE_EVENT, "Event is older than the last recorded one")

            entry = self._active_blacklist(t, project.org_id, worker_id, now)
            if entry:
                return self._blacklisted(entry, now)

            if not self._membership.is_authorized(worker_id, project_id):
                return _reject(RejectionReason.NOT_PROJECT_MEMBER, "Worker is not an approved participant of this project")

            capacity = self._membership.has_category_capacity(worker_id, project_id)
            if not capacity.has_capacity:
                return _reject(
                    RejectionReason.CAPACITY_EXCEEDED,
                    "Category capacity for this project is full",
                    **capacity.as_detail(),
                )

            fence = self._evaluate(project.geofence, point)
            if not fence.is_inside:
                return _reject(RejectionReason.OUTSIDE_GEOFENCE, "Outside the project geofence", **fence.as_detail())

            if now.time() < self._policy.checkin_opens_at:
                return _reject(
                    RejectionReason.BEFORE_CHECKIN_WINDOW,
                    "Check-in has not opened yet",
                    opens_at=self._policy.checkin_opens_at.strftime("%H:%M"),
                )

            active_break = t.projects.get_active_break(project_id, now)
            if active_break:
                return _reject(
                    RejectionReason.BREAK_ACTIVE,
                    "A project break is in progress",
                    break_ends_at=active_break.ended_at.isoformat(),
                    remaining_minutes=active_break.remaining_minutes(now),
                )

            if record is None:
                record = t.attendance.create_record(
                    worker_id=worker_id,
                    project_id=project_id,
                    org_id=project.org_id,
                    work_date=today,
                    approval_status=ApprovalStatus.APPROVED,
                    origin=AttendanceOrigin.AUTOMATIC,
                    max_allowed_exits=self._policy.default_max_exits,
                    created_at=now,
                )

            ensure_transition(record.state, AttendanceState.ACTIVE)
            session = t.attendance.open_session(attendance_id=record.attendance_id, check_in_time=now)
            sessions = t.attendance.list_sessions(record.attendance_id)
            record = replace(
                record,
                state=derive_state(sessions, checked_out_at=None),
                is_breached=False,
                last_known=point,
                last_event_at=now,
            )
            t.attendance.save(record)

            wage = None
            if len(sessions) == 1:
                wage = self._wages.open_wage(t, record, worker, now)

            self._emit(t, TransitionKind.CHECK_IN, record, now, session_id=session.session_id)
            return CheckInResult(
                attendance_id=record.attendance_id,
                session_id=session.session_id,
                geofence=fence,
                wage=wage,
            )

    def check_out(
        self,
        worker_id: int,
        *,
        tx: Optional[Transaction] = None,
        now: Optional[datetime] = None,
    ) -> CheckOutOutcome:
        now = now or now_local()

        with reuse_or_begin(self._uow, tx) as t:
            t.attendance.lock_worker(worker_id)

            record = t.attendance.find_open_for_worker(worker_id, now.date())
            if not record:
                return _reject(RejectionReason.NO_ACTIVE_ATTENDANCE, "No active attendance today")
            if _is_stale(record, now):
                return _reject(RejectionReason.STALE_EVENT, "Event is older than the last recorded one")

            sessions = t.attendance.list_sessions(record.attendance_id)
            current = open_session(sessions)
            if current and now <= current.check_in_time:
                return _reject(RejectionReason.STALE_EVENT, "Check-out must be after the session check-in")

            session_id = sessions[-1].session_id if sessions else None
            if current:
                closed = t.attendance.close_session(
                    session_id=current.session_id,
                    check_out_time=now,
                    worked_minutes=elapsed_minutes(current.check_in_time, now),
                )
                session_id = closed.session_id
                sessions = t.attendance.list_sessions(record.attendance_id)

            ensure_transition(record.state, AttendanceState.CLOSED)
            record = replace(
                record,
                state=derive_state(sessions, checked_out_at=now),
                worked_minutes=closed_minutes(sessions),
                checked_out_at=now,
                last_event_at=now,
            )
            t.attendance.save(record)

            wage = self._wages.recompute(record.attendance_id, tx=t, now=now)
            self._emit(t, TransitionKind.CHECK_OUT, record, now, worked_minutes=record.worked_minutes)
            return CheckOutResult(
                attendance_id=record.attendance_id,
                session_id=session_id,
                worked_minutes=record.worked_minutes,
                total_work_hours=self._wages.worked_hours(record.worked_minutes),
                exits_used=record.exit_count,
                exits_remaining=record.exits_remaining,
                wage=wage,
            )

    def track_location(
        self,
        worker_id: int,
        point: Coordinates,
        *,
        tx: Optional[Transaction] = None,
        now: Optional[datetime] = None,
    ) -> TrackOutcome:
        now = now or now_local()

        with reuse_or_begin(self._uow, tx) as t:
            t.attendance.lock_worker(worker_id)

            record = t.attendance.find_open_for_worker(worker_id, now.date())
            if not record:
                return _reject(RejectionReason.NO_ACTIVE_ATTENDANCE, "No active attendance today")
            project = t.projects.get_by_id(record.project_id)
            if not project:
                return _reject(RejectionReason.PROJECT_NOT_FOUND, f"Project {record.project_id} not found")

            # A break freezes the record: nothing is written, not even the position.
            active_break = t.projects.get_active_break(record.project_id, now)
            if active_break:
                return _reject(
                    RejectionReason.BREAK_ACTIVE,
                    "A project break is in progress",
                    break_ends_at=active_break.ended_at.isoformat(),
                    remaining_minutes=active_break.remaining_minutes(now),
                    state=record.state.value,
                )
            if _is_stale(record, now):
                return _reject(RejectionReason.STALE_EVENT, "Event is older than the last recorded one")

            fence = self._evaluate(project.geofence, point)
            sessions = t.attendance.list_sessions(record.attendance_id)
            current = open_session(sessions)
            status = TrackStatus.UNCHANGED

            if current and not fence.is_inside:
                if now <= current.check_in_time:
                    return _reject(RejectionReason.STALE_EVENT, "Exit must be after the session check-in")
                ensure_transition(record.state, AttendanceState.PAUSED)
                t.attendance.close_session(
                    session_id=current.session_id,
                    check_out_time=now,
                    worked_minutes=elapsed_minutes(current.check_in_time, now),
                )
                record = replace(record, exit_count=record.exit_count + 1, is_breached=True)
                status = TrackStatus.PAUSED

            elif current is None and fence.is_inside:
                entry = self._active_blacklist(t, record.org_id, worker_id, now)
                if entry:
                    t.attendance.save(replace(record, last_known=point, last_event_at=now))
                    return self._blacklisted(entry, now)

                if record.exit_count > record.max_allowed_exits and self._policy.enforce_exit_limit:
                    entry = t.blacklist.add(
                        org_id=record.org_id,
                        worker_id=worker_id,
                        reason=f"Exceeded {record.max_allowed_exits} allowed exits",
                        created_at=now,
                    )
                    record = replace(record, last_known=point, last_event_at=now)
                    t.attendance.save(record)
                    self._emit(t, TransitionKind.BLACKLISTED, record, now, exit_count=record.exit_count)
                    return _reject(
                        RejectionReason.EXIT_LIMIT_EXCEEDED,
                        "Exit limit exceeded; worker has been blacklisted",
                        exits_used=record.exit_count,
                        max_allowed_exits=record.max_allowed_exits,
                        blacklisted=True,
                        blacklisted_until=entry.expires_at(self._policy.blacklist_window).isoformat(),
                    )

                ensure_transition(record.state, AttendanceState.ACTIVE)
                t.attendance.open_session(attendance_id=record.attendance_id, check_in_time=now)
                record = replace(record, is_breached=False)
                status = TrackStatus.RESUMED

            if status != TrackStatus.UNCHANGED:
                sessions = t.attendance.list_sessions(record.attendance_id)
            current = open_session(sessions)
            record = replace(
                record,
                state=derive_state(sessions, checked_out_at=None),
                worked_minutes=closed_minutes(sessions),
                last_known=point,
                last_event_at=now,
            )
            t.attendance.save(record)

            if status == TrackStatus.PAUSED:
                self._wages.recompute(record.attendance_id, tx=t, now=now)
                self._emit(t, TransitionKind.PAUSED, record, now, exit_count=record.exit_count, **fence.as_detail())
            elif status == TrackStatus.RESUMED:
                self._emit(t, TransitionKind.RESUMED, record, now, session_id=current.session_id)

            running = elapsed_minutes(current.check_in_time, now) if current else Decimal("0.00")
            return TrackResult(
                attendance_id=record.attendance_id,
                is_inside=fence.is_inside,
                status=status,
                exits_remaining=record.exits_remaining,
                blacklisted=False,
                distance_meters=fence.distance_meters,
                worked_minutes=record.worked_minutes + running,
                session_id=current.session_id if current else None,
            )

    def live_status(self, worker_id: int, *, now: Optional[datetime] = None) -> LiveStatusView:
        now = now or now_local()
        today = now.date()

        with self._uow.begin() as t:
            record = t.attendance.find_open_for_worker(worker_id, today) or t.attendance.find_latest_for_worker(
                worker_id, today
            )
            if not record:
                return LiveStatusView(status=LiveStatus.INACTIVE, work_hours_today=Decimal("0.00"))

            sessions = t.attendance.list_sessions(record.attendance_id)
            current = open_session(sessions)
            minutes = closed_minutes(sessions)
            if current:
                minutes += max(elapsed_minutes(current.check_in_time, now), Decimal("0.00"))

            status = LiveStatus.INACTIVE
            if record.state in (AttendanceState.ACTIVE, AttendanceState.PAUSED):
                on_break = record.state == AttendanceState.PAUSED or t.projects.get_active_break(
                    record.project_id, now
                )
                status = LiveStatus.ON_BREAK if on_break else LiveStatus.WORKING

            worker = t.workers.get_by_id(worker_id)
            estimated = self._wages.estimate(worker, record.project_id, minutes) if worker else None
            return LiveStatusView(
                status=status,
                work_hours_today=self._wages.worked_hours(minutes),
                estimated_wages=estimated,
                session_start=current.check_in_time if current else None,
                attendance_id=record.attendance_id,
                project_id=record.project_id,
            )
