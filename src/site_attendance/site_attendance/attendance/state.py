"""Attendance day state machine.

INACTIVE -> ACTIVE <-> PAUSED, ACTIVE/PAUSED -> CLOSED. The state stored on a
record is a cache: ``derive_state`` is the only place that computes it.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..core.enums import AttendanceState
from ..core.exceptions import ConflictError
from .model import AttendanceSession

ALLOWED_TRANSITIONS: dict[AttendanceState, frozenset[AttendanceState]] = {
    AttendanceState.INACTIVE: frozenset({AttendanceState.ACTIVE}),
    AttendanceState.ACTIVE: frozenset({AttendanceState.PAUSED, AttendanceState.CLOSED}),
    AttendanceState.PAUSED: frozenset({AttendanceState.ACTIVE, AttendanceState.CLOSED}),
    AttendanceState.CLOSED: frozenset(),
}


def open_session(sessions: Iterable[AttendanceSession]) -> Optional[AttendanceSession]:
    open_ones = [s for s in sessions if s.is_open]
    if len(open_ones) > 1:
        raise ConflictError(f"Attendance {open_ones[0].attendance_id} has {len(open_ones)} open sessions")
    return open_ones[0] if open_ones else None


def closed_minutes(sessions: Iterable[AttendanceSession]) -> Decimal:
    return sum((s.worked_minutes or Decimal("0") for s in sessions if not s.is_open), Decimal("0.00"))


def derive_state(sessions: Iterable[AttendanceSession], *, checked_out_at: Optional[datetime]) -> AttendanceState:
    sessions = list(sessions)
    if checked_out_at is not None:
        return AttendanceState.CLOSED
    if open_session(sessions) is not None:
        return AttendanceState.ACTIVE
    if sessions:
        # Left the fence (breach) or a resume was refused.
        return AttendanceState.PAUSED
    return AttendanceState.INACTIVE


def ensure_transition(current: AttendanceState, target: AttendanceState) -> None:
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ConflictError(f"Illegal attendance transition {current.value} -> {target.value}")
