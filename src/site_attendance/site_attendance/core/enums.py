from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Actor roles used for authorization."""

    LABOUR = "LABOUR"
    SITE_ENGINEER = "SITE_ENGINEER"
    MANAGER = "MANAGER"


class AttendanceState(str, Enum):
    """Day state of an attendance record (derived, see attendance.state)."""

    INACTIVE = "INACTIVE"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    CLOSED = "CLOSED"


class ApprovalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AttendanceOrigin(str, Enum):
    AUTOMATIC = "AUTOMATIC"
    MANUAL = "MANUAL"


class GeofenceType(str, Enum):
    CIRCLE = "CIRCLE"
    POLYGON = "POLYGON"
    NONE = "NONE"


class TrackStatus(str, Enum):
    RESUMED = "RESUMED"
    PAUSED = "PAUSED"
    UNCHANGED = "UNCHANGED"


class LiveStatus(str, Enum):
    WORKING = "WORKING"
    ON_BREAK = "ON_BREAK"
    INACTIVE = "INACTIVE"


class WageStatus(str, Enum):
    """Approval workflow status of a wage record (owned outside the core)."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class WageComputation(str, Enum):
    COMPUTED = "COMPUTED"
    RATE_NOT_CONFIGURED = "RATE_NOT_CONFIGURED"


class TransitionKind(str, Enum):
    CHECK_IN = "CHECK_IN"
    PAUSED = "PAUSED"
    RESUMED = "RESUMED"
    CHECK_OUT = "CHECK_OUT"
    BLACKLISTED = "BLACKLISTED"
    MANUAL_MARK = "MANUAL_MARK"


class SyncActionType(str, Enum):
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    TRACK = "TRACK"


class SyncOutcomeStatus(str, Enum):
    APPLIED = "APPLIED"
    REJECTED = "REJECTED"


class RejectionReason(str, Enum):
    """Machine-readable reason attached to every domain rejection."""

    OUTSIDE_GEOFENCE = "OUTSIDE_GEOFENCE"
    BREAK_ACTIVE = "BREAK_ACTIVE"
    BLACKLISTED = "BLACKLISTED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    NOT_PROJECT_MEMBER = "NOT_PROJECT_MEMBER"
    BEFORE_CHECKIN_WINDOW = "BEFORE_CHECKIN_WINDOW"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    DAY_CLOSED = "DAY_CLOSED"
    NO_ACTIVE_ATTENDANCE = "NO_ACTIVE_ATTENDANCE"
    EXIT_LIMIT_EXCEEDED = "EXIT_LIMIT_EXCEEDED"
    STALE_EVENT = "STALE_EVENT"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    WORKER_NOT_FOUND = "WORKER_NOT_FOUND"

    # Only produced by the sync reconciler.
    INVALID_ACTION = "INVALID_ACTION"
    UNAUTHORIZED = "UNAUTHORIZED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
