"""JSON helpers shared by the Flask controllers.

Identity is read from the Flask session (``user_id``, ``role``) that the
authentication service establishes with the shared SECRET_KEY.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import Flask, jsonify, session
from werkzeug.exceptions import HTTPException

from ..core.enums import RejectionReason
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

REJECTION_STATUS = {
    RejectionReason.OUTSIDE_GEOFENCE: 403,
    RejectionReason.BLACKLISTED: 403,
    RejectionReason.NOT_PROJECT_MEMBER: 403,
    RejectionReason.BEFORE_CHECKIN_WINDOW: 403,
    RejectionReason.EXIT_LIMIT_EXCEEDED: 403,
    RejectionReason.UNAUTHORIZED: 403,
    RejectionReason.ALREADY_CHECKED_IN: 409,
    RejectionReason.DAY_CLOSED: 409,
    RejectionReason.BREAK_ACTIVE: 409,
    RejectionReason.CAPACITY_EXCEEDED: 409,
    RejectionReason.NO_ACTIVE_ATTENDANCE: 409,
    RejectionReason.STALE_EVENT: 409,
}

_ERROR_STATUS = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (StorageError, 503),
)


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> str:
    return str(session.get("role") or "")


def api_login_required(*roles: Any):
    """Require a session; when ``roles`` are given the session role must be one of them."""

    allowed = {getattr(r, "value", r) for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            if allowed and session.get("role") not in allowed:
                return jsonify({"success": False, "message": "Forbidden for this role"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def ok(data: Any, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def rejection_response(rejection):
    body = {"success": False, **rejection.to_dict()}
    return jsonify(body), REJECTION_STATUS.get(rejection.reason, 422)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = next((code for kind, code in _ERROR_STATUS if isinstance(exc, kind)), 400)
        if status >= 500:
            logger.error("Storage failure: %s", exc)
        return jsonify({"success": False, "message": str(exc), "retryable": status == 503}), status

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        logger.exception("Unhandled error")
        return jsonify({"success": False, "message": "Internal server error"}), 500
