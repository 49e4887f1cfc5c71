from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import api_login_required, current_user_id, ok, rejection_response
from ..common.validators import require_positive_int
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..geofence.model import Coordinates
from .history import AttendanceDay
from .results import Rejection


def register(app: Flask, container: Container) -> None:
    ledger = container.attendance_ledger
    history = container.attendance_history
    manual = container.manual_attendance

    def point_from(data: dict) -> Coordinates:
        return Coordinates.parse(data.get("latitude"), data.get("longitude"))

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @api_login_required(Role.LABOUR)
    def check_in():
        data = request.get_json(silent=True) or {}
        project_id = require_positive_int(data.get("project_id"), "project_id")
        outcome = ledger.check_in(current_user_id(), project_id, point_from(data))
        if isinstance(outcome, Rejection):
            return rejection_response(outcome)
        return ok(outcome.to_dict(), 201)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @api_login_required(Role.LABOUR)
    def check_out():
        outcome = ledger.check_out(current_user_id())
        if isinstance(outcome, Rejection):
            return rejection_response(outcome)
        return ok(outcome.to_dict())

    @app.route("/api/attendance/track", methods=["POST"], endpoint="attendance_track")
    @api_login_required(Role.LABOUR)
    def track():
        data = request.get_json(silent=True) or {}
        outcome = ledger.track_location(current_user_id(), point_from(data))
        if isinstance(outcome, Rejection):
            return rejection_response(outcome)
        return ok(outcome.to_dict())

    @app.route("/api/attendance/live", methods=["GET"], endpoint="attendance_live")
    @api_login_required(Role.LABOUR)
    def live():
        return ok(ledger.live_status(current_user_id()).to_dict())

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @api_login_required(Role.LABOUR)
    def attendance_history():
        limit = require_positive_int(request.args.get("limit", 30), "limit")
        days = history.history(current_user_id(), limit=limit)
        return ok({"history": [d.to_dict() for d in days]})

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @api_login_required(Role.LABOUR)
    def attendance_today():
        day = history.today(current_user_id())
        return ok({"attendance": day.to_dict() if day else None})

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @api_login_required(Role.SITE_ENGINEER)
    def mark():
        data = request.get_json(silent=True) or {}
        raw_date = data.get("date")
        try:
            work_date = parse_iso_date(raw_date) if raw_date else None
        except (TypeError, ValueError):
            raise ValidationError("date must be YYYY-MM-DD")
        record = manual.mark(
            current_user_id(),
            worker_id=require_positive_int(data.get("worker_id"), "worker_id"),
            project_id=require_positive_int(data.get("project_id"), "project_id"),
            status=data.get("status"),
            work_date=work_date,
        )
        return ok(AttendanceDay(record=record).to_dict())
