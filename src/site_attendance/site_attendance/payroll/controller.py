from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import api_login_required, current_user_id, ok
from ..common.validators import require_positive_int
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    wages = container.wage_engine

    @app.route("/api/wages/<int:attendance_id>/recompute", methods=["POST"], endpoint="wages_recompute_one")
    @api_login_required(Role.MANAGER)
    def recompute_one(attendance_id: int):
        return ok(wages.recompute(attendance_id).to_dict())

    @app.route("/api/wages/recompute", methods=["POST"], endpoint="wages_recompute_day")
    @api_login_required(Role.MANAGER)
    def recompute_day():
        raw = request.args.get("date")
        try:
            work_date = parse_iso_date(raw) if raw else now_local().date()
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")
        return ok(wages.recompute_day(work_date).to_dict())

    @app.route("/api/wages/mine", methods=["GET"], endpoint="wages_mine")
    @api_login_required(Role.LABOUR)
    def my_wages():
        limit = require_positive_int(request.args.get("limit", 50), "limit")
        return ok(wages.wages_for_worker(current_user_id(), limit=limit).to_dict())
