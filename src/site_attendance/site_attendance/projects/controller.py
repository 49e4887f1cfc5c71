from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import api_login_required, current_role, current_user_id, ok
from ..container import Container
from ..core.enums import Role
from .model import BreakWindow


def _break_to_dict(window: BreakWindow) -> dict:
    return {
        "break_id": window.break_id,
        "project_id": window.project_id,
        "started_at": window.started_at.isoformat(),
        "ended_at": window.ended_at.isoformat(),
        "reason": window.reason,
        "remaining_minutes": window.remaining_minutes(now_local()),
    }


def register(app: Flask, container: Container) -> None:
    breaks = container.break_service

    @app.route("/api/projects/<int:project_id>/breaks", methods=["POST"], endpoint="project_start_break")
    @api_login_required()
    def start_break(project_id: int):
        data = request.get_json(silent=True) or {}
        window = breaks.start_break(
            current_role=current_role(),
            project_id=project_id,
            duration_minutes=data.get("duration_minutes"),
            reason=data.get("reason"),
            created_by=current_user_id(),
        )
        return ok(_break_to_dict(window), 201)

    @app.route("/api/projects/<int:project_id>/breaks/active", methods=["GET"], endpoint="project_active_break")
    @api_login_required(Role.SITE_ENGINEER)
    def active_break(project_id: int):
        window = breaks.active_break(project_id)
        return ok({"active": window is not None, "break": _break_to_dict(window) if window else None})

    @app.route("/api/projects/<int:project_id>/breaks", methods=["GET"], endpoint="project_list_breaks")
    @api_login_required(Role.SITE_ENGINEER)
    def list_breaks(project_id: int):
        windows = breaks.list_breaks(project_id, current_role=current_role())
        return ok({"breaks": [_break_to_dict(w) for w in windows]})
