from __future__ import annotations

from flask import Flask, request

from ..common.http import api_login_required, current_user_id, ok
from ..common.validators import require_positive_int
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    blacklist = container.blacklist_service

    @app.route("/api/blacklist", methods=["GET"], endpoint="blacklist_list")
    @api_login_required(Role.MANAGER)
    def list_entries():
        raw = request.args.get("org_id")
        org_id = require_positive_int(raw, "org_id") if raw else None
        entries = blacklist.list_entries(current_user_id(), org_id=org_id)
        return ok({"blacklist": [e.to_dict() for e in entries]})

    @app.route("/api/blacklist", methods=["POST"], endpoint="blacklist_add")
    @api_login_required(Role.MANAGER)
    def add_entry():
        data = request.get_json(silent=True) or {}
        status = blacklist.add(
            current_user_id(),
            org_id=require_positive_int(data.get("org_id"), "org_id"),
            worker_id=require_positive_int(data.get("worker_id"), "worker_id"),
            reason=data.get("reason"),
        )
        return ok(status.to_dict(), 201)

    @app.route("/api/blacklist/<int:entry_id>", methods=["DELETE"], endpoint="blacklist_lift")
    @api_login_required(Role.MANAGER)
    def lift_entry(entry_id: int):
        entry = blacklist.lift(current_user_id(), entry_id)
        return ok({"entry_id": entry.entry_id, "worker_id": entry.worker_id, "lifted": True})
