from __future__ import annotations

from flask import Flask, request

from ..common.http import api_login_required, current_role, current_user_id, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sync/batch", methods=["POST"], endpoint="sync_batch")
    @api_login_required()
    def sync_batch():
        # Role checks happen per action inside the reconciler.
        data = request.get_json(silent=True) or {}
        report = container.sync_reconciler.sync_batch(current_user_id(), current_role(), data.get("actions"))
        return ok(report.to_dict())
