from __future__ import annotations

from flask import Flask, request

from ..auth.guards import current_principal, jwt_required, permission_required
from ..container import Container
from ..core.permissions import Permission
from ..web.responses import get_json_body, send_response


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/shifts", methods=["GET"], endpoint="api_admin_shifts")
    @jwt_required
    def admin_shifts():
        active_only = request.args.get("active_only", "0").lower() in {"1", "true", "yes"}
        return send_response(container.shift_service.list(active_only=active_only))

    @app.route("/api/admin/shifts", methods=["POST"], endpoint="api_admin_shifts_create")
    @permission_required(Permission.SHIFT_MANAGE)
    def admin_shifts_create():
        shift = container.shift_service.create(current_role=current_principal().role, data=get_json_body())
        return send_response(shift, "Shift created", status=201)

    @app.route("/api/admin/shifts/<int:shift_id>", methods=["PUT"], endpoint="api_admin_shifts_update")
    @permission_required(Permission.SHIFT_MANAGE)
    def admin_shifts_update(shift_id: int):
        shift = container.shift_service.update(current_role=current_principal().role, shift_id=shift_id, data=get_json_body())
        return send_response(shift, "Shift updated")
