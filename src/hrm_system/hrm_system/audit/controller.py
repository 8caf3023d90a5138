from __future__ import annotations

from flask import Flask, request

from ..auth.guards import permission_required
from ..common.validators import optional_int
from ..container import Container
from ..core.permissions import Permission
from ..web.responses import send_response


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/audit-logs", methods=["GET"], endpoint="api_admin_audit_logs")
    @permission_required(Permission.AUDIT_VIEW)
    def admin_audit_logs():
        logs = container.audit_service.list(
            entity_type=request.args.get("entity_type") or None,
            entity_id=request.args.get("entity_id") or None,
            actor_id=optional_int(request.args.get("actor_id"), "actor_id"),
            limit=min(optional_int(request.args.get("limit"), "limit") or 200, 1000),
        )
        return send_response(logs)
