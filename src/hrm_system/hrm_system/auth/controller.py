from __future__ import annotations

import logging

from flask import Flask

from ..container import Container
from ..web.responses import get_json_body, send_response
from .guards import current_principal, jwt_required

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="api_auth_login")
    def login():
        body = get_json_body()
        result = container.auth_service.login(body.get("email", ""), body.get("password", ""))
        logger.info("Employee %s logged in", result.employee.employee_id)
        return send_response(
            {
                "token": result.token,
                "expires_at": result.expires_at,
                "user": result.employee.public_view(),
            },
            "Login successful",
        )

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_auth_me")
    @jwt_required
    def me():
        employee = container.employee_service.get(current_principal().employee_id)
        return send_response(employee.public_view())

    @app.route("/api/auth/change-password", methods=["POST"], endpoint="api_auth_change_password")
    @jwt_required
    def change_password():
        body = get_json_body()
        container.auth_service.change_password(
            employee_id=current_principal().employee_id,
            current_password=body.get("current_password", ""),
            new_password=body.get("new_password", ""),
        )
        return send_response(None, "Password changed")

    @app.route("/api/health", methods=["GET"], endpoint="api_health")
    def health():
        db_ok = container.health_check()
        status = 200 if db_ok else 503
        return send_response(
            {"status": "ok" if db_ok else "degraded", "database": "up" if db_ok else "down"},
            success=db_ok,
            status=status,
        )
