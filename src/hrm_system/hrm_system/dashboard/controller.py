from __future__ import annotations

from flask import Flask, request

from ..auth.guards import current_principal, jwt_required, permission_required
from ..common.datetime_utils import parse_date_arg
from ..container import Container
from ..core.permissions import Permission
from ..web.responses import send_response


def register(app: Flask, container: Container) -> None:
    svc = container.dashboard_service

    @app.route("/api/admin/dashboard", methods=["GET"], endpoint="api_admin_dashboard")
    @permission_required(Permission.DASHBOARD_ADMIN)
    def admin_dashboard():
        day = parse_date_arg(request.args.get("date"), "date", container.clock.today())
        return send_response(svc.admin_summary(current_role=current_principal().role, day=day))

    @app.route("/api/employee/dashboard", methods=["GET"], endpoint="api_employee_dashboard")
    @jwt_required
    def employee_dashboard():
        return send_response(svc.employee_summary(current_principal().employee_id))

    @app.route("/api/employee/company/leave-today", methods=["GET"], endpoint="api_company_leave_today")
    @jwt_required
    def company_leave_today():
        return send_response(svc.leave_today())

    @app.route("/api/employee/company/wfh-today", methods=["GET"], endpoint="api_company_wfh_today")
    @jwt_required
    def company_wfh_today():
        return send_response(svc.wfh_today())

    @app.route("/api/employee/company/status-today", methods=["GET"], endpoint="api_company_status_today")
    @jwt_required
    def company_status_today():
        return send_response(svc.status_today())
