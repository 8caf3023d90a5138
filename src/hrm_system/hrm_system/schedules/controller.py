from __future__ import annotations

from datetime import timedelta

from flask import Flask, request

from ..auth.guards import current_principal, jwt_required, permission_required
from ..common.datetime_utils import parse_date_arg
from ..common.validators import optional_int, require_int
from ..container import Container
from ..core.permissions import Permission
from ..web.responses import get_json_body, send_response


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/schedules", methods=["GET"], endpoint="api_admin_schedules")
    @permission_required(Permission.SCHEDULE_MANAGE)
    def admin_schedules():
        today = container.clock.today()
        start = parse_date_arg(request.args.get("start"), "start", today)
        end = parse_date_arg(request.args.get("end"), "end", start + timedelta(days=7))
        schedules = container.schedule_service.list_range(
            start=start,
            end=end,
            employee_id=optional_int(request.args.get("employee_id"), "employee_id"),
        )
        return send_response(schedules)

    @app.route("/api/admin/schedules", methods=["POST"], endpoint="api_admin_schedules_assign")
    @permission_required(Permission.SCHEDULE_MANAGE)
    def admin_schedules_assign():
        body = get_json_body()
        schedule_id = container.schedule_service.assign(
            current_role=current_principal().role,
            employee_id=require_int(body.get("employee_id"), "employee_id"),
            work_date=parse_date_arg(body.get("work_date"), "work_date"),
            shift_id=require_int(body.get("shift_id"), "shift_id"),
            note=body.get("note"),
        )
        return send_response({"schedule_id": schedule_id}, "Shift assigned", status=201)

    @app.route("/api/admin/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="api_admin_schedules_delete")
    @permission_required(Permission.SCHEDULE_MANAGE)
    def admin_schedules_delete(schedule_id: int):
        container.schedule_service.delete(current_role=current_principal().role, schedule_id=schedule_id)
        return send_response(None, "Schedule deleted")

    @app.route("/api/employee/shift", methods=["GET"], endpoint="api_employee_shift")
    @jwt_required
    def employee_shift():
        p = current_principal()
        work_date = parse_date_arg(request.args.get("date"), "date", container.clock.today())
        employee = container.employee_service.get(p.employee_id)
        shift = container.shift_resolver.resolve(
            employee_id=p.employee_id,
            work_date=work_date,
            fallback_shift_id=employee.shift_id,
        )
        return send_response({"work_date": work_date, "shift": shift})
