from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from flask import Flask, request

from ..auth.guards import current_principal, jwt_required, permission_required
from ..common.datetime_utils import parse_date_arg, parse_hhmm, parse_instant
from ..common.validators import require_enum, require_int
from ..container import Container
from ..core.enums import RequestStatus
from ..core.permissions import Permission
from ..web.responses import get_json_body, send_response


def register(app: Flask, container: Container) -> None:
    def _punch(value: Any, work_date: date, field_name: str) -> Optional[datetime]:
        """``HH:MM`` is local wall time on the work date; anything else is ISO-8601."""

        text = str(value or "").strip()
        if not text:
            return None
        if len(text) <= 8 and "T" not in text:
            return container.clock.to_utc(work_date, parse_hhmm(text, field_name))
        return parse_instant(text, container.clock.tz, field_name)

    def _status_arg() -> Optional[RequestStatus]:
        raw = request.args.get("status", RequestStatus.PENDING.value)
        if raw == "all":
            return None
        return require_enum(RequestStatus, raw, "status")

    @app.route("/api/employee/attendance/corrections", methods=["GET"], endpoint="api_employee_corrections")
    @jwt_required
    def employee_corrections():
        return send_response(container.correction_service.list_mine(employee_id=current_principal().employee_id))

    @app.route("/api/employee/attendance/corrections", methods=["POST"], endpoint="api_employee_corrections_create")
    @jwt_required
    def employee_corrections_create():
        body = get_json_body()
        work_date = parse_date_arg(body.get("work_date"), "work_date")
        request_id = container.correction_service.create(
            employee_id=current_principal().employee_id,
            work_date=work_date,
            requested_clock_in=_punch(body.get("clock_in"), work_date, "clock_in"),
            requested_clock_out=_punch(body.get("clock_out"), work_date, "clock_out"),
            reason=body.get("reason"),
        )
        return send_response({"request_id": request_id}, "Correction request submitted", status=201)

    @app.route(
        "/api/employee/attendance/corrections/<int:request_id>/cancel",
        methods=["POST"],
        endpoint="api_employee_corrections_cancel",
    )
    @jwt_required
    def employee_corrections_cancel(request_id: int):
        container.correction_service.cancel(employee_id=current_principal().employee_id, request_id=request_id)
        return send_response(None, "Correction request cancelled")

    @app.route("/api/employee/schedule-changes", methods=["GET"], endpoint="api_employee_schedule_changes")
    @jwt_required
    def employee_schedule_changes():
        return send_response(
            container.correction_service.list_my_schedule_changes(employee_id=current_principal().employee_id)
        )

    @app.route("/api/employee/schedule-changes", methods=["POST"], endpoint="api_employee_schedule_changes_create")
    @jwt_required
    def employee_schedule_changes_create():
        body = get_json_body()
        request_id = container.correction_service.create_schedule_change(
            employee_id=current_principal().employee_id,
            work_date=parse_date_arg(body.get("work_date"), "work_date"),
            requested_shift_id=require_int(body.get("shift_id"), "shift_id"),
            reason=body.get("reason"),
        )
        return send_response({"request_id": request_id}, "Shift change requested", status=201)

    @app.route("/api/admin/attendance/corrections", methods=["GET"], endpoint="api_admin_corrections")
    @permission_required(Permission.CORRECTION_APPROVE)
    def admin_corrections():
        items = container.correction_service.list(current_role=current_principal().role, status=_status_arg())
        return send_response(items)

    @app.route(
        "/api/admin/attendance/corrections/<int:request_id>/approve",
        methods=["POST"],
        endpoint="api_admin_corrections_approve",
    )
    @permission_required(Permission.CORRECTION_APPROVE)
    def admin_corrections_approve(request_id: int):
        p = current_principal()
        body = get_json_body()
        clock_out = None
        if body.get("clock_out"):
            work_date = container.correction_service.get(request_id).work_date
            clock_out = _punch(body.get("clock_out"), work_date, "clock_out")
        record = container.correction_service.approve(
            current_role=p.role,
            actor_id=p.employee_id,
            request_id=request_id,
            admin_note=body.get("admin_note") or "",
            clock_out=clock_out,
        )
        return send_response(record.to_dict(), "Correction approved")

    @app.route(
        "/api/admin/attendance/corrections/<int:request_id>/reject",
        methods=["POST"],
        endpoint="api_admin_corrections_reject",
    )
    @permission_required(Permission.CORRECTION_APPROVE)
    def admin_corrections_reject(request_id: int):
        p = current_principal()
        container.correction_service.reject(
            current_role=p.role,
            actor_id=p.employee_id,
            request_id=request_id,
            admin_note=get_json_body().get("admin_note") or "",
        )
        return send_response(None, "Correction rejected")

    @app.route("/api/admin/schedule-changes", methods=["GET"], endpoint="api_admin_schedule_changes")
    @permission_required(Permission.SCHEDULE_MANAGE)
    def admin_schedule_changes():
        items = container.correction_service.list_schedule_changes(
            current_role=current_principal().role,
            status=_status_arg(),
        )
        return send_response(items)

    @app.route(
        "/api/admin/schedule-changes/<int:request_id>/approve",
        methods=["POST"],
        endpoint="api_admin_schedule_changes_approve",
    )
    @permission_required(Permission.SCHEDULE_MANAGE)
    def admin_schedule_changes_approve(request_id: int):
        p = current_principal()
        schedule_id = container.correction_service.approve_schedule_change(
            current_role=p.role,
            actor_id=p.employee_id,
            request_id=request_id,
            admin_note=get_json_body().get("admin_note") or "",
        )
        return send_response({"schedule_id": schedule_id}, "Shift change approved")

    @app.route(
        "/api/admin/schedule-changes/<int:request_id>/reject",
        methods=["POST"],
        endpoint="api_admin_schedule_changes_reject",
    )
    @permission_required(Permission.SCHEDULE_MANAGE)
    def admin_schedule_changes_reject(request_id: int):
        p = current_principal()
        container.correction_service.reject_schedule_change(
            current_role=p.role,
            actor_id=p.employee_id,
            request_id=request_id,
            admin_note=get_json_body().get("admin_note") or "",
        )
        return send_response(None, "Shift change rejected")
