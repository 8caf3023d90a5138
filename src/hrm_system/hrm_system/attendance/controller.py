from __future__ import annotations

from datetime import timedelta

from flask import Flask, request

from ..auth.guards import current_principal, jwt_required, permission_required
from ..common.datetime_utils import parse_date_arg, parse_instant
from ..common.validators import optional_int, optional_text, require_enum
from ..container import Container
from ..core.enums import AttendanceStatus, WorkMode
from ..core.permissions import Permission
from ..web.responses import client_ip, get_json_body, send_response


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    @app.route("/api/employee/attendance/clock-in", methods=["POST"], endpoint="api_attendance_clock_in")
    @jwt_required
    def clock_in():
        body = get_json_body()
        record = svc.clock_in(
            current_principal().employee_id,
            work_mode=require_enum(WorkMode, body.get("work_mode") or WorkMode.OFFICE.value, "work_mode"),
            ip_address=client_ip(),
            remarks=body.get("remarks"),
        )
        message = f"Clocked in (late by {record.late_minutes} min)" if record.is_late else "Clocked in"
        return send_response(record.to_dict(), message, status=201)

    @app.route("/api/employee/attendance/clock-out", methods=["POST"], endpoint="api_attendance_clock_out")
    @jwt_required
    def clock_out():
        record = svc.clock_out(current_principal().employee_id)
        return send_response(record.to_dict(), "Clocked out")

    @app.route("/api/employee/attendance/break/start", methods=["POST"], endpoint="api_attendance_break_start")
    @jwt_required
    def break_start():
        return send_response(svc.start_break(current_principal().employee_id).to_dict(), "Break started")

    @app.route("/api/employee/attendance/break/end", methods=["POST"], endpoint="api_attendance_break_end")
    @jwt_required
    def break_end():
        return send_response(svc.end_break(current_principal().employee_id).to_dict(), "Break ended")

    @app.route("/api/employee/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @jwt_required
    def today():
        return send_response(svc.today_status(current_principal().employee_id).to_dict())

    @app.route("/api/employee/attendance/history", methods=["GET"], endpoint="api_attendance_history")
    @permission_required(Permission.ATTENDANCE_VIEW_OWN)
    def history():
        end = parse_date_arg(request.args.get("end"), "end", container.clock.today())
        start = parse_date_arg(request.args.get("start"), "start", end - timedelta(days=30))
        records = svc.history(current_principal().employee_id, start=start, end=end)
        return send_response([r.to_dict() for r in records])

    @app.route("/api/admin/attendance", methods=["GET"], endpoint="api_admin_attendance")
    @permission_required(Permission.ATTENDANCE_VIEW_ALL)
    def admin_attendance():
        args = request.args
        day = parse_date_arg(args.get("date"), "date", container.clock.today())
        start = parse_date_arg(args.get("start"), "start", day)
        end = parse_date_arg(args.get("end"), "end", start if args.get("start") else day)
        status = args.get("status")
        work_mode = args.get("work_mode")
        rows = svc.list_records(
            current_role=current_principal().role,
            start=start,
            end=end,
            dept_id=optional_int(args.get("dept_id"), "dept_id"),
            employee_id=optional_int(args.get("employee_id"), "employee_id"),
            status=require_enum(AttendanceStatus, status, "status") if status else None,
            work_mode=require_enum(WorkMode, work_mode, "work_mode") if work_mode else None,
            flagged_only=args.get("flagged") in ("1", "true"),
        )
        return send_response([r.to_dict() for r in rows])

    @app.route("/api/admin/attendance/<int:attendance_id>", methods=["GET"], endpoint="api_admin_attendance_get")
    @permission_required(Permission.ATTENDANCE_VIEW_ALL)
    def admin_attendance_get(attendance_id: int):
        return send_response(svc.get(attendance_id).to_dict())

    @app.route("/api/admin/attendance/<int:attendance_id>", methods=["PUT"], endpoint="api_admin_attendance_update")
    @permission_required(Permission.ATTENDANCE_EDIT)
    def admin_attendance_update(attendance_id: int):
        body = get_json_body()
        tz = container.clock.tz
        fields = {}
        if "clock_in" in body:
            fields["clock_in"] = parse_instant(body.get("clock_in"), tz, "clock_in")
        if "clock_out" in body:
            fields["clock_out"] = parse_instant(body.get("clock_out"), tz, "clock_out")
        if body.get("status"):
            fields["status"] = require_enum(AttendanceStatus, body["status"], "status")
            fields["status_reason"] = optional_text(body.get("status_reason"))
        if body.get("work_mode"):
            fields["work_mode"] = require_enum(WorkMode, body["work_mode"], "work_mode")
        if "remarks" in body:
            fields["remarks"] = optional_text(body.get("remarks"))

        p = current_principal()
        record = svc.admin_update(current_role=p.role, actor_id=p.employee_id, attendance_id=attendance_id, fields=fields)
        return send_response(record.to_dict(), "Attendance updated")

    @app.route("/api/admin/attendance/<int:attendance_id>/flag", methods=["POST"], endpoint="api_admin_attendance_flag")
    @permission_required(Permission.ATTENDANCE_FLAG)
    def admin_attendance_flag(attendance_id: int):
        p = current_principal()
        record = svc.flag(
            current_role=p.role,
            actor_id=p.employee_id,
            attendance_id=attendance_id,
            reason=get_json_body().get("reason") or "",
        )
        return send_response(record.to_dict(), "Attendance flagged")

    @app.route("/api/admin/attendance/finalize", methods=["POST"], endpoint="api_admin_attendance_finalize")
    @permission_required(Permission.ATTENDANCE_FINALIZE)
    def admin_attendance_finalize():
        body = get_json_body()
        work_date = parse_date_arg(body.get("date"), "date", container.clock.today() - timedelta(days=1))
        result = container.attendance_finalizer.finalize_date(work_date)
        return send_response(result.to_dict(), f"Finalized {work_date.isoformat()}")
