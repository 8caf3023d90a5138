from __future__ import annotations

from flask import Flask, request

from ..auth.guards import current_principal, jwt_required, permission_required
from ..common.datetime_utils import parse_date_arg
from ..common.validators import optional_int, require_enum, require_int
from ..container import Container
from ..core.enums import HalfDayType, LeaveStatus
from ..core.permissions import Permission
from ..web.responses import get_json_body, send_response


def register(app: Flask, container: Container) -> None:
    def _status_arg(default: str):
        raw = request.args.get("status", default)
        if not raw or raw == "all":
            return None
        return require_enum(LeaveStatus, raw, "status")

    @app.route("/api/employee/leave-balance", methods=["GET"], endpoint="api_employee_leave_balance")
    @jwt_required
    def employee_leave_balance():
        year = optional_int(request.args.get("year"), "year")
        balances = container.leave_service.balances(current_principal().employee_id, year=year)
        return send_response([b.to_dict() for b in balances])

    @app.route("/api/employee/leave-types", methods=["GET"], endpoint="api_employee_leave_types")
    @jwt_required
    def employee_leave_types():
        return send_response(container.leave_service.list_types())

    @app.route("/api/employee/leave-requests", methods=["GET"], endpoint="api_employee_leave_requests")
    @jwt_required
    def employee_leave_requests():
        items = container.leave_service.list_mine(current_principal().employee_id, status=_status_arg("all"))
        return send_response([r.to_dict() for r in items])

    @app.route("/api/employee/leave-requests", methods=["POST"], endpoint="api_employee_leave_requests_create")
    @permission_required(Permission.LEAVE_APPLY)
    def employee_leave_requests_create():
        body = get_json_body()
        start = parse_date_arg(body.get("start_date"), "start_date")
        end = parse_date_arg(body.get("end_date"), "end_date", start)
        period = body.get("half_day_period")
        req = container.leave_service.apply(
            employee_id=current_principal().employee_id,
            leave_type=body.get("leave_type") or "",
            start_date=start,
            end_date=end,
            is_half_day=bool(body.get("is_half_day")),
            half_day_period=require_enum(HalfDayType, period, "half_day_period") if period else None,
            reason=body.get("reason"),
        )
        return send_response(req.to_dict(), "Leave request submitted", status=201)

    @app.route(
        "/api/employee/leave-requests/<int:request_id>/cancel",
        methods=["POST"],
        endpoint="api_employee_leave_requests_cancel",
    )
    @jwt_required
    def employee_leave_requests_cancel(request_id: int):
        req = container.leave_service.cancel(employee_id=current_principal().employee_id, request_id=request_id)
        return send_response(req.to_dict(), "Leave request cancelled")

    @app.route("/api/admin/leave-requests", methods=["GET"], endpoint="api_admin_leave_requests")
    @jwt_required
    def admin_leave_requests():
        p = current_principal()
        items = container.leave_service.list_for_approver(
            current_role=p.role,
            actor_id=p.employee_id,
            status=_status_arg(LeaveStatus.PENDING.value),
        )
        return send_response([r.to_dict() for r in items])

    @app.route(
        "/api/admin/leave-requests/<int:request_id>/approve",
        methods=["POST"],
        endpoint="api_admin_leave_requests_approve",
    )
    @jwt_required
    def admin_leave_requests_approve(request_id: int):
        p = current_principal()
        req = container.leave_service.approve(
            current_role=p.role,
            actor_id=p.employee_id,
            request_id=request_id,
            note=get_json_body().get("note"),
        )
        return send_response(req.to_dict(), "Leave request approved")

    @app.route(
        "/api/admin/leave-requests/<int:request_id>/reject",
        methods=["POST"],
        endpoint="api_admin_leave_requests_reject",
    )
    @jwt_required
    def admin_leave_requests_reject(request_id: int):
        p = current_principal()
        req = container.leave_service.reject(
            current_role=p.role,
            actor_id=p.employee_id,
            request_id=request_id,
            note=get_json_body().get("note"),
        )
        return send_response(req.to_dict(), "Leave request rejected")

    @app.route("/api/admin/leave-types", methods=["GET"], endpoint="api_admin_leave_types")
    @permission_required(Permission.LEAVE_CONFIGURE)
    def admin_leave_types():
        return send_response(container.leave_service.list_types(active_only=False))

    @app.route("/api/admin/leave-types", methods=["POST"], endpoint="api_admin_leave_types_create")
    @permission_required(Permission.LEAVE_CONFIGURE)
    def admin_leave_types_create():
        leave_type = container.leave_service.create_type(current_role=current_principal().role, data=get_json_body())
        return send_response(leave_type, "Leave type created", status=201)

    @app.route("/api/admin/leave-balances", methods=["GET"], endpoint="api_admin_leave_balances")
    @permission_required(Permission.LEAVE_CONFIGURE)
    def admin_leave_balances():
        employee_id = require_int(request.args.get("employee_id"), "employee_id")
        year = optional_int(request.args.get("year"), "year")
        return send_response([b.to_dict() for b in container.leave_service.balances(employee_id, year=year)])

    @app.route("/api/admin/leave-balances/assign", methods=["POST"], endpoint="api_admin_leave_balances_assign")
    @permission_required(Permission.LEAVE_CONFIGURE)
    def admin_leave_balances_assign():
        p = current_principal()
        body = get_json_body()
        ids = body.get("employee_ids")
        result = container.leave_service.assign_default_quotas(
            current_role=p.role,
            actor_id=p.employee_id,
            year=optional_int(body.get("year"), "year"),
            employee_ids=[require_int(i, "employee_ids") for i in ids] if ids else None,
        )
        return send_response(result, f"{result['created']} balance(s) created")

    @app.route(
        "/api/admin/leave-balances/<int:balance_id>/adjust",
        methods=["POST"],
        endpoint="api_admin_leave_balances_adjust",
    )
    @permission_required(Permission.LEAVE_CONFIGURE)
    def admin_leave_balances_adjust(balance_id: int):
        p = current_principal()
        body = get_json_body()
        balance = container.leave_service.adjust(
            current_role=p.role,
            actor_id=p.employee_id,
            balance_id=balance_id,
            delta=body.get("delta"),
            reason=body.get("reason") or "",
        )
        return send_response(balance.to_dict(), "Leave balance adjusted")

    @app.route("/api/admin/leave-balances/rollover", methods=["POST"], endpoint="api_admin_leave_balances_rollover")
    @permission_required(Permission.LEAVE_CONFIGURE)
    def admin_leave_balances_rollover():
        p = current_principal()
        body = get_json_body()
        from_year = optional_int(body.get("from_year"), "from_year") or container.clock.today().year - 1
        result = container.leave_service.rollover(current_role=p.role, actor_id=p.employee_id, from_year=from_year)
        return send_response(result, f"{result['created']} balance(s) rolled over")
