from __future__ import annotations

from flask import Flask, request

from ..auth.guards import current_principal, jwt_required, permission_required
from ..common.datetime_utils import parse_date_arg
from ..common.validators import optional_int, optional_text, require_enum
from ..container import Container
from ..core.permissions import Permission, Role, normalize_role
from ..web.responses import client_ip, get_json_body, send_response


def _parse_role(value) -> Role:
    role = normalize_role(value)
    if role is None:
        return require_enum(Role, value, "role")
    return role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/employees", methods=["GET"], endpoint="api_admin_employees")
    @permission_required(Permission.EMPLOYEE_VIEW)
    def admin_employees():
        active_s = request.args.get("active", "true").lower()
        active = None if active_s == "all" else active_s in {"1", "true", "yes"}
        role_s = request.args.get("role")
        employees = container.employee_service.list(
            dept_id=optional_int(request.args.get("dept_id"), "dept_id"),
            role=_parse_role(role_s) if role_s else None,
            active=active,
            search=request.args.get("search") or None,
        )
        return send_response([e.public_view() for e in employees])

    @app.route("/api/admin/employees", methods=["POST"], endpoint="api_admin_employees_create")
    @permission_required(Permission.EMPLOYEE_MANAGE)
    def admin_employees_create():
        p = current_principal()
        body = get_json_body()
        employee_id = container.employee_service.create_employee(
            current_role=p.role,
            actor_id=p.employee_id,
            employee_code=body.get("employee_code", ""),
            full_name=body.get("full_name", ""),
            email=body.get("email", ""),
            password=body.get("password", ""),
            role=_parse_role(body.get("role") or Role.EMPLOYEE.value),
            dept_id=optional_int(body.get("dept_id"), "dept_id"),
            shift_id=optional_int(body.get("shift_id"), "shift_id"),
            designation=body.get("designation"),
            manager_id=optional_int(body.get("manager_id"), "manager_id"),
            date_of_joining=parse_date_arg(body["date_of_joining"], "date_of_joining") if body.get("date_of_joining") else None,
        )
        container.leave_service.assign_default_quotas(
            current_role=p.role,
            actor_id=p.employee_id,
            year=None,
            employee_ids=[employee_id],
        )
        employee = container.employee_service.get(employee_id)
        return send_response(employee.public_view(), "Employee created", status=201)

    @app.route("/api/admin/employees/<int:employee_id>", methods=["GET"], endpoint="api_admin_employee_detail")
    @permission_required(Permission.EMPLOYEE_VIEW)
    def admin_employee_detail(employee_id: int):
        return send_response(container.employee_service.get(employee_id).public_view())

    @app.route("/api/admin/employees/<int:employee_id>", methods=["PUT"], endpoint="api_admin_employee_update")
    @permission_required(Permission.EMPLOYEE_MANAGE)
    def admin_employee_update(employee_id: int):
        p = current_principal()
        body = get_json_body()
        fields = {}
        for key in ("full_name", "email", "designation"):
            if key in body:
                fields[key] = body[key] if key != "designation" else optional_text(body[key])
        if "role" in body:
            fields["role"] = _parse_role(body["role"])
        for key in ("dept_id", "shift_id", "manager_id"):
            if key in body:
                fields[key] = optional_int(body[key], key)
        if "date_of_joining" in body:
            fields["date_of_joining"] = parse_date_arg(body["date_of_joining"], "date_of_joining") if body["date_of_joining"] else None

        employee = container.employee_service.update_employee(
            current_role=p.role,
            actor_id=p.employee_id,
            employee_id=employee_id,
            fields=fields,
        )
        return send_response(employee.public_view(), "Employee updated")

    @app.route("/api/admin/employees/<int:employee_id>/deactivate", methods=["POST"], endpoint="api_admin_employee_deactivate")
    @permission_required(Permission.EMPLOYEE_MANAGE)
    def admin_employee_deactivate(employee_id: int):
        p = current_principal()
        container.employee_service.deactivate(current_role=p.role, actor_id=p.employee_id, employee_id=employee_id)
        return send_response(None, "Employee deactivated")

    @app.route("/api/admin/departments", methods=["GET"], endpoint="api_admin_departments")
    @jwt_required
    def admin_departments():
        return send_response(container.department_service.list())

    @app.route("/api/admin/departments", methods=["POST"], endpoint="api_admin_departments_create")
    @permission_required(Permission.EMPLOYEE_MANAGE)
    def admin_departments_create():
        body = get_json_body()
        dept = container.department_service.create(current_role=current_principal().role, dept_name=body.get("dept_name", ""))
        return send_response(dept, "Department created", status=201)

    @app.route("/api/employee/profile", methods=["GET"], endpoint="api_employee_profile")
    @jwt_required
    def employee_profile():
        employee = container.employee_service.get(current_principal().employee_id)
        return send_response(employee.public_view())
