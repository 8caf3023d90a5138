from __future__ import annotations

import csv
import io
from datetime import date

from flask import Flask, request

from ..auth.guards import current_principal, jwt_required, permission_required
from ..common.datetime_utils import parse_date_arg
from ..common.validators import optional_int, require_int
from ..container import Container
from ..core.permissions import Permission
from ..web.responses import get_json_body, send_response
from .service import REPORT_FIELDS


def register(app: Flask, container: Container) -> None:
    def _report_range() -> tuple[date, date]:
        today = container.clock.today()
        start = parse_date_arg(request.args.get("start"), "start", today.replace(day=1))
        end = parse_date_arg(request.args.get("end"), "end", today)
        return start, end

    def _build_report():
        start, end = _report_range()
        data = container.payroll_report_service.build_attendance_report(
            start=start,
            end=end,
            employee_id=optional_int(request.args.get("employee_id"), "employee_id"),
            dept_id=optional_int(request.args.get("dept_id"), "dept_id"),
        )
        return start, end, data

    def _write_report_csv(*, data, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/admin/payroll/report", methods=["GET"], endpoint="api_admin_payroll_report")
    @permission_required(Permission.PAYROLL_VIEW)
    def admin_payroll_report():
        start, end, data = _build_report()
        return send_response({"start": start, "end": end, "rows": data.rows, "summary": data.summary})

    @app.route("/api/admin/payroll/report.csv", methods=["GET"], endpoint="api_admin_payroll_report_csv")
    @permission_required(Permission.PAYROLL_VIEW)
    def admin_payroll_report_csv():
        start, end, data = _build_report()
        filename = f"attendance_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return _write_report_csv(data=data, filename=filename)

    @app.route("/api/admin/payroll/generate", methods=["POST"], endpoint="api_admin_payroll_generate")
    @permission_required(Permission.PAYROLL_MANAGE)
    def admin_payroll_generate():
        p = current_principal()
        body = get_json_body()
        ids = body.get("employee_ids")
        result = container.payslip_service.generate(
            current_role=p.role,
            actor_id=p.employee_id,
            year=require_int(body.get("year"), "year", minimum=2000),
            month=require_int(body.get("month"), "month", minimum=1),
            employee_ids=[require_int(i, "employee_ids") for i in ids] if ids else None,
        )
        return send_response(result, f"Generated {len(result['success'])} of {result['total']} payslips")

    @app.route("/api/admin/payroll/payslips", methods=["GET"], endpoint="api_admin_payroll_payslips")
    @permission_required(Permission.PAYROLL_VIEW)
    def admin_payroll_payslips():
        args = request.args
        items = container.payslip_service.list(
            current_role=current_principal().role,
            year=optional_int(args.get("year"), "year"),
            month=optional_int(args.get("month"), "month"),
            employee_id=optional_int(args.get("employee_id"), "employee_id"),
        )
        return send_response([p.to_dict() for p in items])

    @app.route("/api/admin/payroll/payslips/<int:payslip_id>", methods=["GET"], endpoint="api_admin_payroll_payslip")
    @permission_required(Permission.PAYROLL_VIEW)
    def admin_payroll_payslip(payslip_id: int):
        p = current_principal()
        return send_response(
            container.payslip_service.get(payslip_id, current_role=p.role, employee_id=p.employee_id).to_dict()
        )

    @app.route(
        "/api/admin/payroll/payslips/<int:payslip_id>",
        methods=["DELETE"],
        endpoint="api_admin_payroll_payslip_delete",
    )
    @permission_required(Permission.PAYROLL_MANAGE)
    def admin_payroll_payslip_delete(payslip_id: int):
        p = current_principal()
        container.payslip_service.delete(current_role=p.role, actor_id=p.employee_id, payslip_id=payslip_id)
        return send_response(None, "Payslip deleted")

    @app.route(
        "/api/admin/payroll/salary-structures/<int:employee_id>",
        methods=["PUT"],
        endpoint="api_admin_payroll_salary_structure",
    )
    @permission_required(Permission.PAYROLL_MANAGE)
    def admin_payroll_salary_structure(employee_id: int):
        p = current_principal()
        body = get_json_body()
        effective = body.get("effective_from")
        structure = container.payslip_service.set_salary_structure(
            current_role=p.role,
            actor_id=p.employee_id,
            employee_id=employee_id,
            basic_salary=body.get("basic_salary"),
            allowances=body.get("allowances") or 0,
            effective_from=parse_date_arg(effective, "effective_from") if effective else container.clock.today(),
        )
        return send_response(structure, "Salary structure saved")

    @app.route("/api/employee/payslips", methods=["GET"], endpoint="api_employee_payslips")
    @jwt_required
    def employee_payslips():
        year = optional_int(request.args.get("year"), "year")
        items = container.payslip_service.list_mine(current_principal().employee_id, year=year)
        return send_response([p.to_dict() for p in items])

    @app.route("/api/employee/payslips/<int:payslip_id>", methods=["GET"], endpoint="api_employee_payslip")
    @jwt_required
    def employee_payslip(payslip_id: int):
        p = current_principal()
        # Employees resolve their own payslips only, regardless of role.
        payslip = container.payslip_service.get(payslip_id, current_role=None, employee_id=p.employee_id)
        return send_response(payslip.to_dict())
