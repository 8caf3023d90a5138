from __future__ import annotations

from datetime import date

from flask import Flask, request

from ..auth.guards import current_principal, jwt_required, permission_required
from ..common.datetime_utils import parse_date_arg
from ..common.validators import optional_int, require_enum, require_int
from ..container import Container
from ..core.enums import HolidayType
from ..core.permissions import Permission
from ..web.responses import get_json_body, send_response


def register(app: Flask, container: Container) -> None:
    @app.route("/api/calendar/holidays", methods=["GET"], endpoint="api_calendar_holidays")
    @jwt_required
    def calendar_holidays():
        today = container.clock.today()
        year = optional_int(request.args.get("year"), "year") or today.year
        start = parse_date_arg(request.args.get("start"), "start", date(year, 1, 1))
        end = parse_date_arg(request.args.get("end"), "end", date(year, 12, 31))
        return send_response(container.calendar_service.holidays_between(start, end))

    @app.route("/api/calendar/day-status", methods=["GET"], endpoint="api_calendar_day_status")
    @jwt_required
    def calendar_day_status():
        p = current_principal()
        day = parse_date_arg(request.args.get("date"), "date", container.clock.today())
        on_leave = container.leave_service.is_on_leave(employee_id=p.employee_id, day=day)
        status = container.calendar_service.day_status(day, on_leave=on_leave)
        return send_response(
            {"date": status.day, "type": status.day_type.value, "label": status.label, "is_working_day": status.is_working_day}
        )

    @app.route("/api/calendar/month", methods=["GET"], endpoint="api_calendar_month")
    @jwt_required
    def calendar_month():
        p = current_principal()
        today = container.clock.today()
        year = optional_int(request.args.get("year"), "year") or today.year
        month = optional_int(request.args.get("month"), "month") or today.month
        summary = container.calendar_service.month_summary(
            year,
            month,
            leave_dates=container.leave_service.leave_dates_in_month(employee_id=p.employee_id, year=year, month=month),
        )
        return send_response(summary)

    @app.route("/api/admin/holidays", methods=["POST"], endpoint="api_admin_holidays_create")
    @permission_required(Permission.CALENDAR_MANAGE)
    def admin_holidays_create():
        body = get_json_body()
        holiday_type = require_enum(HolidayType, body.get("holiday_type") or HolidayType.ONE_TIME.value, "holiday_type")
        holiday_id = container.calendar_service.create_holiday(
            current_role=current_principal().role,
            name=body.get("name", ""),
            holiday_type=holiday_type,
            holiday_date=parse_date_arg(body["holiday_date"], "holiday_date") if body.get("holiday_date") else None,
            recurring_md=body.get("recurring_md"),
        )
        return send_response({"holiday_id": holiday_id}, "Holiday created", status=201)

    @app.route("/api/admin/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="api_admin_holidays_delete")
    @permission_required(Permission.CALENDAR_MANAGE)
    def admin_holidays_delete(holiday_id: int):
        container.calendar_service.delete_holiday(current_role=current_principal().role, holiday_id=holiday_id)
        return send_response(None, "Holiday removed")

    @app.route("/api/admin/working-rules", methods=["GET"], endpoint="api_admin_working_rules")
    @permission_required(Permission.CALENDAR_MANAGE)
    def admin_working_rules():
        return send_response(container.calendar_service.list_working_rules())

    @app.route("/api/admin/working-rules", methods=["PUT"], endpoint="api_admin_working_rules_set")
    @permission_required(Permission.CALENDAR_MANAGE)
    def admin_working_rules_set():
        body = get_json_body()
        rule_id = container.calendar_service.set_working_rule(
            current_role=current_principal().role,
            name=body.get("name") or "Working rule",
            weekend_days=body.get("weekend_days") or [],
            effective_from=parse_date_arg(body.get("effective_from"), "effective_from", container.clock.today()),
        )
        return send_response({"rule_id": rule_id}, "Working rule saved")

    @app.route("/api/admin/holiday-templates", methods=["GET"], endpoint="api_admin_holiday_templates")
    @permission_required(Permission.CALENDAR_MANAGE)
    def admin_holiday_templates():
        country = request.args.get("country") or None
        return send_response(container.calendar_service.list_templates(country=country.upper() if country else None))

    @app.route("/api/admin/holiday-templates", methods=["POST"], endpoint="api_admin_holiday_templates_create")
    @permission_required(Permission.CALENDAR_MANAGE)
    def admin_holiday_templates_create():
        p = current_principal()
        template = container.calendar_service.create_template(current_role=p.role, actor_id=p.employee_id, data=get_json_body())
        return send_response(template, "Template created", status=201)

    @app.route("/api/admin/holiday-templates/<int:template_id>", methods=["GET"], endpoint="api_admin_holiday_template_detail")
    @permission_required(Permission.CALENDAR_MANAGE)
    def admin_holiday_template_detail(template_id: int):
        return send_response(container.calendar_service.get_template(template_id))

    @app.route("/api/admin/holiday-templates/<int:template_id>", methods=["PUT"], endpoint="api_admin_holiday_template_update")
    @permission_required(Permission.CALENDAR_MANAGE)
    def admin_holiday_template_update(template_id: int):
        template = container.calendar_service.update_template(
            current_role=current_principal().role,
            template_id=template_id,
            data=get_json_body(),
        )
        return send_response(template, "Template updated")

    @app.route("/api/admin/holiday-templates/<int:template_id>", methods=["DELETE"], endpoint="api_admin_holiday_template_delete")
    @permission_required(Permission.CALENDAR_MANAGE)
    def admin_holiday_template_delete(template_id: int):
        container.calendar_service.delete_template(current_role=current_principal().role, template_id=template_id)
        return send_response(None, "Template deleted")

    @app.route("/api/admin/holiday-templates/<int:template_id>/apply", methods=["POST"], endpoint="api_admin_holiday_template_apply")
    @permission_required(Permission.CALENDAR_MANAGE)
    def admin_holiday_template_apply(template_id: int):
        body = get_json_body()
        year = require_int(body.get("year") or container.clock.today().year, "year", minimum=2000)
        result = container.calendar_service.apply_template(
            current_role=current_principal().role,
            template_id=template_id,
            year=year,
        )
        return send_response(result, f"{len(result['created'])} holidays created")
