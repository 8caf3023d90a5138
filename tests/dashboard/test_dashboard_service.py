from __future__ import annotations

from datetime import date, time

import pytest

from src.hrm_system.hrm_system.core.enums import WorkMode
from src.hrm_system.hrm_system.core.exceptions import AuthorizationError
from src.hrm_system.hrm_system.core.permissions import Role

WED = date(2026, 3, 4)


@pytest.fixture
def busy_day(container, clock, world):
    attendance = container.attendance_service
    leave = container.leave_service
    e = world.employees

    req = leave.apply(employee_id=e["hr"].employee_id, leave_type="CL", start_date=WED, end_date=WED)
    leave.approve(current_role=Role.SUPER_ADMIN, actor_id=e["admin"].employee_id, request_id=req.request_id)
    leave.apply(employee_id=e["night"].employee_id, leave_type="SL", start_date=date(2026, 3, 9), end_date=date(2026, 3, 9))

    clock.set(clock.to_utc(WED, time(9, 0)))
    attendance.clock_in(e["dev"].employee_id, work_mode=WorkMode.WFH)
    attendance.clock_in(e["admin"].employee_id)
    clock.set(clock.to_utc(WED, time(9, 40)))
    attendance.clock_in(e["seller"].employee_id)
    clock.set(clock.to_utc(WED, time(12, 0)))
    attendance.start_break(e["seller"].employee_id)
    attendance.clock_out(e["admin"].employee_id)
    return world


def test_admin_summary_counts(container, busy_day):
    summary = container.dashboard_service.admin_summary(current_role=Role.HR_MANAGER, day=WED)

    assert summary["headcount"] == 6
    assert summary["clocked_in"] == 3
    assert summary["late"] == 1
    assert summary["wfh"] == 1
    assert summary["on_leave"] == 1
    assert summary["pending_leave_requests"] == 1
    assert summary["pending_corrections"] == 0
    assert summary["is_working_day"] is True


def test_admin_summary_requires_permission(container):
    with pytest.raises(AuthorizationError):
        container.dashboard_service.admin_summary(current_role=Role.EMPLOYEE)


def test_status_today_precedence_and_counts(container, busy_day):
    result = container.dashboard_service.status_today()
    by_name = {p["full_name"]: p["status"] for p in result["employees"]}

    assert by_name == {
        "Asha Admin": "clocked_out",
        "Hari HR": "on_leave",
        "Mina Manager": "not_clocked_in",
        "Dev Patel": "wfh",
        "Sam Seller": "on_break",
        "Nia Night": "not_clocked_in",
    }
    assert result["counts"] == {
        "in_office": 0,
        "wfh": 1,
        "on_break": 1,
        "clocked_out": 1,
        "on_leave": 1,
        "not_clocked_in": 2,
    }
    # grouped by department, then name
    assert [p["dept_name"] for p in result["employees"]] == ["Engineering"] * 5 + ["Sales"]


def test_leave_and_wfh_today_lists(container, busy_day):
    dashboard = container.dashboard_service

    [on_leave] = dashboard.leave_today()
    assert (on_leave["full_name"], on_leave["leave_type"], on_leave["dept_name"]) == ("Hari HR", "Casual Leave", "Engineering")
    assert [w["full_name"] for w in dashboard.wfh_today()] == ["Dev Patel"]
    assert "email" not in on_leave


def test_employee_summary(container, busy_day, world):
    world.repos.calendar.add_holiday("Holi", date(2026, 3, 20))

    summary = container.dashboard_service.employee_summary(world.employees["dev"].employee_id)

    assert summary["today"]["state"] == "working"
    assert {b["leave_type"] for b in summary["leave_balances"]} == {"CL", "SL", "EL", "LOP"}
    assert [h["name"] for h in summary["upcoming_holidays"]] == ["Holi"]
    assert summary["unread_notifications"] == 0
