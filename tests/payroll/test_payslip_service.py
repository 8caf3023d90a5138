from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.hrm_system.hrm_system.attendance.model import AttendanceRecord
from src.hrm_system.hrm_system.core.enums import AttendanceStatus
from src.hrm_system.hrm_system.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hrm_system.hrm_system.core.permissions import Role


@pytest.fixture
def payroll_world(container, world):
    dev = world.employees["dev"].employee_id
    container.payslip_service.set_salary_structure(
        current_role=Role.HR_ADMIN,
        actor_id=2,
        employee_id=dev,
        basic_salary="30000",
        allowances="10000",
        effective_from=date(2026, 1, 1),
    )
    for day, status in ((date(2026, 2, 10), AttendanceStatus.ABSENT), (date(2026, 2, 11), AttendanceStatus.HALF_DAY)):
        world.repos.attendance.add(
            AttendanceRecord(attendance_id=0, employee_id=dev, work_date=day, clock_in=None, clock_out=None, status=status)
        )
    # weekend absences do not cost pay
    world.repos.attendance.add(
        AttendanceRecord(
            attendance_id=0,
            employee_id=dev,
            work_date=date(2026, 2, 14),
            clock_in=None,
            clock_out=None,
            status=AttendanceStatus.ABSENT,
        )
    )
    return world


def test_calculate_uses_absences_and_half_days(container, payroll_world):
    figures = container.payslip_service.calculate(employee_id=payroll_world.employees["dev"].employee_id, year=2026, month=2)

    assert figures.working_days == 20
    assert figures.lop_days == Decimal("1.5")
    assert figures.lop_deduction == Decimal("3000.00")
    assert figures.provident_fund == Decimal("4440.00")
    assert figures.net_pay == Decimal("32560.00")


def test_unpaid_leave_adds_to_loss_of_pay(container, payroll_world):
    dev = payroll_world.employees["dev"].employee_id
    req = container.leave_service.apply(employee_id=dev, leave_type="LOP", start_date=date(2026, 2, 12), end_date=date(2026, 2, 12))
    container.leave_service.approve(current_role=Role.HR_ADMIN, actor_id=2, request_id=req.request_id)

    figures = container.payslip_service.calculate(employee_id=dev, year=2026, month=2)

    assert figures.lop_days == Decimal("2.5")


def test_unpaid_leave_on_already_docked_days_is_not_charged_twice(container, payroll_world):
    dev = payroll_world.employees["dev"].employee_id
    leave = container.leave_service
    half = leave.apply(employee_id=dev, leave_type="LOP", start_date=date(2026, 2, 11), end_date=date(2026, 2, 11), is_half_day=True)
    full = leave.apply(employee_id=dev, leave_type="LOP", start_date=date(2026, 2, 10), end_date=date(2026, 2, 10))
    for req in (half, full):
        leave.approve(current_role=Role.HR_ADMIN, actor_id=2, request_id=req.request_id)

    figures = container.payslip_service.calculate(employee_id=dev, year=2026, month=2)

    assert figures.lop_days == Decimal("1.5")
    assert figures.net_pay == Decimal("32560.00")


def test_salary_structure_defaults_to_company_today(container, world):
    dev = world.employees["dev"].employee_id

    structure = container.payslip_service.set_salary_structure(
        current_role=Role.HR_ADMIN, actor_id=2, employee_id=dev, basic_salary="30000"
    )

    assert structure.effective_from == date(2026, 3, 4)


def test_generate_reports_success_and_errors(container, payroll_world):
    svc = container.payslip_service
    dev = payroll_world.employees["dev"].employee_id
    seller = payroll_world.employees["seller"].employee_id

    result = svc.generate(current_role=Role.HR_ADMIN, actor_id=2, year=2026, month=2, employee_ids=[dev, seller])

    assert result["total"] == 2
    assert [s["employee_id"] for s in result["success"]] == [dev]
    assert result["success"][0]["net_pay"] == Decimal("32560.00")
    assert result["errors"] == [{"employee_id": seller, "error": "No salary structure"}]
    [note] = payroll_world.repos.notifications.for_employee(dev)
    assert note.category == "payroll"
    assert "payroll.generate" in payroll_world.repos.audit.actions()

    again = svc.generate(current_role=Role.HR_ADMIN, actor_id=2, year=2026, month=2, employee_ids=[dev])
    assert again["errors"] == [{"employee_id": dev, "error": "Payslip already exists"}]


def test_generate_requires_payroll_permission(container, payroll_world):
    with pytest.raises(AuthorizationError):
        container.payslip_service.generate(current_role=Role.HR_MANAGER, actor_id=3, year=2026, month=2)
    with pytest.raises(ValidationError):
        container.payslip_service.generate(current_role=Role.HR_ADMIN, actor_id=2, year=2026, month=13)


def test_employee_sees_only_own_payslip(container, payroll_world):
    svc = container.payslip_service
    dev = payroll_world.employees["dev"].employee_id
    result = svc.generate(current_role=Role.HR_ADMIN, actor_id=2, year=2026, month=2, employee_ids=[dev])
    payslip_id = result["success"][0]["payslip_id"]

    assert svc.get(payslip_id, current_role=None, employee_id=dev).employee_id == dev
    assert svc.get(payslip_id, current_role=Role.HR_ADMIN, employee_id=2).payslip_id == payslip_id
    with pytest.raises(NotFoundError):
        svc.get(payslip_id, current_role=None, employee_id=5)
    assert [p.payslip_id for p in svc.list_mine(dev)] == [payslip_id]


def test_salary_structure_validation(container, world):
    svc = container.payslip_service
    dev = world.employees["dev"].employee_id

    with pytest.raises(ValidationError):
        svc.set_salary_structure(current_role=Role.HR_ADMIN, actor_id=2, employee_id=dev, basic_salary="0")
    with pytest.raises(ValidationError):
        svc.set_salary_structure(current_role=Role.HR_ADMIN, actor_id=2, employee_id=dev, basic_salary="abc")
    with pytest.raises(NotFoundError):
        svc.set_salary_structure(current_role=Role.HR_ADMIN, actor_id=2, employee_id=99, basic_salary="1000")
    with pytest.raises(AuthorizationError):
        svc.set_salary_structure(current_role=Role.EMPLOYEE, actor_id=dev, employee_id=dev, basic_salary="1000")
