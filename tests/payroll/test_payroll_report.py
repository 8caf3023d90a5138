from __future__ import annotations

from datetime import date, time

import pytest

from src.hrm_system.hrm_system.attendance.model import AttendanceRecord
from src.hrm_system.hrm_system.core.enums import AttendanceStatus, WorkMode
from src.hrm_system.hrm_system.core.exceptions import ValidationError

MON = date(2026, 3, 2)
TUE = date(2026, 3, 3)


def _add(world, clock, key, day, start, end, *, status=AttendanceStatus.PRESENT, late=False, overtime=0):
    world.repos.attendance.add(
        AttendanceRecord(
            attendance_id=0,
            employee_id=world.employees[key].employee_id,
            work_date=day,
            clock_in=clock.to_utc(day, start) if start else None,
            clock_out=clock.to_utc(day, end) if end else None,
            status=status,
            shift_id=world.day_shift.shift_id,
            is_late=late,
            overtime_minutes=overtime,
            work_mode=WorkMode.OFFICE,
        )
    )


def test_report_rows_show_local_times(container, clock, world):
    _add(world, clock, "dev", MON, time(9, 0), time(18, 30), overtime=90)

    report = container.payroll_report_service.build_attendance_report(start=MON, end=MON)

    [row] = report.rows
    assert row["clock_in"] == "09:00"
    assert row["clock_out"] == "18:30"
    assert row["worked_hours"] == "09:30"
    assert row["overtime_hours"] == "01:30"
    assert row["dept_name"] == "Engineering"
    assert row["shift_name"] == "Day"


def test_report_summary_per_employee(container, clock, world):
    _add(world, clock, "dev", MON, time(9, 0), time(17, 0))
    _add(world, clock, "dev", TUE, time(9, 30), time(18, 0), late=True)
    _add(world, clock, "seller", MON, time(9, 0), time(13, 0), status=AttendanceStatus.HALF_DAY)
    _add(world, clock, "seller", TUE, None, None, status=AttendanceStatus.ABSENT)

    report = container.payroll_report_service.build_attendance_report(start=MON, end=TUE)

    assert [s["full_name"] for s in report.summary] == ["Dev Patel", "Sam Seller"]
    dev, seller = report.summary
    assert (dev["total_hours"], dev["days_present"], dev["late_days"]) == ("16:30", 2, 1)
    assert (seller["total_hours"], seller["days_present"], seller["days_absent"]) == ("04:00", 1, 1)
    assert [r["clock_in"] for r in report.rows if r["employee_id"] == world.employees["seller"].employee_id] == ["09:00", "-"]


def test_report_filters_by_department(container, clock, world):
    _add(world, clock, "dev", MON, time(9, 0), time(17, 0))
    _add(world, clock, "seller", MON, time(9, 0), time(17, 0))

    report = container.payroll_report_service.build_attendance_report(start=MON, end=MON, dept_id=world.sales.dept_id)

    assert [r["full_name"] for r in report.rows] == ["Sam Seller"]


def test_report_rejects_reversed_range(container):
    with pytest.raises(ValidationError):
        container.payroll_report_service.build_attendance_report(start=TUE, end=MON)
