from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.hrm_system.hrm_system.attendance.model import AttendanceRecord
from src.hrm_system.hrm_system.core.enums import AttendanceStatus, CorrectionIssue, HalfDayType

WED = date(2026, 3, 4)
THU = date(2026, 3, 5)


def _record(clock, world, key, *, clock_in=None, clock_out=None, worked=0):
    return world.repos.attendance.add(
        AttendanceRecord(
            attendance_id=0,
            employee_id=world.employees[key].employee_id,
            work_date=WED,
            clock_in=clock.to_utc(WED, clock_in) if clock_in else None,
            clock_out=clock.to_utc(WED, clock_out) if clock_out else None,
            status=AttendanceStatus.INCOMPLETE,
            shift_id=world.day_shift.shift_id,
            worked_minutes=worked,
        )
    )


@pytest.fixture
def day_of_records(container, clock, world):
    clock.set(clock.to_utc(WED, time(8, 0)))
    hr = world.employees["hr"].employee_id
    req = container.leave_service.apply(employee_id=hr, leave_type="CL", start_date=WED, end_date=WED)
    container.leave_service.approve(
        current_role=world.employees["admin"].role,
        actor_id=world.employees["admin"].employee_id,
        request_id=req.request_id,
    )

    _record(clock, world, "dev", clock_in=time(9, 0), clock_out=time(17, 0), worked=8 * 60)
    _record(clock, world, "seller", clock_in=time(9, 0), clock_out=time(14, 0), worked=5 * 60)
    _record(clock, world, "manager", clock_in=time(9, 0))

    clock.set(clock.to_utc(THU, time(10, 0)))
    return world


def _status(world, key):
    return world.repos.attendance.get_for_employee_and_date(world.employees[key].employee_id, WED)


def test_finalize_settles_each_kind_of_day(container, day_of_records):
    world = day_of_records

    result = container.attendance_finalizer.finalize_date(WED)

    assert result.errors == []
    assert (result.present, result.half_day, result.absent, result.leave, result.pending_correction) == (1, 1, 2, 1, 1)
    assert result.processed == 6

    assert _status(world, "dev").status == AttendanceStatus.PRESENT
    seller = _status(world, "seller")
    assert seller.status == AttendanceStatus.HALF_DAY
    assert seller.half_day_type == HalfDayType.FIRST_HALF
    assert _status(world, "hr").status == AttendanceStatus.LEAVE
    assert _status(world, "admin").status == AttendanceStatus.ABSENT
    assert _status(world, "night").status == AttendanceStatus.ABSENT


def test_missing_clock_out_opens_correction_and_notifies(container, day_of_records):
    world = day_of_records
    manager = world.employees["manager"].employee_id

    container.attendance_finalizer.finalize_date(WED)

    assert _status(world, "manager").status == AttendanceStatus.PENDING_CORRECTION
    [req] = world.repos.corrections.list(employee_id=manager)
    assert req.issue_type == CorrectionIssue.MISSED_PUNCH
    titles = [n.title for n in world.repos.notifications.for_employee(manager)]
    assert "Missing clock-out" in titles


def test_auto_absent_employee_is_notified(container, day_of_records):
    world = day_of_records
    admin = world.employees["admin"].employee_id

    container.attendance_finalizer.finalize_date(WED)

    [note] = world.repos.notifications.for_employee(admin)
    assert note.title == "Marked absent"
    assert note.category == "attendance"


def test_finalize_twice_changes_nothing(container, day_of_records):
    world = day_of_records
    container.attendance_finalizer.finalize_date(WED)
    before = {k: _status(world, k).status for k in world.employees}

    again = container.attendance_finalizer.finalize_date(WED)

    assert again.processed == 0
    assert again.unchanged == len(world.employees)
    assert {k: _status(world, k).status for k in world.employees} == before
    assert len(world.repos.corrections.list()) == 1


def test_short_day_is_absent_with_reason(container, clock, world):
    clock.set(clock.to_utc(THU, time(10, 0)))
    _record(clock, world, "dev", clock_in=time(9, 0), clock_out=time(11, 0), worked=120)

    container.attendance_finalizer.finalize_date(WED)

    record = _status(world, "dev")
    assert record.status == AttendanceStatus.ABSENT
    assert record.status_reason.startswith("Insufficient hours (02:00 worked")


def test_shift_not_over_yet_is_left_waiting(container, clock, world):
    clock.set(clock.to_utc(WED, time(18, 10)))

    result = container.attendance_finalizer.finalize_date(WED)

    # day shift ends 18:00 + 15 min grace; night shift runs until tomorrow
    assert result.waiting == len(world.employees)
    assert result.processed == 0
    assert world.repos.attendance.items == {}


def test_holiday_and_weekend_are_skipped(container, clock, world):
    clock.set(datetime(2026, 3, 10, 6, 0))
    world.repos.calendar.add_holiday("Holi", WED)

    holiday = container.attendance_finalizer.finalize_date(WED)
    weekend = container.attendance_finalizer.finalize_date(date(2026, 3, 7))

    assert holiday.skipped_reason == "Holiday: Holi"
    assert weekend.skipped_reason == "Non-working day"
    assert world.repos.attendance.items == {}


def test_employee_who_joined_later_is_ignored(container, clock, world):
    clock.set(clock.to_utc(THU, time(10, 0)))
    world.repos.employees.update(world.employees["dev"].employee_id, {"date_of_joining": THU})

    result = container.attendance_finalizer.finalize_date(WED)

    assert result.absent == len(world.employees) - 1
    assert _status(world, "dev") is None


def test_missed_clock_out_is_settled_once_employee_supplies_it(container, clock, day_of_records):
    world = day_of_records
    manager = world.employees["manager"].employee_id
    admin = world.employees["admin"]
    container.attendance_finalizer.finalize_date(WED)
    [auto] = world.repos.corrections.list(employee_id=manager)

    request_id = container.correction_service.create(
        employee_id=manager,
        work_date=WED,
        requested_clock_in=None,
        requested_clock_out=clock.to_utc(WED, time(18, 0)),
        reason="Left without clocking out",
    )
    assert request_id == auto.request_id
    container.correction_service.approve(current_role=admin.role, actor_id=admin.employee_id, request_id=request_id)
    assert _status(world, "manager").status == AttendanceStatus.INCOMPLETE

    result = container.attendance_finalizer.finalize_date(WED)

    assert result.present == 1 and result.pending_correction == 0
    assert _status(world, "manager").status == AttendanceStatus.PRESENT
    assert len(world.repos.corrections.list(employee_id=manager)) == 1
