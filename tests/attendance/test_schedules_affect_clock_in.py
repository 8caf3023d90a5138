from __future__ import annotations

from datetime import date, time

from src.hrm_system.hrm_system.shifts.model import Shift

WED = date(2026, 3, 4)


def test_scheduled_shift_makes_clock_in_late(container, clock, world):
    # Default shift starts at 09:00 (08:06 would be on time) but the schedule
    # assigns an 08:00 shift with a 5 minute grace, so 08:06 is late.
    early = Shift(shift_id=0, shift_name="Early", start_time=time(8, 0), end_time=time(17, 0), grace_period_minutes=5)
    early_id = world.repos.shifts.create(early)
    dev = world.employees["dev"].employee_id
    world.repos.schedules.upsert(employee_id=dev, work_date=WED, shift_id=early_id)

    clock.set(clock.to_utc(WED, time(8, 6)))
    record = container.attendance_service.clock_in(dev)

    assert record.shift_id == early_id
    assert record.is_late
    assert record.late_minutes == 1


def test_without_schedule_default_shift_applies(container, clock, world):
    clock.set(clock.to_utc(WED, time(8, 6)))

    record = container.attendance_service.clock_in(world.employees["dev"].employee_id)

    assert record.shift_id == world.day_shift.shift_id
    assert not record.is_late


def test_employee_without_any_shift_uses_configured_default(container, clock, world):
    dev = world.employees["dev"].employee_id
    world.repos.employees.update(dev, {"shift_id": None})

    clock.set(clock.to_utc(WED, time(9, 20)))
    record = container.attendance_service.clock_in(dev)

    assert record.shift_id is None
    assert record.is_late
    assert record.late_minutes == 5
