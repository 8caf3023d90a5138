from __future__ import annotations

from datetime import date

import pytest

from src.hrm_system.hrm_system.company_calendar.service import CalendarService
from src.hrm_system.hrm_system.core.enums import DayType, HolidayType
from src.hrm_system.hrm_system.core.exceptions import AuthorizationError, ConflictError, ValidationError
from src.hrm_system.hrm_system.core.permissions import Role
from tests.fakes import InMemoryCalendar


@pytest.fixture
def calendar():
    return CalendarService(InMemoryCalendar())


def test_default_weekend_is_saturday_and_sunday(calendar):
    assert calendar.is_weekend(date(2026, 3, 7))
    assert calendar.is_weekend(date(2026, 3, 8))
    assert not calendar.is_weekend(date(2026, 3, 6))


def test_recurring_holiday_repeats_every_year(calendar):
    calendar.create_holiday(
        current_role=Role.HR_ADMIN,
        name="Republic Day",
        holiday_type=HolidayType.RECURRING,
        recurring_md="1-26",
    )

    assert calendar.holiday_on(date(2026, 1, 26)).name == "Republic Day"
    assert calendar.holiday_on(date(2031, 1, 26)) is not None
    assert not calendar.is_working_day(date(2026, 1, 26))


def test_one_time_holiday_needs_a_date(calendar):
    with pytest.raises(ValidationError):
        calendar.create_holiday(current_role=Role.HR_ADMIN, name="Offsite", holiday_type=HolidayType.ONE_TIME)


def test_duplicate_holiday_conflicts(calendar):
    kwargs = dict(current_role=Role.HR_ADMIN, name="Offsite", holiday_type=HolidayType.ONE_TIME, holiday_date=date(2026, 5, 4))
    calendar.create_holiday(**kwargs)

    with pytest.raises(ConflictError):
        calendar.create_holiday(**kwargs)


def test_employee_cannot_manage_calendar(calendar):
    with pytest.raises(AuthorizationError):
        calendar.create_holiday(current_role=Role.EMPLOYEE, name="Mine", holiday_type=HolidayType.ONE_TIME, holiday_date=date(2026, 5, 4))
    with pytest.raises(AuthorizationError):
        calendar.set_working_rule(current_role=Role.HR_MANAGER, name="x", weekend_days=[6], effective_from=date(2026, 1, 1))


def test_working_rule_applies_from_its_effective_date(calendar):
    calendar.set_working_rule(
        current_role=Role.HR_ADMIN,
        name="Friday/Saturday weekend",
        weekend_days=["4", 5],
        effective_from=date(2026, 4, 1),
    )

    assert calendar.is_weekend(date(2026, 3, 8))  # Sunday, old rule
    assert not calendar.is_weekend(date(2026, 4, 5))  # Sunday, new rule
    assert calendar.is_weekend(date(2026, 4, 3))  # Friday, new rule


def test_working_rule_validation(calendar):
    with pytest.raises(ValidationError):
        calendar.set_working_rule(current_role=Role.HR_ADMIN, name="x", weekend_days=[7], effective_from=date(2026, 1, 1))
    with pytest.raises(ValidationError):
        calendar.set_working_rule(current_role=Role.HR_ADMIN, name="x", weekend_days=range(7), effective_from=date(2026, 1, 1))


def test_day_type_priority(calendar):
    calendar.create_holiday(current_role=Role.HR_ADMIN, name="Holi", holiday_type=HolidayType.ONE_TIME, holiday_date=date(2026, 3, 4))
    calendar.create_holiday(current_role=Role.HR_ADMIN, name="Weekend fest", holiday_type=HolidayType.ONE_TIME, holiday_date=date(2026, 3, 7))

    statuses = calendar.range_status(date(2026, 3, 4), date(2026, 3, 7), leave_dates={date(2026, 3, 4), date(2026, 3, 5)})

    assert [s.day_type for s in statuses] == [DayType.HOLIDAY, DayType.LEAVE, DayType.WORKING_DAY, DayType.WEEKEND]
    assert statuses[0].label == "Holi"


def test_month_summary_counts(calendar):
    summary = calendar.month_summary(2026, 2)

    assert summary["summary"] == {"WEEKEND": 8, "HOLIDAY": 0, "LEAVE": 0, "WORKING_DAY": 20}
    assert len(summary["days"]) == 28


def test_holidays_between_expands_recurring(calendar):
    calendar.create_holiday(current_role=Role.HR_ADMIN, name="New Year", holiday_type=HolidayType.RECURRING, recurring_md="01-01")

    found = calendar.holidays_between(date(2026, 12, 1), date(2027, 1, 31))

    assert [h["date"] for h in found] == [date(2027, 1, 1)]


def test_template_validation(calendar):
    with pytest.raises(ValidationError):
        calendar.create_template(current_role=Role.HR_ADMIN, actor_id=2, data={"name": "Empty", "holidays": []})
    with pytest.raises(ValidationError):
        calendar.create_template(
            current_role=Role.HR_ADMIN,
            actor_id=2,
            data={"name": "Bad", "holidays": [{"name": "X", "month": 2, "day": 30}]},
        )
    with pytest.raises(ValidationError):
        calendar.create_template(
            current_role=Role.HR_ADMIN,
            actor_id=2,
            data={"name": "Dup", "holidays": [{"name": "A", "month": 1, "day": 1}, {"name": "B", "month": 1, "day": 1}]},
        )


def test_apply_template_creates_one_time_holidays_and_skips_clashes(calendar):
    calendar.create_holiday(current_role=Role.HR_ADMIN, name="New Year", holiday_type=HolidayType.RECURRING, recurring_md="01-01")
    template = calendar.create_template(
        current_role=Role.HR_ADMIN,
        actor_id=2,
        data={
            "name": "India",
            "country": "in",
            "holidays": [
                {"name": "New Year's Day", "month": 1, "day": 1},
                {"name": "Independence Day", "month": 8, "day": 15},
                {"name": "Leap Day", "month": 2, "day": 29},
            ],
        },
    )
    assert template.country == "IN"

    result = calendar.apply_template(current_role=Role.HR_ADMIN, template_id=template.template_id, year=2026)

    assert [c["name"] for c in result["created"]] == ["Independence Day"]
    assert {s["name"] for s in result["skipped"]} == {"New Year's Day", "Leap Day"}
    assert calendar.holiday_on(date(2026, 8, 15)).holiday_type == HolidayType.ONE_TIME
    assert calendar.holiday_on(date(2027, 8, 15)) is None


def test_update_and_delete_template(calendar):
    template = calendar.create_template(
        current_role=Role.HR_ADMIN,
        actor_id=2,
        data={"name": "Base", "holidays": [{"name": "A", "month": 5, "day": 1}]},
    )

    updated = calendar.update_template(current_role=Role.HR_ADMIN, template_id=template.template_id, data={"name": "Renamed", "is_default": True})
    assert (updated.name, updated.is_default) == ("Renamed", True)

    calendar.delete_template(current_role=Role.HR_ADMIN, template_id=template.template_id)
    assert calendar.list_templates() == []
