from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.hrm_system.hrm_system.company_calendar.service import CalendarService
from src.hrm_system.hrm_system.core.exceptions import ValidationError
from src.hrm_system.hrm_system.leave.calculation import calculate_duration, ranges_overlap
from tests.fakes import InMemoryCalendar

FRI = date(2026, 3, 6)
SAT = date(2026, 3, 7)
MON = date(2026, 3, 9)


def _calendar(*holidays):
    repo = InMemoryCalendar()
    for day in holidays:
        repo.add_holiday("Holiday", day)
    return CalendarService(repo)


def test_business_days_skip_weekend():
    d = calculate_duration(FRI, MON, exclude_weekends=True, exclude_holidays=True, calendar=_calendar())

    assert d.total_days == 4
    assert d.working_days == Decimal(2)
    assert d.weekend_days == 2
    assert d.method == "business_days"


def test_business_days_skip_holidays():
    d = calculate_duration(FRI, MON, exclude_weekends=True, exclude_holidays=True, calendar=_calendar(MON))

    assert d.working_days == Decimal(1)
    assert d.holiday_days == 1


def test_calendar_days_when_nothing_excluded():
    d = calculate_duration(FRI, MON, calendar=_calendar(MON))

    assert d.working_days == Decimal(4)
    assert d.method == "calendar_days"


def test_half_day_is_half_and_single_date():
    assert calculate_duration(FRI, FRI, is_half_day=True).working_days == Decimal("0.5")
    with pytest.raises(ValidationError):
        calculate_duration(FRI, MON, is_half_day=True)


def test_half_day_on_weekend_counts_nothing():
    d = calculate_duration(SAT, SAT, is_half_day=True, exclude_weekends=True, calendar=_calendar())

    assert d.working_days == Decimal("0")


def test_end_before_start_rejected():
    with pytest.raises(ValidationError):
        calculate_duration(MON, FRI)


def test_ranges_overlap_is_inclusive():
    assert ranges_overlap(FRI, SAT, SAT, MON)
    assert not ranges_overlap(FRI, FRI, SAT, MON)
