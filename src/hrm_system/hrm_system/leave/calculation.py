"""Leave duration rules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import iter_dates
from ..company_calendar.service import CalendarService
from ..core.exceptions import ValidationError

HALF_DAY = Decimal("0.5")


@dataclass(frozen=True)
class LeaveDuration:
    total_days: int
    working_days: Decimal
    weekend_days: int = 0
    holiday_days: int = 0
    method: str = "calendar_days"


def calculate_duration(
    start: date,
    end: date,
    *,
    is_half_day: bool = False,
    exclude_weekends: bool = False,
    exclude_holidays: bool = False,
    calendar: Optional[CalendarService] = None,
) -> LeaveDuration:
    if end < start:
        raise ValidationError("Start date cannot be after end date")

    if is_half_day:
        if start != end:
            raise ValidationError("A half-day leave must start and end on the same date")
        excluded = calendar is not None and (
            (exclude_weekends and calendar.is_weekend(start)) or (exclude_holidays and calendar.holiday_on(start))
        )
        return LeaveDuration(total_days=1, working_days=Decimal("0") if excluded else HALF_DAY, method="half_day")

    total = (end - start).days + 1
    if calendar is None or not (exclude_weekends or exclude_holidays):
        return LeaveDuration(total_days=total, working_days=Decimal(total))

    working = weekends = holidays = 0
    for day in iter_dates(start, end):
        if exclude_weekends and calendar.is_weekend(day):
            weekends += 1
        elif exclude_holidays and calendar.holiday_on(day):
            holidays += 1
        else:
            working += 1

    return LeaveDuration(
        total_days=total,
        working_days=Decimal(working),
        weekend_days=weekends,
        holiday_days=holidays,
        method="business_days",
    )


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    return a_start <= b_end and b_start <= a_end
