from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_WEEKEND_DAYS
from ..core.enums import DayType, HolidayType


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    name: str
    holiday_type: HolidayType
    holiday_date: Optional[date] = None
    recurring_md: Optional[str] = None  # "MM-DD"
    is_active: bool = True

    def occurs_on(self, day: date) -> bool:
        if not self.is_active:
            return False
        if self.holiday_type == HolidayType.RECURRING:
            return self.recurring_md == day.strftime("%m-%d")
        return self.holiday_date == day

    def date_in_year(self, year: int) -> Optional[date]:
        if self.holiday_type == HolidayType.ONE_TIME:
            return self.holiday_date if self.holiday_date and self.holiday_date.year == year else None
        month, day = (int(x) for x in (self.recurring_md or "").split("-"))
        try:
            return date(year, month, day)
        except ValueError:
            # 02-29 outside leap years
            return None


@dataclass(frozen=True)
class WorkingRule:
    rule_id: int
    name: str
    effective_from: date
    weekend_days: tuple[int, ...] = DEFAULT_WEEKEND_DAYS


@dataclass(frozen=True)
class HolidayTemplate:
    """A reusable selection of holidays (name + month/day) to apply per year."""

    template_id: int
    name: str
    country: Optional[str]
    holidays: list[dict] = field(default_factory=list)
    is_default: bool = False
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class DayStatus:
    day: date
    day_type: DayType
    label: Optional[str] = None

    @property
    def is_working_day(self) -> bool:
        return self.day_type == DayType.WORKING_DAY
