from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta, date

from ..core.constants import DEFAULT_FULL_DAY_HOURS, DEFAULT_HALF_DAY_HOURS, DEFAULT_LATE_GRACE_MINUTES, NIGHT_SHIFT_START_HOUR


@dataclass(frozen=True)
class Shift:
    """Domain entity: a work shift in company-local wall time."""

    shift_id: int
    shift_name: str
    start_time: time
    end_time: time
    grace_period_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    break_minutes: int = 0
    full_day_hours: float = DEFAULT_FULL_DAY_HOURS
    half_day_hours: float = DEFAULT_HALF_DAY_HOURS
    is_active: bool = True

    @property
    def crosses_midnight(self) -> bool:
        return self.end_time <= self.start_time

    @property
    def is_night_shift(self) -> bool:
        return self.start_time.hour >= NIGHT_SHIFT_START_HOUR

    def start_on(self, work_date: date) -> datetime:
        return datetime.combine(work_date, self.start_time)

    def end_on(self, work_date: date) -> datetime:
        """Local end of the shift that starts on ``work_date``."""
        end = datetime.combine(work_date, self.end_time)
        if self.crosses_midnight:
            end += timedelta(days=1)
        return end

    def midpoint_on(self, work_date: date) -> datetime:
        start = self.start_on(work_date)
        return start + (self.end_on(work_date) - start) / 2
