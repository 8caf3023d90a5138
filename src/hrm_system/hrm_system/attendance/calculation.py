"""Pure attendance time computations.

Everything here works on naive datetimes. Callers convert UTC instants to
company-local wall time first; shift times are local by definition.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from ..core.constants import DEFAULT_FULL_DAY_HOURS, NIGHT_SHIFT_EARLY_HOUR
from ..core.enums import AttendanceStatus, HalfDayType
from ..shifts.model import Shift
from .model import BreakSession

# Used when an employee has neither a schedule nor a default shift.
DEFAULT_SHIFT = Shift(shift_id=0, shift_name="Default", start_time=time(9, 0), end_time=time(18, 0), break_minutes=60)


@dataclass(frozen=True)
class ShiftWindow:
    shift: Shift
    work_date: date
    start: datetime
    end: datetime

    @property
    def late_threshold(self) -> datetime:
        return self.start + timedelta(minutes=int(self.shift.grace_period_minutes or 0))

    @property
    def midpoint(self) -> datetime:
        return self.start + (self.end - self.start) / 2


def shift_window(shift: Shift, work_date: date) -> ShiftWindow:
    return ShiftWindow(shift=shift, work_date=work_date, start=shift.start_on(work_date), end=shift.end_on(work_date))


def belongs_to_previous_day(shift: Optional[Shift], local_clock_in: datetime) -> bool:
    """A night shift (start >= 18:00) clocked into before 06:00 started yesterday."""

    return bool(shift and shift.is_night_shift and local_clock_in.hour < NIGHT_SHIFT_EARLY_HOUR)


def floor_minutes(delta: timedelta) -> int:
    return int(delta.total_seconds() // 60)


def late_status(local_clock_in: datetime, window: Optional[ShiftWindow]) -> tuple[bool, int]:
    if window is None:
        return False, 0
    threshold = window.late_threshold
    if local_clock_in > threshold:
        return True, floor_minutes(local_clock_in - threshold)
    return False, 0


def early_exit_minutes(local_clock_out: datetime, window: Optional[ShiftWindow]) -> int:
    if window is None or local_clock_out >= window.end:
        return 0
    return floor_minutes(window.end - local_clock_out)


def _completed_break_time(breaks: Iterable[BreakSession]) -> timedelta:
    total = timedelta()
    for b in breaks:
        if b.break_out and b.break_out > b.break_in:
            total += b.break_out - b.break_in
    return total


def break_minutes(breaks: Iterable[BreakSession]) -> int:
    """Total of completed break sessions; an open break does not count."""

    return floor_minutes(_completed_break_time(breaks))


def worked_minutes(clock_in: Optional[datetime], clock_out: Optional[datetime], breaks: Iterable[BreakSession] = ()) -> int:
    if not clock_in or not clock_out:
        return 0
    return max(0, floor_minutes(clock_out - clock_in - _completed_break_time(breaks)))


def overtime_minutes(worked: int, full_day_hours: Optional[float]) -> int:
    threshold = int(round(float(full_day_hours or DEFAULT_FULL_DAY_HOURS) * 60))
    return max(0, int(worked) - threshold)


def format_minutes(minutes: int) -> str:
    minutes = max(0, int(minutes))
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class Settlement:
    status: AttendanceStatus
    reason: Optional[str]
    half_day_type: Optional[HalfDayType]


def settle_worked_day(worked: int, shift: Shift, *, local_clock_in: datetime, window: ShiftWindow) -> Settlement:
    """Final status for a day with both clock-in and clock-out."""

    hours = worked / 60
    if hours >= float(shift.full_day_hours):
        return Settlement(AttendanceStatus.PRESENT, None, HalfDayType.FULL_DAY)
    if hours >= float(shift.half_day_hours):
        half = HalfDayType.SECOND_HALF if local_clock_in >= window.midpoint else HalfDayType.FIRST_HALF
        return Settlement(AttendanceStatus.HALF_DAY, f"Worked {format_minutes(worked)} (half day)", half)
    return Settlement(
        AttendanceStatus.ABSENT,
        f"Insufficient hours ({format_minutes(worked)} worked, {shift.half_day_hours:g}h required)",
        None,
    )
