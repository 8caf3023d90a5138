"""Date/time helpers.

Instants (clock-in, clock-out, created_at) are kept as naive UTC datetimes,
which is what MySQL DATETIME columns hold. The company timezone is applied
only when a local wall clock is needed: deriving the work date or comparing
against shift times.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Iterator, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_date_arg(value: Optional[str], field_name: str, default: Optional[date] = None) -> date:
    """Like ``parse_iso_date`` but for request input: raises ValidationError."""

    if value is None or not str(value).strip():
        if default is None:
            raise ValidationError(f"{field_name} is required")
        return default
    try:
        return parse_iso_date(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def parse_hhmm(value: Optional[str], field_name: str = "Time") -> Optional[time]:
    v = (value or "").strip()
    if not v:
        return None
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} must be HH:MM")


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {name}")


def now_utc() -> datetime:
    """Current UTC time as a naive datetime.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_local(value: datetime, tz: ZoneInfo) -> datetime:
    """Naive UTC -> aware local datetime."""
    return value.replace(tzinfo=timezone.utc).astimezone(tz)


def to_utc_naive(value: datetime) -> datetime:
    """Aware datetime -> naive UTC. Naive input is assumed to already be UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def local_to_utc(day: date, at: time, tz: ZoneInfo) -> datetime:
    """Wall-clock ``day at`` in ``tz`` expressed as naive UTC."""
    return to_utc_naive(datetime.combine(day, at, tzinfo=tz))


def parse_instant(value: Optional[str], tz: ZoneInfo, field_name: str = "Datetime") -> Optional[datetime]:
    """Parse an ISO-8601 instant into naive UTC.

    Strings carrying an offset (``Z`` or ``+07:00``) are converted; strings
    without one are read as company-local wall time.
    """

    v = (value or "").strip()
    if not v:
        return None
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 datetime")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return to_utc_naive(parsed)


def iter_dates(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if month < 1 or month > 12:
        raise ValidationError("Month must be between 1 and 12")
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


class CompanyClock:
    """Wall clock bound to the company timezone.

    ``now()`` is naive UTC (storage form); ``today()`` is the local date.
    """

    def __init__(self, tz_name: str = "UTC", *, now_fn: Callable[[], datetime] = now_utc):
        self.tz = get_zone(tz_name)
        self._now_fn = now_fn

    def now(self) -> datetime:
        return self._now_fn()

    def local_now(self) -> datetime:
        return to_local(self.now(), self.tz)

    def today(self) -> date:
        return self.local_now().date()

    def local(self, instant: datetime) -> datetime:
        return to_local(instant, self.tz)

    def to_utc(self, day: date, at: time) -> datetime:
        return local_to_utc(day, at, self.tz)
