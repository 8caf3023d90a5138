from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Iterable, Optional

from ..common.datetime_utils import iter_dates, month_bounds
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_WEEKEND_DAYS
from ..core.enums import DayType, HolidayType
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import Permission, Role, has_permission
from .model import DayStatus, Holiday, HolidayTemplate, WorkingRule
from .repository import CalendarRepository

logger = logging.getLogger(__name__)


def _require_manage(current_role: Role) -> None:
    if not has_permission(current_role, Permission.CALENDAR_MANAGE):
        raise AuthorizationError("You do not have permission")


def _normalize_template_holidays(items: Any) -> list[dict]:
    if not isinstance(items, list) or not items:
        raise ValidationError("Template must contain at least one holiday")
    out: list[dict] = []
    seen: set[tuple[int, int]] = set()
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Each holiday must be an object")
        name = require_non_empty(item.get("name"), "Holiday name")
        try:
            month, day = int(item.get("month")), int(item.get("day"))
            date(2000, month, day)  # leap year: accepts 02-29
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid month/day for holiday {name!r}")
        if (month, day) in seen:
            raise ValidationError(f"Duplicate holiday date {month:02d}-{day:02d}")
        seen.add((month, day))
        out.append({"name": name, "month": month, "day": day})
    return out


class CalendarService:
    """Company calendar policy: weekends, holidays and day classification.

    Day type priority is WEEKEND > HOLIDAY > LEAVE > WORKING_DAY.
    """

    def __init__(self, calendar: CalendarRepository):
        self._calendar = calendar

    # ---- policy -------------------------------------------------------

    def weekend_days_on(self, day: date, rules: Optional[Iterable[WorkingRule]] = None) -> tuple[int, ...]:
        rules = list(rules if rules is not None else self._calendar.list_working_rules())
        current: Optional[WorkingRule] = None
        for rule in rules:
            if rule.effective_from <= day and (current is None or rule.effective_from > current.effective_from):
                current = rule
        return current.weekend_days if current else DEFAULT_WEEKEND_DAYS

    def holiday_on(self, day: date, holidays: Optional[Iterable[Holiday]] = None) -> Optional[Holiday]:
        for h in holidays if holidays is not None else self._calendar.list_holidays(active_only=True):
            if h.occurs_on(day):
                return h
        return None

    def is_weekend(self, day: date) -> bool:
        return day.weekday() in self.weekend_days_on(day)

    def is_working_day(self, day: date) -> bool:
        return self.day_status(day).is_working_day

    def day_status(self, day: date, *, on_leave: bool = False) -> DayStatus:
        return self.range_status(day, day, leave_dates={day} if on_leave else ())[0]

    def range_status(self, start: date, end: date, *, leave_dates: Iterable[date] = ()) -> list[DayStatus]:
        if end < start:
            raise ValidationError("End date is before start date")
        rules = self._calendar.list_working_rules()
        holidays = self._calendar.list_holidays(active_only=True)
        leave = set(leave_dates)

        out: list[DayStatus] = []
        for day in iter_dates(start, end):
            if day.weekday() in self.weekend_days_on(day, rules):
                out.append(DayStatus(day=day, day_type=DayType.WEEKEND))
                continue
            holiday = self.holiday_on(day, holidays)
            if holiday:
                out.append(DayStatus(day=day, day_type=DayType.HOLIDAY, label=holiday.name))
            elif day in leave:
                out.append(DayStatus(day=day, day_type=DayType.LEAVE))
            else:
                out.append(DayStatus(day=day, day_type=DayType.WORKING_DAY))
        return out

    def working_days_between(self, start: date, end: date) -> list[date]:
        return [s.day for s in self.range_status(start, end) if s.is_working_day]

    def month_summary(self, year: int, month: int, *, leave_dates: Iterable[date] = ()) -> dict:
        start, end = month_bounds(year, month)
        days = self.range_status(start, end, leave_dates=leave_dates)
        counts = {t.value: 0 for t in DayType}
        for d in days:
            counts[d.day_type.value] += 1
        return {
            "year": year,
            "month": month,
            "days": [{"date": d.day, "type": d.day_type.value, "label": d.label} for d in days],
            "summary": counts,
        }

    def holidays_between(self, start: date, end: date) -> list[dict]:
        out = []
        for h in self._calendar.list_holidays(active_only=True):
            for year in range(start.year, end.year + 1):
                d = h.date_in_year(year)
                if d and start <= d <= end:
                    out.append({"holiday_id": h.holiday_id, "name": h.name, "date": d, "type": h.holiday_type.value})
        out.sort(key=lambda x: x["date"])
        return out

    # ---- holidays & working rules ------------------------------------

    def create_holiday(
        self,
        *,
        current_role: Role,
        name: str,
        holiday_type: HolidayType,
        holiday_date: Optional[date] = None,
        recurring_md: Optional[str] = None,
    ) -> int:
        _require_manage(current_role)
        name = require_non_empty(name, "Holiday name")

        if holiday_type == HolidayType.ONE_TIME:
            if not holiday_date:
                raise ValidationError("holiday_date is required for a one-time holiday")
            recurring_md = None
        else:
            if not recurring_md and holiday_date:
                recurring_md = holiday_date.strftime("%m-%d")
            try:
                month, day = (int(x) for x in (recurring_md or "").split("-"))
                date(2000, month, day)
            except ValueError:
                raise ValidationError("recurring_md must be MM-DD")
            recurring_md = f"{month:02d}-{day:02d}"
            holiday_date = None

        for h in self._calendar.list_holidays(active_only=True):
            if h.holiday_type == holiday_type and h.holiday_date == holiday_date and h.recurring_md == recurring_md:
                raise ConflictError(f"Holiday already exists on that date: {h.name}")

        return self._calendar.create_holiday(
            name=name,
            holiday_type=holiday_type,
            holiday_date=holiday_date,
            recurring_md=recurring_md,
        )

    def delete_holiday(self, *, current_role: Role, holiday_id: int) -> None:
        _require_manage(current_role)
        if not self._calendar.deactivate_holiday(int(holiday_id)):
            raise NotFoundError("Holiday not found")

    def list_working_rules(self):
        return self._calendar.list_working_rules()

    def set_working_rule(self, *, current_role: Role, name: str, weekend_days: Iterable[Any], effective_from: date) -> int:
        _require_manage(current_role)
        try:
            days = tuple(sorted({int(d) for d in weekend_days}))
        except (TypeError, ValueError):
            raise ValidationError("weekend_days must be integers 0-6 (Monday=0)")
        if any(d < 0 or d > 6 for d in days):
            raise ValidationError("weekend_days must be integers 0-6 (Monday=0)")
        if len(days) >= 7:
            raise ValidationError("At least one working day is required")
        return self._calendar.upsert_working_rule(
            name=require_non_empty(name, "Rule name"),
            weekend_days=days,
            effective_from=effective_from,
        )

    # ---- holiday templates -------------------------------------------

    def list_templates(self, *, country: Optional[str] = None):
        return self._calendar.list_templates(country=country)

    def get_template(self, template_id: int) -> HolidayTemplate:
        template = self._calendar.get_template(int(template_id))
        if not template:
            raise NotFoundError("Holiday template not found")
        return template

    def create_template(self, *, current_role: Role, actor_id: int, data: dict) -> HolidayTemplate:
        _require_manage(current_role)
        name = require_non_empty(data.get("name"), "Template name")
        country = optional_text(data.get("country"))
        holidays = _normalize_template_holidays(data.get("holidays"))
        template_id = self._calendar.create_template(
            name=name,
            country=country.upper() if country else None,
            holidays=holidays,
            is_default=bool(data.get("is_default", False)),
            created_by=actor_id,
        )
        return self.get_template(template_id)

    def update_template(self, *, current_role: Role, template_id: int, data: dict) -> HolidayTemplate:
        _require_manage(current_role)
        template = self.get_template(template_id)
        changes: dict[str, Any] = {}
        if "name" in data:
            changes["name"] = require_non_empty(data["name"], "Template name")
        if "country" in data:
            country = optional_text(data["country"])
            changes["country"] = country.upper() if country else None
        if "holidays" in data:
            changes["holidays"] = _normalize_template_holidays(data["holidays"])
        if "is_default" in data:
            changes["is_default"] = bool(data["is_default"])
        updated = replace(template, **changes)
        self._calendar.update_template(updated)
        return updated

    def delete_template(self, *, current_role: Role, template_id: int) -> None:
        _require_manage(current_role)
        if not self._calendar.delete_template(int(template_id)):
            raise NotFoundError("Holiday template not found")

    def apply_template(self, *, current_role: Role, template_id: int, year: int) -> dict:
        """Create one-time holidays for ``year``; dates already covered are skipped."""

        _require_manage(current_role)
        template = self.get_template(template_id)
        existing = self._calendar.list_holidays(active_only=True)

        created: list[dict] = []
        skipped: list[dict] = []
        for item in template.holidays:
            try:
                day = date(int(year), int(item["month"]), int(item["day"]))
            except ValueError:
                skipped.append({"name": item["name"], "reason": "Date does not exist in this year"})
                continue
            clash = self.holiday_on(day, existing)
            if clash:
                skipped.append({"name": item["name"], "date": day, "reason": f"Already a holiday ({clash.name})"})
                continue
            holiday_id = self._calendar.create_holiday(
                name=item["name"],
                holiday_type=HolidayType.ONE_TIME,
                holiday_date=day,
                recurring_md=None,
            )
            created.append({"holiday_id": holiday_id, "name": item["name"], "date": day})

        logger.info("Applied holiday template %s to %s: %d created, %d skipped", template_id, year, len(created), len(skipped))
        return {"created": created, "skipped": skipped}
