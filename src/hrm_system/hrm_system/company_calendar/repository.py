from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import HolidayType
from .model import Holiday, HolidayTemplate, WorkingRule


class CalendarRepository(Protocol):
    def list_holidays(self, *, active_only: bool = True) -> Sequence[Holiday]:
        raise NotImplementedError

    def get_holiday(self, holiday_id: int) -> Optional[Holiday]:
        raise NotImplementedError

    def create_holiday(
        self,
        *,
        name: str,
        holiday_type: HolidayType,
        holiday_date: Optional[date],
        recurring_md: Optional[str],
    ) -> int:
        raise NotImplementedError

    def deactivate_holiday(self, holiday_id: int) -> bool:
        raise NotImplementedError

    def list_working_rules(self) -> Sequence[WorkingRule]:
        raise NotImplementedError

    def upsert_working_rule(self, *, name: str, weekend_days: tuple[int, ...], effective_from: date) -> int:
        raise NotImplementedError

    def list_templates(self, *, country: Optional[str] = None) -> Sequence[HolidayTemplate]:
        raise NotImplementedError

    def get_template(self, template_id: int) -> Optional[HolidayTemplate]:
        raise NotImplementedError

    def create_template(
        self,
        *,
        name: str,
        country: Optional[str],
        holidays: list[dict],
        is_default: bool,
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_template(self, template: HolidayTemplate) -> bool:
        raise NotImplementedError

    def delete_template(self, template_id: int) -> bool:
        raise NotImplementedError
