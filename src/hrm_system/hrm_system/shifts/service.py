from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional

from ..common.datetime_utils import parse_hhmm
from ..common.validators import require_non_empty
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import Permission, Role, has_permission
from .model import Shift
from .repository import ShiftRepository


class ShiftService:
    def __init__(self, shifts: ShiftRepository):
        self._shifts = shifts

    def list(self, *, active_only: bool = False):
        return self._shifts.list_all(active_only=active_only)

    def get(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    @staticmethod
    def _validate(shift: Shift) -> None:
        if shift.start_time == shift.end_time:
            raise ValidationError("Shift start and end cannot be equal")
        if shift.grace_period_minutes < 0:
            raise ValidationError("Grace period cannot be negative")
        if shift.break_minutes < 0:
            raise ValidationError("Break minutes cannot be negative")
        if shift.full_day_hours <= 0:
            raise ValidationError("Full day hours must be positive")
        if shift.half_day_hours <= 0 or shift.half_day_hours > shift.full_day_hours:
            raise ValidationError("Half day hours must be positive and not exceed full day hours")

    @staticmethod
    def _apply(shift: Shift, data: dict[str, Any]) -> Shift:
        changes: dict[str, Any] = {}
        if "shift_name" in data:
            changes["shift_name"] = require_non_empty(data["shift_name"], "Shift name")
        if "start_time" in data:
            changes["start_time"] = parse_hhmm(data["start_time"], "start_time") or shift.start_time
        if "end_time" in data:
            changes["end_time"] = parse_hhmm(data["end_time"], "end_time") or shift.end_time
        for key in ("grace_period_minutes", "break_minutes"):
            if key in data:
                try:
                    changes[key] = int(data[key])
                except (TypeError, ValueError):
                    raise ValidationError(f"{key} must be an integer")
        for key in ("full_day_hours", "half_day_hours"):
            if key in data:
                try:
                    changes[key] = float(data[key])
                except (TypeError, ValueError):
                    raise ValidationError(f"{key} must be a number")
        if "is_active" in data:
            changes["is_active"] = bool(data["is_active"])
        return replace(shift, **changes)

    def create(self, *, current_role: Role, data: dict[str, Any]) -> Shift:
        if not has_permission(current_role, Permission.SHIFT_MANAGE):
            raise AuthorizationError("You do not have permission")

        start = parse_hhmm(data.get("start_time"), "start_time")
        end = parse_hhmm(data.get("end_time"), "end_time")
        if not start or not end:
            raise ValidationError("start_time and end_time are required")

        draft = Shift(
            shift_id=0,
            shift_name=require_non_empty(data.get("shift_name"), "Shift name"),
            start_time=start,
            end_time=end,
        )
        shift = self._apply(draft, {k: v for k, v in data.items() if k not in {"shift_name", "start_time", "end_time"}})
        self._validate(shift)
        shift_id = self._shifts.create(shift)
        return replace(shift, shift_id=shift_id)

    def update(self, *, current_role: Role, shift_id: int, data: dict[str, Any]) -> Shift:
        if not has_permission(current_role, Permission.SHIFT_MANAGE):
            raise AuthorizationError("You do not have permission")

        shift = self._apply(self.get(shift_id), data)
        self._validate(shift)
        self._shifts.update(shift)
        return shift
