from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import Permission, Role, has_permission
from ..employees.repository import EmployeeRepository
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from .repository import ScheduleRepository


class ShiftResolver:
    """Effective shift for (employee, date): schedule override, else the default shift."""

    def __init__(self, shifts: ShiftRepository, schedules: Optional[ScheduleRepository] = None):
        self._shifts = shifts
        self._schedules = schedules

    def resolve(self, *, employee_id: int, work_date: date, fallback_shift_id: Optional[int]) -> Optional[Shift]:
        if self._schedules:
            sc = self._schedules.get_for_employee_and_date(employee_id=employee_id, work_date=work_date)
            if sc:
                shift = self._shifts.get_by_id(sc.shift_id)
                if shift:
                    return shift

        if fallback_shift_id:
            return self._shifts.get_by_id(fallback_shift_id)
        return None


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository, shifts: ShiftRepository, employees: EmployeeRepository):
        self._schedules = schedules
        self._shifts = shifts
        self._employees = employees

    def assign(
        self,
        *,
        current_role: Role,
        employee_id: int,
        work_date: date,
        shift_id: int,
        note: Optional[str] = None,
    ) -> int:
        if not has_permission(current_role, Permission.SCHEDULE_MANAGE):
            raise AuthorizationError("You do not have permission")

        if int(employee_id) <= 0 or not self._employees.get_by_id(int(employee_id)):
            raise ValidationError("Employee is invalid")
        shift = self._shifts.get_by_id(int(shift_id)) if int(shift_id) > 0 else None
        if not shift or not shift.is_active:
            raise ValidationError("Shift is invalid")

        note = note.strip() if note else None
        return self._schedules.upsert(employee_id=int(employee_id), work_date=work_date, shift_id=int(shift_id), note=note)

    def delete(self, *, current_role: Role, schedule_id: int) -> None:
        if not has_permission(current_role, Permission.SCHEDULE_MANAGE):
            raise AuthorizationError("You do not have permission")

        if not self._schedules.delete(schedule_id=int(schedule_id)):
            raise NotFoundError("Schedule not found")

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None):
        if end < start:
            raise ValidationError("End date is before start date")
        return self._schedules.list_range(start=start, end=end, employee_id=employee_id)
