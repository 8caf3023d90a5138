from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, HalfDayType, WorkMode
from .model import AttendanceListRow, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_rows(
        self,
        *,
        start: date,
        end: date,
        dept_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        work_mode: Optional[WorkMode] = None,
        flagged_only: bool = False,
    ) -> Sequence[AttendanceListRow]:
        raise NotImplementedError

    def create_clock_in(
        self,
        *,
        employee_id: int,
        work_date: date,
        shift_id: Optional[int],
        clock_in: datetime,
        is_late: bool,
        late_minutes: int,
        work_mode: WorkMode,
        location: Optional[dict[str, Any]],
        remarks: Optional[str],
    ) -> int:
        """Insert an ``incomplete`` record; raises ConflictError on a duplicate day."""

        raise NotImplementedError

    def save(self, record: AttendanceRecord) -> bool:
        """Persist every mutable column of ``record``."""

        raise NotImplementedError

    def settle(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        reason: Optional[str],
        half_day_type: Optional[HalfDayType] = None,
        clear_clock_out: bool = False,
    ) -> bool:
        """Finalize a record that is still ``incomplete``; False if it was not."""

        raise NotImplementedError

    def insert_final(
        self,
        *,
        employee_id: int,
        work_date: date,
        shift_id: Optional[int],
        status: AttendanceStatus,
        reason: Optional[str],
    ) -> bool:
        """Insert a settled record with no punches; False if the day already has one."""

        raise NotImplementedError
