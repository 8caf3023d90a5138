from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import AttendanceState, AttendanceStatus, HalfDayType, WorkMode


@dataclass(frozen=True)
class BreakSession:
    break_in: datetime
    break_out: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.break_out is None

    def to_dict(self) -> dict:
        return {"break_in": self.break_in, "break_out": self.break_out}


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one work date.

    ``clock_in``/``clock_out`` and the ``flagged_at`` timestamp are naive UTC;
    ``work_date`` is the company-local date the shift started on.
    """

    attendance_id: int
    employee_id: int
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    status: AttendanceStatus
    shift_id: Optional[int] = None
    breaks: tuple[BreakSession, ...] = ()
    total_break_minutes: int = 0
    worked_minutes: int = 0
    late_minutes: int = 0
    early_exit_minutes: int = 0
    overtime_minutes: int = 0
    is_late: bool = False
    is_early_departure: bool = False
    status_reason: Optional[str] = None
    half_day_type: Optional[HalfDayType] = None
    work_mode: WorkMode = WorkMode.OFFICE
    location: Optional[dict[str, Any]] = None
    flagged_reason: Optional[str] = None
    flagged_by: Optional[int] = None
    flagged_at: Optional[datetime] = None
    remarks: Optional[str] = None

    @property
    def on_break(self) -> bool:
        return any(b.is_open for b in self.breaks)

    @property
    def is_flagged(self) -> bool:
        return self.flagged_at is not None

    @property
    def state(self) -> AttendanceState:
        if not self.clock_in:
            return AttendanceState.NOT_CLOCKED_IN
        if self.clock_out:
            return AttendanceState.CLOCKED_OUT
        if self.on_break:
            return AttendanceState.ON_BREAK
        return AttendanceState.WORKING

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "work_date": self.work_date,
            "shift_id": self.shift_id,
            "clock_in": self.clock_in,
            "clock_out": self.clock_out,
            "status": self.status.value,
            "status_reason": self.status_reason,
            "state": self.state.value,
            "work_mode": self.work_mode.value,
            "breaks": [b.to_dict() for b in self.breaks],
            "total_break_minutes": self.total_break_minutes,
            "worked_minutes": self.worked_minutes,
            "overtime_minutes": self.overtime_minutes,
            "is_late": self.is_late,
            "late_minutes": self.late_minutes,
            "is_early_departure": self.is_early_departure,
            "early_exit_minutes": self.early_exit_minutes,
            "half_day_type": self.half_day_type.value if self.half_day_type else None,
            "location": self.location,
            "flagged_reason": self.flagged_reason,
            "flagged_by": self.flagged_by,
            "flagged_at": self.flagged_at,
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class AttendanceListRow:
    """Read-model for admin listings and reports (record joined with names)."""

    record: AttendanceRecord
    full_name: str
    employee_code: str
    dept_id: Optional[int]
    dept_name: Optional[str]
    shift_name: Optional[str]

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data.update(
            {
                "employee_code": self.employee_code,
                "full_name": self.full_name,
                "dept_id": self.dept_id,
                "dept_name": self.dept_name,
                "shift_name": self.shift_name,
            }
        )
        return data
