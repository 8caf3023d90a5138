from __future__ import annotations

from ...attendance.calculation import worked_minutes
from ...attendance.model import AttendanceRecord
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: (out - in) - completed breaks, not below 0."""

    def worked_minutes(self, record: AttendanceRecord) -> int:
        if not record.clock_in or not record.clock_out:
            return 0
        if record.worked_minutes:
            return int(record.worked_minutes)
        return worked_minutes(record.clock_in, record.clock_out, record.breaks)
