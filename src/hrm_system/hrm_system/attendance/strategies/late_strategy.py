from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..calculation import ShiftWindow, late_status
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Clock-in after shift start + grace period."""

    def decide_clock_in(self, *, at: datetime, window: Optional[ShiftWindow]) -> StatusDecision:
        is_late, minutes = late_status(at, window)
        return StatusDecision(note=f"Late by {minutes} min" if is_late else None, is_late=is_late, late_minutes=minutes)

    def decide_clock_out(self, *, at: datetime, window: Optional[ShiftWindow]) -> StatusDecision:
        return StatusDecision()
