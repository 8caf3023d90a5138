from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..calculation import ShiftWindow, early_exit_minutes
from .base import AttendanceStrategy, StatusDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Clock-out before the shift ends."""

    def decide_clock_in(self, *, at: datetime, window: Optional[ShiftWindow]) -> StatusDecision:
        return StatusDecision()

    def decide_clock_out(self, *, at: datetime, window: Optional[ShiftWindow]) -> StatusDecision:
        minutes = early_exit_minutes(at, window)
        return StatusDecision(
            note=f"Left {minutes} min early" if minutes else None,
            is_early_departure=minutes > 0,
            early_exit_minutes=minutes,
        )
