from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..calculation import ShiftWindow
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time clock-in, clock-out at or after shift end."""

    def decide_clock_in(self, *, at: datetime, window: Optional[ShiftWindow]) -> StatusDecision:
        return StatusDecision()

    def decide_clock_out(self, *, at: datetime, window: Optional[ShiftWindow]) -> StatusDecision:
        return StatusDecision()
