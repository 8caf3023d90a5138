from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .calculation import ShiftWindow
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Pick the strategy that judges a clock-in or clock-out against its shift window."""

    def for_clock_in(self, *, at: datetime, window: Optional[ShiftWindow]) -> AttendanceStrategy:
        if not window:
            return NormalStrategy()
        if at <= window.late_threshold:
            return NormalStrategy()
        return LateStrategy()

    def for_clock_out(self, *, at: datetime, window: Optional[ShiftWindow]) -> AttendanceStrategy:
        if not window:
            return NormalStrategy()
        if at < window.end:
            return EarlyLeaveStrategy()
        return NormalStrategy()
