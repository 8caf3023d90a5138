from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..calculation import ShiftWindow


@dataclass(frozen=True)
class StatusDecision:
    note: Optional[str] = None
    is_late: bool = False
    late_minutes: int = 0
    is_early_departure: bool = False
    early_exit_minutes: int = 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we judge a clock-in or clock-out.

    ``at`` is company-local wall time.
    """

    @abstractmethod
    def decide_clock_in(self, *, at: datetime, window: Optional[ShiftWindow]) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_clock_out(self, *, at: datetime, window: Optional[ShiftWindow]) -> StatusDecision:
        raise NotImplementedError
