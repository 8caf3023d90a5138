from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import HalfDayType, LeaveStatus
from .model import LeaveBalance, LeaveRequest, LeaveType


class LeaveRepository(Protocol):
    # Leave types
    def list_types(self, *, active_only: bool = True) -> Sequence[LeaveType]:
        raise NotImplementedError

    def get_type(self, code: str) -> Optional[LeaveType]:
        raise NotImplementedError

    def create_type(self, leave_type: LeaveType) -> None:
        raise NotImplementedError

    # Balances
    def get_balance(self, *, employee_id: int, leave_type: str, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def get_balance_by_id(self, balance_id: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def list_balances(self, *, year: int, employee_id: Optional[int] = None) -> Sequence[LeaveBalance]:
        raise NotImplementedError

    def ensure_balance(
        self,
        *,
        employee_id: int,
        leave_type: str,
        year: int,
        allocated: Decimal,
        carried_forward: Decimal = Decimal("0"),
    ) -> bool:
        """Create the balance if it does not exist; True when a row was created."""

        raise NotImplementedError

    def change_balance(
        self,
        balance_id: int,
        *,
        allocated: Decimal = Decimal("0"),
        used: Decimal = Decimal("0"),
        pending: Decimal = Decimal("0"),
    ) -> bool:
        """Add the given deltas to the balance columns."""

        raise NotImplementedError

    # Requests
    def create_request(
        self,
        *,
        employee_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        days: Decimal,
        is_half_day: bool,
        half_day_period: Optional[HalfDayType],
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def get_request(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        dept_id: Optional[int] = None,
        statuses: Optional[Iterable[LeaveStatus]] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        """Requests intersecting [start, end] when a range is given."""

        raise NotImplementedError

    def count_requests(self, *, status: LeaveStatus) -> int:
        raise NotImplementedError

    def decide_request(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        expected: LeaveStatus,
        decided_by: Optional[int],
        note: Optional[str] = None,
    ) -> bool:
        """Move a request from ``expected`` to ``status``; False if it was not in ``expected``."""

        raise NotImplementedError
