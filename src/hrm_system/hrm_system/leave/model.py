from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import HalfDayType, LeaveStatus


@dataclass(frozen=True)
class LeaveType:
    code: str
    name: str
    annual_quota: Decimal
    is_paid: bool = True
    carry_forward: bool = False
    max_carry_forward: Decimal = Decimal("0")
    is_active: bool = True


@dataclass(frozen=True)
class LeaveBalance:
    """One employee's entitlement for one leave type and year."""

    balance_id: int
    employee_id: int
    leave_type: str
    year: int
    allocated: Decimal
    carried_forward: Decimal = Decimal("0")
    used: Decimal = Decimal("0")
    pending: Decimal = Decimal("0")
    leave_type_name: Optional[str] = None

    @property
    def remaining(self) -> Decimal:
        return self.allocated + self.carried_forward - self.used - self.pending

    def to_dict(self) -> dict:
        return {
            "balance_id": self.balance_id,
            "employee_id": self.employee_id,
            "leave_type": self.leave_type,
            "leave_type_name": self.leave_type_name,
            "year": self.year,
            "allocated": self.allocated,
            "carried_forward": self.carried_forward,
            "used": self.used,
            "pending": self.pending,
            "remaining": self.remaining,
        }


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    leave_type: str
    start_date: date
    end_date: date
    days: Decimal
    status: LeaveStatus
    is_half_day: bool = False
    half_day_period: Optional[HalfDayType] = None
    reason: Optional[str] = None
    created_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    decision_note: Optional[str] = None
    employee_name: Optional[str] = None
    dept_id: Optional[int] = None
    dept_name: Optional[str] = None
    leave_type_name: Optional[str] = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "dept_name": self.dept_name,
            "leave_type": self.leave_type,
            "leave_type_name": self.leave_type_name,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "days": self.days,
            "is_half_day": self.is_half_day,
            "half_day_period": self.half_day_period.value if self.half_day_period else None,
            "reason": self.reason,
            "status": self.status.value,
            "created_at": self.created_at,
            "decided_by": self.decided_by,
            "decided_at": self.decided_at,
            "decision_note": self.decision_note,
        }
