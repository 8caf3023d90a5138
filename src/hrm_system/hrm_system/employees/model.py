from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.permissions import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee account.

    Note: Plain data object (no DB access code here).
    """

    employee_id: int
    employee_code: str
    full_name: str
    email: str
    password_hash: str
    role: Role
    dept_id: Optional[int]
    shift_id: Optional[int]
    designation: Optional[str] = None
    manager_id: Optional[int] = None
    date_of_joining: Optional[date] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    dept_name: Optional[str] = None

    def public_view(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "employee_code": self.employee_code,
            "full_name": self.full_name,
            "email": self.email,
            "role": self.role.value,
            "dept_id": self.dept_id,
            "dept_name": self.dept_name,
            "designation": self.designation,
            "shift_id": self.shift_id,
            "manager_id": self.manager_id,
            "date_of_joining": self.date_of_joining,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class Department:
    dept_id: int
    dept_name: str
