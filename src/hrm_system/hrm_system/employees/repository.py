from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence

from ..core.permissions import Role
from .model import Department, Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def list(
        self,
        *,
        dept_id: Optional[int] = None,
        role: Optional[Role] = None,
        active: Optional[bool] = True,
        search: Optional[str] = None,
    ) -> Sequence[Employee]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_code: str,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        dept_id: Optional[int],
        shift_id: Optional[int],
        designation: Optional[str],
        manager_id: Optional[int],
        date_of_joining: Optional[date],
    ) -> int:
        raise NotImplementedError

    def update(self, employee_id: int, fields: dict[str, Any]) -> bool:
        """Update whitelisted profile columns; unknown keys are ignored."""

        raise NotImplementedError

    def set_active(self, employee_id: int, active: bool) -> bool:
        raise NotImplementedError

    def update_password(self, employee_id: int, password_hash: str) -> bool:
        raise NotImplementedError


class DepartmentRepository(Protocol):
    def list_all(self) -> Sequence[Department]:
        raise NotImplementedError

    def get_by_id(self, dept_id: int) -> Optional[Department]:
        raise NotImplementedError

    def get_by_name(self, dept_name: str) -> Optional[Department]:
        raise NotImplementedError

    def create(self, dept_name: str) -> int:
        raise NotImplementedError
