from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..audit.service import AuditService
from ..auth.tokens import TokenService
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import Permission, Role, has_permission
from .model import Department, Employee
from .repository import DepartmentRepository, EmployeeRepository

logger = logging.getLogger(__name__)

# Only a SuperAdmin may hand out these roles.
_PRIVILEGED_ROLES = {Role.SUPER_ADMIN, Role.HR_ADMIN}


@dataclass(frozen=True)
class LoginResult:
    token: str
    expires_at: datetime
    employee: Employee


class AuthService:
    """Use case: authenticate an employee (login) and manage own password."""

    def __init__(self, employees: EmployeeRepository, tokens: TokenService):
        self._employees = employees
        self._tokens = tokens

    def authenticate(self, email: str, password: str) -> Employee:
        employee = self._employees.get_by_email((email or "").strip().lower()) if email else None
        if not employee or not employee.is_active:
            logger.info("Login rejected for %s", email)
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(employee.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Login rejected for %s", email)
            raise AuthenticationError("Invalid email or password")
        return employee

    def login(self, email: str, password: str) -> LoginResult:
        employee = self.authenticate(email, password)
        issued = self._tokens.issue(employee_id=employee.employee_id, role=employee.role, name=employee.full_name)
        return LoginResult(token=issued.token, expires_at=issued.expires_at, employee=employee)

    def change_password(self, *, employee_id: int, current_password: str, new_password: str) -> None:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        if not check_password_hash(employee.password_hash, current_password or ""):
            raise AuthenticationError("Current password is incorrect")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        if current_password == new_password:
            raise ValidationError("New password must differ from the current one")
        self._employees.update_password(employee_id, generate_password_hash(new_password))


class EmployeeService:
    """Use case: manage employees (admin)."""

    def __init__(self, employees: EmployeeRepository, departments: DepartmentRepository, audit: AuditService):
        self._employees = employees
        self._departments = departments
        self._audit = audit

    @staticmethod
    def _require(current_role: Role, permission: Permission) -> None:
        if not has_permission(current_role, permission):
            raise AuthorizationError("You do not have permission")

    def _check_department(self, dept_id: Optional[int]) -> None:
        if dept_id is not None and not self._departments.get_by_id(int(dept_id)):
            raise ValidationError("Department does not exist")

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def list(self, *, dept_id: Optional[int] = None, role: Optional[Role] = None, active: Optional[bool] = True, search: Optional[str] = None):
        return self._employees.list(dept_id=dept_id, role=role, active=active, search=search)

    def create_employee(
        self,
        *,
        current_role: Role,
        actor_id: int,
        employee_code: str,
        full_name: str,
        email: str,
        password: str,
        role: Role = Role.EMPLOYEE,
        dept_id: Optional[int] = None,
        shift_id: Optional[int] = None,
        designation: Optional[str] = None,
        manager_id: Optional[int] = None,
        date_of_joining: Optional[date] = None,
    ) -> int:
        self._require(current_role, Permission.EMPLOYEE_MANAGE)
        if role in _PRIVILEGED_ROLES and current_role != Role.SUPER_ADMIN:
            raise AuthorizationError("Only a SuperAdmin can create SuperAdmin or HR accounts")

        employee_code = require_non_empty(employee_code, "Employee code")
        full_name = require_non_empty(full_name, "Full name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._employees.get_by_email(email):
            raise ConflictError("Email is already registered")
        if self._employees.get_by_code(employee_code):
            raise ConflictError("Employee code already exists")
        self._check_department(dept_id)
        if manager_id is not None and not self._employees.get_by_id(int(manager_id)):
            raise ValidationError("Manager does not exist")

        employee_id = self._employees.create(
            employee_code=employee_code,
            full_name=full_name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            dept_id=dept_id,
            shift_id=shift_id,
            designation=(designation or "").strip() or None,
            manager_id=manager_id,
            date_of_joining=date_of_joining,
        )
        self._audit.log(
            action="employee.create",
            entity_type="employee",
            entity_id=employee_id,
            actor_id=actor_id,
            actor_role=current_role,
            summary=f"Created {employee_code} ({role.value})",
        )
        return employee_id

    def update_employee(self, *, current_role: Role, actor_id: int, employee_id: int, fields: dict[str, Any]) -> Employee:
        self._require(current_role, Permission.EMPLOYEE_MANAGE)
        employee = self.get(employee_id)

        if employee.role == Role.SUPER_ADMIN and current_role != Role.SUPER_ADMIN:
            raise AuthorizationError("Only a SuperAdmin can modify a SuperAdmin")

        changes: dict[str, Any] = {}
        if "full_name" in fields:
            changes["full_name"] = require_non_empty(fields["full_name"], "Full name")
        if "email" in fields:
            email = require_email(fields["email"])
            other = self._employees.get_by_email(email)
            if other and other.employee_id != employee.employee_id:
                raise ConflictError("Email is already registered")
            changes["email"] = email
        if "role" in fields:
            role = fields["role"]
            if role in _PRIVILEGED_ROLES and current_role != Role.SUPER_ADMIN:
                raise AuthorizationError("Only a SuperAdmin can grant SuperAdmin or HR")
            if employee.employee_id == actor_id and role != employee.role:
                raise ValidationError("You cannot change your own role")
            changes["role"] = role
        if "dept_id" in fields:
            self._check_department(fields["dept_id"])
            changes["dept_id"] = fields["dept_id"]
        if "manager_id" in fields:
            if fields["manager_id"] == employee.employee_id:
                raise ValidationError("An employee cannot manage themselves")
            changes["manager_id"] = fields["manager_id"]
        for key in ("shift_id", "designation", "date_of_joining"):
            if key in fields:
                changes[key] = fields[key]

        if not changes:
            raise ValidationError("Nothing to update")

        self._employees.update(employee.employee_id, changes)
        self._audit.log(
            action="employee.update",
            entity_type="employee",
            entity_id=employee.employee_id,
            actor_id=actor_id,
            actor_role=current_role,
            summary=f"Updated {', '.join(sorted(changes))}",
            meta={k: (v.value if isinstance(v, Role) else v) for k, v in changes.items()},
        )
        return self.get(employee.employee_id)

    def deactivate(self, *, current_role: Role, actor_id: int, employee_id: int) -> None:
        self._require(current_role, Permission.EMPLOYEE_MANAGE)
        employee = self.get(employee_id)
        if employee.employee_id == actor_id:
            raise ValidationError("You cannot deactivate your own account")
        if employee.role == Role.SUPER_ADMIN:
            raise ValidationError("A SuperAdmin account cannot be deactivated")
        if not employee.is_active:
            raise ValidationError("Employee is already inactive")

        if not self._employees.set_active(employee.employee_id, False):
            raise ValidationError("Deactivation failed")
        self._audit.log(
            action="employee.deactivate",
            entity_type="employee",
            entity_id=employee.employee_id,
            actor_id=actor_id,
            actor_role=current_role,
            summary=f"Deactivated {employee.employee_code}",
        )


class DepartmentService:
    def __init__(self, departments: DepartmentRepository):
        self._departments = departments

    def list(self):
        return self._departments.list_all()

    def create(self, *, current_role: Role, dept_name: str) -> Department:
        if not has_permission(current_role, Permission.EMPLOYEE_MANAGE):
            raise AuthorizationError("You do not have permission")
        dept_name = require_non_empty(dept_name, "Department name")
        if self._departments.get_by_name(dept_name):
            raise ConflictError("Department already exists")
        dept_id = self._departments.create(dept_name)
        return Department(dept_id=dept_id, dept_name=dept_name)
