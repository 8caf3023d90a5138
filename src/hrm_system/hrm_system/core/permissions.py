"""Roles and the role -> permission table.

Controllers ask ``has_permission`` instead of comparing role strings, so the
whole access matrix lives here.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Role(str, Enum):
    SUPER_ADMIN = "SuperAdmin"
    HR_ADMIN = "HR"
    HR_MANAGER = "HR_Manager"
    EMPLOYEE = "Employee"


_ROLE_ALIASES = {
    "superadmin": Role.SUPER_ADMIN,
    "super_admin": Role.SUPER_ADMIN,
    "hr": Role.HR_ADMIN,
    "hr_admin": Role.HR_ADMIN,
    "hr_manager": Role.HR_MANAGER,
    "hrmanager": Role.HR_MANAGER,
    "employee": Role.EMPLOYEE,
}


def normalize_role(value: object) -> Optional[Role]:
    """Map stored/legacy spellings (``HR_ADMIN``, ``employee``) to a Role."""

    if isinstance(value, Role):
        return value
    if value is None:
        return None
    key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    return _ROLE_ALIASES.get(key)


class Permission(str, Enum):
    EMPLOYEE_VIEW = "employee.view"
    EMPLOYEE_MANAGE = "employee.manage"
    ATTENDANCE_VIEW_OWN = "attendance.view.own"
    ATTENDANCE_VIEW_ALL = "attendance.view.all"
    ATTENDANCE_EDIT = "attendance.edit"
    ATTENDANCE_FLAG = "attendance.flag"
    ATTENDANCE_FINALIZE = "attendance.finalize"
    CORRECTION_APPROVE = "correction.approve"
    SCHEDULE_MANAGE = "schedule.manage"
    SHIFT_MANAGE = "shift.manage"
    LEAVE_APPLY = "leave.apply"
    LEAVE_APPROVE_DEPARTMENT = "leave.approve.department"
    LEAVE_APPROVE_ANY = "leave.approve.any"
    LEAVE_CONFIGURE = "leave.configure"
    CALENDAR_MANAGE = "calendar.manage"
    PAYROLL_VIEW = "payroll.view"
    PAYROLL_MANAGE = "payroll.manage"
    DASHBOARD_ADMIN = "dashboard.admin"
    AUDIT_VIEW = "audit.view"
    LEAD_VIEW_ALL = "lead.view.all"
    LEAD_MANAGE = "lead.manage"


_EMPLOYEE_PERMISSIONS = frozenset(
    {
        Permission.ATTENDANCE_VIEW_OWN,
        Permission.LEAVE_APPLY,
        Permission.LEAD_MANAGE,
    }
)

_HR_MANAGER_PERMISSIONS = _EMPLOYEE_PERMISSIONS | {
    Permission.EMPLOYEE_VIEW,
    Permission.ATTENDANCE_VIEW_ALL,
    Permission.ATTENDANCE_FLAG,
    Permission.CORRECTION_APPROVE,
    Permission.SCHEDULE_MANAGE,
    Permission.LEAVE_APPROVE_DEPARTMENT,
    Permission.DASHBOARD_ADMIN,
    Permission.LEAD_VIEW_ALL,
}

_HR_ADMIN_PERMISSIONS = _HR_MANAGER_PERMISSIONS | {
    Permission.EMPLOYEE_MANAGE,
    Permission.ATTENDANCE_EDIT,
    Permission.ATTENDANCE_FINALIZE,
    Permission.SHIFT_MANAGE,
    Permission.LEAVE_APPROVE_ANY,
    Permission.LEAVE_CONFIGURE,
    Permission.CALENDAR_MANAGE,
    Permission.PAYROLL_VIEW,
    Permission.PAYROLL_MANAGE,
    Permission.AUDIT_VIEW,
}

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.EMPLOYEE: frozenset(_EMPLOYEE_PERMISSIONS),
    Role.HR_MANAGER: frozenset(_HR_MANAGER_PERMISSIONS),
    Role.HR_ADMIN: frozenset(_HR_ADMIN_PERMISSIONS),
    Role.SUPER_ADMIN: frozenset(Permission),
}


def has_permission(role: object, permission: Permission) -> bool:
    resolved = normalize_role(role)
    if resolved is None:
        return False
    return permission in ROLE_PERMISSIONS.get(resolved, frozenset())
