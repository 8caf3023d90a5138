from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.permissions import Role, normalize_role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_SELECT = """
    SELECT e.employee_id, e.employee_code, e.full_name, e.email, e.password_hash, e.role,
           e.dept_id, e.shift_id, e.designation, e.manager_id, e.date_of_joining,
           e.is_active, e.created_at, d.dept_name
    FROM employees e
    LEFT JOIN departments d ON d.dept_id = e.dept_id
"""

_UPDATABLE = ("full_name", "email", "role", "dept_id", "shift_id", "designation", "manager_id", "date_of_joining")


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_code=r["employee_code"],
        full_name=r["full_name"],
        email=r["email"],
        password_hash=r["password_hash"],
        role=normalize_role(r["role"]) or Role.EMPLOYEE,
        dept_id=int(r["dept_id"]) if r.get("dept_id") is not None else None,
        shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
        designation=r.get("designation"),
        manager_id=int(r["manager_id"]) if r.get("manager_id") is not None else None,
        date_of_joining=r.get("date_of_joining"),
        is_active=bool(r.get("is_active", 1)),
        created_at=r.get("created_at"),
        dept_name=r.get("dept_name"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value: Any) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {where}=%s", (value,))
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._get_one("e.employee_id", int(employee_id))

    def get_by_email(self, email: str) -> Optional[Employee]:
        return self._get_one("e.email", email.strip().lower())

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        return self._get_one("e.employee_code", employee_code.strip())

    def list(
        self,
        *,
        dept_id: Optional[int] = None,
        role: Optional[Role] = None,
        active: Optional[bool] = True,
        search: Optional[str] = None,
    ) -> Sequence[Employee]:
        where = ["1=1"]
        params: list = []
        if dept_id:
            where.append("e.dept_id=%s")
            params.append(int(dept_id))
        if role:
            where.append("e.role=%s")
            params.append(role.value)
        if active is not None:
            where.append("e.is_active=%s")
            params.append(1 if active else 0)
        if search:
            where.append("(e.full_name LIKE %s OR e.email LIKE %s OR e.employee_code LIKE %s)")
            like = f"%{search.strip()}%"
            params.extend([like, like, like])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {' AND '.join(where)} ORDER BY e.full_name", tuple(params))
            return [_row_to_employee(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees
                    (employee_code, full_name, email, password_hash, role, dept_id, shift_id,
                     designation, manager_id, date_of_joining)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    employee_code,
                    full_name,
                    email,
                    password_hash,
                    role.value,
                    dept_id,
                    shift_id,
                    designation,
                    manager_id,
                    date_of_joining,
                ),
            )
            return int(cur.lastrowid)

    def update(self, employee_id: int, fields: dict[str, Any]) -> bool:
        cols = [c for c in _UPDATABLE if c in fields]
        if not cols:
            return False
        values = [fields[c].value if isinstance(fields[c], Role) else fields[c] for c in cols]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE employees SET {', '.join(f'{c}=%s' for c in cols)} WHERE employee_id=%s",
                (*values, int(employee_id)),
            )
            return cur.rowcount > 0

    def set_active(self, employee_id: int, active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE employees SET is_active=%s WHERE employee_id=%s", (1 if active else 0, int(employee_id)))
            return cur.rowcount > 0

    def update_password(self, employee_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE employees SET password_hash=%s WHERE employee_id=%s", (password_hash, int(employee_id)))
            return cur.rowcount > 0
