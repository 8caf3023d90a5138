from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..core.enums import HalfDayType, LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, to_decimal
from .model import LeaveBalance, LeaveRequest, LeaveType
from .repository import LeaveRepository

_BALANCE_SELECT = """
    SELECT b.balance_id, b.employee_id, b.leave_type, b.year, b.allocated, b.carried_forward,
           b.used, b.pending, t.name AS leave_type_name
    FROM leave_balances b
    JOIN leave_types t ON t.code = b.leave_type
"""

_REQUEST_SELECT = """
    SELECT r.*, e.full_name, e.dept_id, d.dept_name, t.name AS leave_type_name
    FROM leave_requests r
    JOIN employees e ON e.employee_id = r.employee_id
    LEFT JOIN departments d ON d.dept_id = e.dept_id
    JOIN leave_types t ON t.code = r.leave_type
"""


def _to_type(r: dict) -> LeaveType:
    return LeaveType(
        code=r["code"],
        name=r["name"],
        annual_quota=to_decimal(r["annual_quota"]),
        is_paid=bool(r["is_paid"]),
        carry_forward=bool(r["carry_forward"]),
        max_carry_forward=to_decimal(r["max_carry_forward"]),
        is_active=bool(r["is_active"]),
    )


def _to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        balance_id=int(r["balance_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=r["leave_type"],
        year=int(r["year"]),
        allocated=to_decimal(r["allocated"]),
        carried_forward=to_decimal(r["carried_forward"]),
        used=to_decimal(r["used"]),
        pending=to_decimal(r["pending"]),
        leave_type_name=r.get("leave_type_name"),
    )


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=r["leave_type"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        days=to_decimal(r["days"]),
        status=LeaveStatus(r["status"]),
        is_half_day=bool(r.get("is_half_day")),
        half_day_period=HalfDayType(r["half_day_period"]) if r.get("half_day_period") else None,
        reason=r.get("reason"),
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        decision_note=r.get("decision_note"),
        employee_name=r.get("full_name"),
        dept_id=r.get("dept_id"),
        dept_name=r.get("dept_name"),
        leave_type_name=r.get("leave_type_name"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Leave types --------
    def list_types(self, *, active_only: bool = True) -> Sequence[LeaveType]:
        sql = "SELECT * FROM leave_types"
        if active_only:
            sql += " WHERE is_active=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY code")
            return [_to_type(r) for r in fetchall(cur)]

    def get_type(self, code: str) -> Optional[LeaveType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM leave_types WHERE code=%s", (code,))
            r = fetchone(cur)
            return _to_type(r) if r else None

    def create_type(self, leave_type: LeaveType) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_types(code, name, annual_quota, is_paid, carry_forward, max_carry_forward, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    leave_type.code,
                    leave_type.name,
                    leave_type.annual_quota,
                    1 if leave_type.is_paid else 0,
                    1 if leave_type.carry_forward else 0,
                    leave_type.max_carry_forward,
                    1 if leave_type.is_active else 0,
                ),
            )

    # -------- Balances --------
    def get_balance(self, *, employee_id: int, leave_type: str, year: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _BALANCE_SELECT + " WHERE b.employee_id=%s AND b.leave_type=%s AND b.year=%s",
                (int(employee_id), leave_type, int(year)),
            )
            r = fetchone(cur)
            return _to_balance(r) if r else None

    def get_balance_by_id(self, balance_id: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_BALANCE_SELECT + " WHERE b.balance_id=%s", (int(balance_id),))
            r = fetchone(cur)
            return _to_balance(r) if r else None

    def list_balances(self, *, year: int, employee_id: Optional[int] = None) -> Sequence[LeaveBalance]:
        sql = _BALANCE_SELECT + " WHERE b.year=%s"
        params: list[object] = [int(year)]
        if employee_id is not None:
            sql += " AND b.employee_id=%s"
            params.append(int(employee_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY b.employee_id, b.leave_type", tuple(params))
            return [_to_balance(r) for r in fetchall(cur)]

    def ensure_balance(
        self,
        *,
        employee_id: int,
        leave_type: str,
        year: int,
        allocated: Decimal,
        carried_forward: Decimal = Decimal("0"),
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO leave_balances(employee_id, leave_type, year, allocated, carried_forward)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(employee_id), leave_type, int(year), allocated, carried_forward),
            )
            return cur.rowcount > 0

    def change_balance(
        self,
        balance_id: int,
        *,
        allocated: Decimal = Decimal("0"),
        used: Decimal = Decimal("0"),
        pending: Decimal = Decimal("0"),
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_balances
                SET allocated = allocated + %s,
                    used = GREATEST(used + %s, 0),
                    pending = GREATEST(pending + %s, 0)
                WHERE balance_id=%s
                """,
                (allocated, used, pending, int(balance_id)),
            )
            return cur.rowcount > 0

    # -------- Requests --------
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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_date, end_date, is_half_day, half_day_period, days, reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    leave_type,
                    start_date,
                    end_date,
                    1 if is_half_day else 0,
                    half_day_period.value if half_day_period else None,
                    days,
                    reason,
                    LeaveStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_request(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_REQUEST_SELECT + " WHERE r.request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

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
        where = []
        params: list[object] = []
        if employee_id is not None:
            where.append("r.employee_id=%s")
            params.append(int(employee_id))
        if dept_id is not None:
            where.append("e.dept_id=%s")
            params.append(int(dept_id))
        values = [s.value for s in statuses] if statuses else []
        if values:
            where.append(f"r.status IN ({in_clause(values)})")
            params.extend(values)
        if start is not None:
            where.append("r.end_date >= %s")
            params.append(start)
        if end is not None:
            where.append("r.start_date <= %s")
            params.append(end)

        sql = _REQUEST_SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY r.start_date DESC, r.request_id DESC LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_request(r) for r in fetchall(cur)]

    def count_requests(self, *, status: LeaveStatus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM leave_requests WHERE status=%s", (status.value,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def decide_request(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        expected: LeaveStatus,
        decided_by: Optional[int],
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=UTC_TIMESTAMP(), decision_note=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, decided_by, note, int(request_id), expected.value),
            )
            return cur.rowcount > 0
