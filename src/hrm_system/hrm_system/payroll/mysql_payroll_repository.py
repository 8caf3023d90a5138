from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import PayslipStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import Payslip, PayslipFigures, SalaryStructure
from .repository import PayrollRepository

_PAYSLIP_SELECT = """
    SELECT p.*, e.full_name, e.employee_code
    FROM payslips p
    JOIN employees e ON e.employee_id = p.employee_id
"""


def _to_payslip(r: dict) -> Payslip:
    return Payslip(
        payslip_id=int(r["payslip_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        figures=PayslipFigures(
            basic_salary=to_decimal(r["basic_salary"]),
            allowances=to_decimal(r["allowances"]),
            gross_pay=to_decimal(r["gross_pay"]),
            working_days=int(r["working_days"]),
            paid_days=to_decimal(r["paid_days"]),
            lop_days=to_decimal(r["lop_days"]),
            lop_deduction=to_decimal(r["lop_deduction"]),
            provident_fund=to_decimal(r["provident_fund"]),
            tax=to_decimal(r["tax"]),
            total_deductions=to_decimal(r["total_deductions"]),
            net_pay=to_decimal(r["net_pay"]),
        ),
        status=PayslipStatus(r["status"]),
        generated_by=r.get("generated_by"),
        generated_at=r.get("generated_at"),
        employee_name=r.get("full_name"),
        employee_code=r.get("employee_code"),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_salary_structure(self, employee_id: int) -> Optional[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT employee_id, basic_salary, allowances, effective_from FROM salary_structures WHERE employee_id=%s",
                (int(employee_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return SalaryStructure(
                employee_id=int(r["employee_id"]),
                basic_salary=to_decimal(r["basic_salary"]),
                allowances=to_decimal(r["allowances"]),
                effective_from=r["effective_from"],
            )

    def upsert_salary_structure(
        self,
        *,
        employee_id: int,
        basic_salary: Decimal,
        allowances: Decimal,
        effective_from: date,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salary_structures(employee_id, basic_salary, allowances, effective_from)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    basic_salary=VALUES(basic_salary),
                    allowances=VALUES(allowances),
                    effective_from=VALUES(effective_from)
                """,
                (int(employee_id), basic_salary, allowances, effective_from),
            )

    def exists_payslip(self, *, employee_id: int, year: int, month: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS x FROM payslips WHERE employee_id=%s AND year=%s AND month=%s",
                (int(employee_id), int(year), int(month)),
            )
            return fetchone(cur) is not None

    def create_payslip(
        self,
        *,
        employee_id: int,
        year: int,
        month: int,
        figures: PayslipFigures,
        generated_by: Optional[int],
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO payslips(
                        employee_id, month, year, basic_salary, allowances, gross_pay, working_days,
                        paid_days, lop_days, lop_deduction, provident_fund, tax, total_deductions,
                        net_pay, status, generated_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        int(month),
                        int(year),
                        figures.basic_salary,
                        figures.allowances,
                        figures.gross_pay,
                        figures.working_days,
                        figures.paid_days,
                        figures.lop_days,
                        figures.lop_deduction,
                        figures.provident_fund,
                        figures.tax,
                        figures.total_deductions,
                        figures.net_pay,
                        PayslipStatus.GENERATED.value,
                        generated_by,
                    ),
                )
                return int(cur.lastrowid)
        except mysql_errors.IntegrityError:
            raise ConflictError(f"Payslip for {year}-{month:02d} already exists")

    def get_payslip(self, payslip_id: int) -> Optional[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_PAYSLIP_SELECT + " WHERE p.payslip_id=%s", (int(payslip_id),))
            r = fetchone(cur)
            return _to_payslip(r) if r else None

    def list_payslips(
        self,
        *,
        employee_id: Optional[int] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> Sequence[Payslip]:
        where = []
        params: list[object] = []
        if employee_id is not None:
            where.append("p.employee_id=%s")
            params.append(int(employee_id))
        if year is not None:
            where.append("p.year=%s")
            params.append(int(year))
        if month is not None:
            where.append("p.month=%s")
            params.append(int(month))
        sql = _PAYSLIP_SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY p.year DESC, p.month DESC, e.full_name", tuple(params))
            return [_to_payslip(r) for r in fetchall(cur)]

    def delete_payslip(self, payslip_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payslips WHERE payslip_id=%s", (int(payslip_id),))
            return cur.rowcount > 0
