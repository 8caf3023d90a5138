from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import Payslip, PayslipFigures, SalaryStructure


class PayrollRepository(Protocol):
    # Salary structures
    def get_salary_structure(self, employee_id: int) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def upsert_salary_structure(
        self,
        *,
        employee_id: int,
        basic_salary: Decimal,
        allowances: Decimal,
        effective_from: date,
    ) -> None:
        raise NotImplementedError

    # Payslips
    def exists_payslip(self, *, employee_id: int, year: int, month: int) -> bool:
        raise NotImplementedError

    def create_payslip(
        self,
        *,
        employee_id: int,
        year: int,
        month: int,
        figures: PayslipFigures,
        generated_by: Optional[int],
    ) -> int:
        """Insert a payslip; raises ConflictError if the period already has one."""

        raise NotImplementedError

    def get_payslip(self, payslip_id: int) -> Optional[Payslip]:
        raise NotImplementedError

    def list_payslips(
        self,
        *,
        employee_id: Optional[int] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> Sequence[Payslip]:
        raise NotImplementedError

    def delete_payslip(self, payslip_id: int) -> bool:
        raise NotImplementedError
