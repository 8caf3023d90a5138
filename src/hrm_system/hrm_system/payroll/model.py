from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PayslipStatus


@dataclass(frozen=True)
class SalaryStructure:
    employee_id: int
    basic_salary: Decimal
    allowances: Decimal
    effective_from: date

    @property
    def gross(self) -> Decimal:
        return self.basic_salary + self.allowances


@dataclass(frozen=True)
class PayslipFigures:
    """Computed amounts for one payslip, before it is stored."""

    basic_salary: Decimal
    allowances: Decimal
    gross_pay: Decimal
    working_days: int
    paid_days: Decimal
    lop_days: Decimal
    lop_deduction: Decimal
    provident_fund: Decimal
    tax: Decimal
    total_deductions: Decimal
    net_pay: Decimal


@dataclass(frozen=True)
class Payslip:
    payslip_id: int
    employee_id: int
    month: int
    year: int
    figures: PayslipFigures
    status: PayslipStatus = PayslipStatus.GENERATED
    generated_by: Optional[int] = None
    generated_at: Optional[datetime] = None
    employee_name: Optional[str] = None
    employee_code: Optional[str] = None

    def to_dict(self) -> dict:
        f = self.figures
        return {
            "payslip_id": self.payslip_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "employee_code": self.employee_code,
            "month": self.month,
            "year": self.year,
            "basic_salary": f.basic_salary,
            "allowances": f.allowances,
            "gross_pay": f.gross_pay,
            "working_days": f.working_days,
            "paid_days": f.paid_days,
            "lop_days": f.lop_days,
            "lop_deduction": f.lop_deduction,
            "provident_fund": f.provident_fund,
            "tax": f.tax,
            "total_deductions": f.total_deductions,
            "net_pay": f.net_pay,
            "status": self.status.value,
            "generated_by": self.generated_by,
            "generated_at": self.generated_at,
        }
