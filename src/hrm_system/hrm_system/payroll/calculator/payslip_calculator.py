"""Monthly payslip arithmetic.

All money is Decimal and rounded half-up to two places at each stored
figure, matching the DECIMAL(12,2) columns.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ..model import PayslipFigures, SalaryStructure

CENT = Decimal("0.01")
DEFAULT_PF_RATE = Decimal("0.12")
DEFAULT_TAX_RATE = Decimal("0.10")
DEFAULT_TAX_THRESHOLD = Decimal("50000")


def money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def lop_days(*, absent_days: int, half_days: int, unpaid_leave_days: Decimal) -> Decimal:
    """Loss-of-pay days: a half day costs half a day's pay."""

    return Decimal(absent_days) + Decimal(half_days) / 2 + Decimal(unpaid_leave_days)


def compute_payslip(
    structure: SalaryStructure,
    *,
    working_days: int,
    lop: Decimal,
    pf_rate: Decimal = DEFAULT_PF_RATE,
    tax_rate: Decimal = DEFAULT_TAX_RATE,
    tax_threshold: Decimal = DEFAULT_TAX_THRESHOLD,
) -> PayslipFigures:
    gross = money(structure.gross)
    lop = min(Decimal(lop), Decimal(working_days)) if working_days > 0 else Decimal("0")

    deduction = money(gross / working_days * lop) if working_days > 0 else Decimal("0.00")
    earned = gross - deduction

    pf = money(earned * Decimal(pf_rate))
    tax = money(earned * Decimal(tax_rate)) if earned > Decimal(tax_threshold) else Decimal("0.00")
    net = money(earned - pf - tax)

    return PayslipFigures(
        basic_salary=money(structure.basic_salary),
        allowances=money(structure.allowances),
        gross_pay=gross,
        working_days=int(working_days),
        paid_days=Decimal(working_days) - lop,
        lop_days=lop,
        lop_deduction=deduction,
        provident_fund=pf,
        tax=tax,
        total_deductions=money(deduction + pf + tax),
        net_pay=net,
    )
