from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from ..attendance.calculation import format_minutes
from ..attendance.repository import AttendanceRepository
from ..audit.service import AuditService
from ..common.datetime_utils import CompanyClock, month_bounds
from ..company_calendar.service import CalendarService
from ..core.enums import AttendanceStatus, NotificationType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import Permission, Role, has_permission
from ..employees.repository import EmployeeRepository
from ..leave.service import LeaveService
from ..notifications.service import NotificationService
from .calculator.base import PayrollCalculator
from .calculator.payslip_calculator import (
    DEFAULT_PF_RATE,
    DEFAULT_TAX_RATE,
    DEFAULT_TAX_THRESHOLD,
    compute_payslip,
    lop_days,
)
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Payslip, SalaryStructure
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

REPORT_FIELDS = [
    "work_date",
    "employee_id",
    "employee_code",
    "full_name",
    "dept_name",
    "shift_name",
    "clock_in",
    "clock_out",
    "status",
    "work_mode",
    "worked_hours",
    "overtime_hours",
    "remarks",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class PayrollReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        clock: CompanyClock,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._attendance = attendance
        self._clock = clock
        self._calculator = calculator or StandardPayrollCalculator()

    def _hhmm(self, instant) -> str:
        return self._clock.local(instant).strftime("%H:%M") if instant else "-"

    def build_attendance_report(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        dept_id: Optional[int] = None,
    ) -> ReportData:
        if end < start:
            raise ValidationError("End date is before start date")
        query_rows = self._attendance.list_rows(start=start, end=end, employee_id=employee_id, dept_id=dept_id)

        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for row in query_rows:
            r = row.record
            minutes = self._calculator.worked_minutes(r)

            out_rows.append(
                {
                    "work_date": r.work_date.isoformat(),
                    "employee_id": r.employee_id,
                    "employee_code": row.employee_code,
                    "full_name": row.full_name,
                    "dept_name": row.dept_name or "-",
                    "shift_name": row.shift_name or "-",
                    "clock_in": self._hhmm(r.clock_in),
                    "clock_out": self._hhmm(r.clock_out),
                    "status": r.status.value,
                    "work_mode": r.work_mode.value,
                    "worked_hours": format_minutes(minutes),
                    "overtime_hours": format_minutes(r.overtime_minutes),
                    "remarks": r.remarks or "",
                }
            )

            s = summary_map.get(r.employee_id)
            if not s:
                s = {
                    "employee_id": r.employee_id,
                    "employee_code": row.employee_code,
                    "full_name": row.full_name,
                    "total_minutes": 0,
                    "overtime_minutes": 0,
                    "days_present": 0,
                    "days_absent": 0,
                    "late_days": 0,
                }
                summary_map[r.employee_id] = s
            s["total_minutes"] += minutes
            s["overtime_minutes"] += r.overtime_minutes
            if r.status in (AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY):
                s["days_present"] += 1
            elif r.status == AttendanceStatus.ABSENT:
                s["days_absent"] += 1
            if r.is_late:
                s["late_days"] += 1

        summary = []
        for s in summary_map.values():
            summary.append(
                {
                    "employee_id": s["employee_id"],
                    "employee_code": s["employee_code"],
                    "full_name": s["full_name"],
                    "total_minutes": s["total_minutes"],
                    "total_hours": format_minutes(s["total_minutes"]),
                    "overtime_hours": format_minutes(s["overtime_minutes"]),
                    "days_present": s["days_present"],
                    "days_absent": s["days_absent"],
                    "late_days": s["late_days"],
                }
            )

        summary.sort(key=lambda x: x["total_minutes"], reverse=True)
        return ReportData(rows=out_rows, summary=summary)


def _money_arg(value: Any, field_name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount


class PayslipService:
    def __init__(
        self,
        payroll: PayrollRepository,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        calendar: CalendarService,
        leave: LeaveService,
        notifications: NotificationService,
        audit: AuditService,
        clock: CompanyClock,
        *,
        pf_rate: Decimal = DEFAULT_PF_RATE,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
        tax_threshold: Decimal = DEFAULT_TAX_THRESHOLD,
    ):
        self._payroll = payroll
        self._attendance = attendance
        self._employees = employees
        self._calendar = calendar
        self._leave = leave
        self._notifications = notifications
        self._audit = audit
        self._clock = clock
        self._pf_rate = Decimal(str(pf_rate))
        self._tax_rate = Decimal(str(tax_rate))
        self._tax_threshold = Decimal(str(tax_threshold))

    @staticmethod
    def _require(current_role: Role, permission: Permission) -> None:
        if not has_permission(current_role, permission):
            raise AuthorizationError("You do not have permission")

    def set_salary_structure(
        self,
        *,
        current_role: Role,
        actor_id: int,
        employee_id: int,
        basic_salary: Any,
        allowances: Any = 0,
        effective_from: Optional[date] = None,
    ) -> SalaryStructure:
        self._require(current_role, Permission.PAYROLL_MANAGE)
        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Employee not found")

        basic = _money_arg(basic_salary, "basic_salary")
        extra = _money_arg(allowances or 0, "allowances")
        if basic <= 0:
            raise ValidationError("basic_salary must be positive")

        effective_from = effective_from or self._clock.today()
        self._payroll.upsert_salary_structure(
            employee_id=int(employee_id),
            basic_salary=basic,
            allowances=extra,
            effective_from=effective_from,
        )
        self._audit.log(
            action="payroll.salary_structure",
            entity_type="salary_structure",
            entity_id=employee_id,
            actor_id=actor_id,
            actor_role=current_role,
            meta={"basic_salary": basic, "allowances": extra},
        )
        return self._payroll.get_salary_structure(int(employee_id))

    def calculate(self, *, employee_id: int, year: int, month: int):
        """Figures for one employee and month; None without a salary structure."""

        structure = self._payroll.get_salary_structure(int(employee_id))
        if not structure:
            return None

        start, end = month_bounds(year, month)
        working = self._calendar.working_days_between(start, end)
        working_set = set(working)

        absent = half = 0
        charged: set[date] = set()
        for r in self._attendance.list_for_employee(int(employee_id), start=start, end=end):
            if r.work_date not in working_set:
                continue
            if r.status == AttendanceStatus.ABSENT:
                absent += 1
            elif r.status == AttendanceStatus.HALF_DAY:
                half += 1
            else:
                continue
            charged.add(r.work_date)
        # Days already docked from attendance are not docked again for unpaid leave.
        unpaid = self._leave.unpaid_days(
            employee_id=int(employee_id),
            start=start,
            end=end,
            working_days=[d for d in working if d not in charged],
        )

        return compute_payslip(
            structure,
            working_days=len(working),
            lop=lop_days(absent_days=absent, half_days=half, unpaid_leave_days=unpaid),
            pf_rate=self._pf_rate,
            tax_rate=self._tax_rate,
            tax_threshold=self._tax_threshold,
        )

    def generate(
        self,
        *,
        current_role: Role,
        actor_id: int,
        year: int,
        month: int,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> dict:
        self._require(current_role, Permission.PAYROLL_MANAGE)
        month_bounds(year, month)

        if employee_ids is None:
            employee_ids = [e.employee_id for e in self._employees.list(active=True)]

        success: list[dict] = []
        errors: list[dict] = []
        total = 0
        for employee_id in employee_ids:
            total += 1
            employee_id = int(employee_id)
            if self._payroll.exists_payslip(employee_id=employee_id, year=year, month=month):
                errors.append({"employee_id": employee_id, "error": "Payslip already exists"})
                continue
            figures = self.calculate(employee_id=employee_id, year=year, month=month)
            if figures is None:
                errors.append({"employee_id": employee_id, "error": "No salary structure"})
                continue

            payslip_id = self._payroll.create_payslip(
                employee_id=employee_id,
                year=year,
                month=month,
                figures=figures,
                generated_by=int(actor_id),
            )
            success.append({"employee_id": employee_id, "payslip_id": payslip_id, "net_pay": figures.net_pay})
            self._notifications.notify(
                employee_id,
                "Payslip available",
                f"Your payslip for {year}-{month:02d} is available.",
                type=NotificationType.INFO,
                category="payroll",
                data={"payslip_id": payslip_id},
            )

        logger.info("Payroll %s-%02d: %s generated, %s skipped", year, month, len(success), len(errors))
        self._audit.log(
            action="payroll.generate",
            entity_type="payslip",
            entity_id=f"{year}-{month:02d}",
            actor_id=actor_id,
            actor_role=current_role,
            summary=f"Generated {len(success)} of {total} payslips",
            meta={"errors": errors},
        )
        return {"success": success, "errors": errors, "total": total}

    def list(self, *, current_role: Role, year: Optional[int] = None, month: Optional[int] = None, employee_id: Optional[int] = None):
        self._require(current_role, Permission.PAYROLL_VIEW)
        return self._payroll.list_payslips(employee_id=employee_id, year=year, month=month)

    def list_mine(self, employee_id: int, *, year: Optional[int] = None):
        return self._payroll.list_payslips(employee_id=int(employee_id), year=year)

    def get(self, payslip_id: int, *, current_role: Optional[Role], employee_id: int) -> Payslip:
        """Admins see any payslip; employees only their own."""

        payslip = self._payroll.get_payslip(int(payslip_id))
        if not payslip:
            raise NotFoundError("Payslip not found")
        if payslip.employee_id != int(employee_id) and not has_permission(current_role, Permission.PAYROLL_VIEW):
            raise NotFoundError("Payslip not found")
        return payslip

    def delete(self, *, current_role: Role, actor_id: int, payslip_id: int) -> None:
        self._require(current_role, Permission.PAYROLL_MANAGE)
        if not self._payroll.delete_payslip(int(payslip_id)):
            raise NotFoundError("Payslip not found")
        self._audit.log(
            action="payroll.delete",
            entity_type="payslip",
            entity_id=payslip_id,
            actor_id=actor_id,
            actor_role=current_role,
        )
