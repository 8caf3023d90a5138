"""In-memory repositories shared by the service and API tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional

from src.hrm_system.hrm_system.attendance.model import AttendanceListRow, AttendanceRecord
from src.hrm_system.hrm_system.audit.model import AuditLog
from src.hrm_system.hrm_system.common.datetime_utils import CompanyClock
from src.hrm_system.hrm_system.company_calendar.model import Holiday, HolidayTemplate, WorkingRule
from src.hrm_system.hrm_system.container import Repositories, build_services
from src.hrm_system.hrm_system.core.enums import (
    AttendanceStatus,
    CorrectionIssue,
    HalfDayType,
    HolidayType,
    LeadStatus,
    LeaveStatus,
    NotificationType,
    RequestStatus,
    WorkMode,
)
from src.hrm_system.hrm_system.core.exceptions import ConflictError
from src.hrm_system.hrm_system.core.permissions import Role
from src.hrm_system.hrm_system.corrections.model import CorrectionRequest, ScheduleChangeRequest
from src.hrm_system.hrm_system.employees.model import Department, Employee
from src.hrm_system.hrm_system.leads.model import Lead
from src.hrm_system.hrm_system.leave.model import LeaveBalance, LeaveRequest, LeaveType
from src.hrm_system.hrm_system.notifications.model import Notification
from src.hrm_system.hrm_system.payroll.model import Payslip, PayslipFigures, SalaryStructure
from src.hrm_system.hrm_system.schedules.model import Schedule
from src.hrm_system.hrm_system.settings import Settings
from src.hrm_system.hrm_system.shifts.model import Shift


class FixedClock(CompanyClock):
    """CompanyClock whose UTC "now" is set by the test."""

    def __init__(self, tz_name: str, now: datetime):
        self.current = now
        super().__init__(tz_name, now_fn=lambda: self.current)

    def set(self, now: datetime) -> None:
        self.current = now


class InMemoryDepartments:
    def __init__(self, departments: Iterable[Department] = ()):
        self.items = {d.dept_id: d for d in departments}

    def list_all(self):
        return sorted(self.items.values(), key=lambda d: d.dept_name)

    def get_by_id(self, dept_id: int):
        return self.items.get(dept_id)

    def get_by_name(self, dept_name: str):
        return next((d for d in self.items.values() if d.dept_name.lower() == dept_name.lower()), None)

    def create(self, dept_name: str) -> int:
        dept_id = max(self.items, default=0) + 1
        self.items[dept_id] = Department(dept_id=dept_id, dept_name=dept_name)
        return dept_id


class InMemoryEmployees:
    def __init__(self, departments: InMemoryDepartments):
        self.items: dict[int, Employee] = {}
        self._departments = departments

    def add(self, employee: Employee) -> Employee:
        dept = self._departments.get_by_id(employee.dept_id) if employee.dept_id else None
        employee = replace(employee, dept_name=dept.dept_name if dept else None)
        self.items[employee.employee_id] = employee
        return employee

    def get_by_id(self, employee_id: int):
        return self.items.get(employee_id)

    def get_by_email(self, email: str):
        return next((e for e in self.items.values() if e.email == email.lower()), None)

    def get_by_code(self, employee_code: str):
        return next((e for e in self.items.values() if e.employee_code == employee_code), None)

    def list(self, *, dept_id=None, role=None, active=True, search=None):
        out = []
        for e in sorted(self.items.values(), key=lambda e: e.employee_id):
            if dept_id is not None and e.dept_id != dept_id:
                continue
            if role is not None and e.role != role:
                continue
            if active is not None and e.is_active != active:
                continue
            if search and search.lower() not in (e.full_name + e.email + e.employee_code).lower():
                continue
            out.append(e)
        return out

    def create(self, **kwargs) -> int:
        employee_id = max(self.items, default=0) + 1
        self.add(Employee(employee_id=employee_id, **kwargs))
        return employee_id

    def update(self, employee_id: int, fields: dict[str, Any]) -> bool:
        if employee_id not in self.items:
            return False
        allowed = {k: v for k, v in fields.items() if hasattr(self.items[employee_id], k)}
        self.add(replace(self.items[employee_id], **allowed))
        return True

    def set_active(self, employee_id: int, active: bool) -> bool:
        return self.update(employee_id, {"is_active": active})

    def update_password(self, employee_id: int, password_hash: str) -> bool:
        return self.update(employee_id, {"password_hash": password_hash})


class InMemoryShifts:
    def __init__(self, shifts: Iterable[Shift] = ()):
        self.items = {s.shift_id: s for s in shifts}

    def get_by_id(self, shift_id: int):
        return self.items.get(shift_id)

    def list_all(self, *, active_only: bool = False):
        return [s for s in self.items.values() if s.is_active or not active_only]

    def create(self, shift: Shift) -> int:
        shift_id = max(self.items, default=0) + 1
        self.items[shift_id] = replace(shift, shift_id=shift_id)
        return shift_id

    def update(self, shift: Shift) -> bool:
        if shift.shift_id not in self.items:
            return False
        self.items[shift.shift_id] = shift
        return True


class InMemorySchedules:
    def __init__(self):
        self.items: dict[tuple[int, date], Schedule] = {}
        self._id = 0

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date):
        return self.items.get((employee_id, work_date))

    def upsert(self, *, employee_id: int, work_date: date, shift_id: int, note=None) -> int:
        existing = self.items.get((employee_id, work_date))
        if existing:
            schedule_id = existing.schedule_id
        else:
            self._id += 1
            schedule_id = self._id
        self.items[(employee_id, work_date)] = Schedule(schedule_id, employee_id, work_date, shift_id, note)
        return schedule_id

    def delete(self, *, schedule_id: int) -> bool:
        for key, sc in list(self.items.items()):
            if sc.schedule_id == schedule_id:
                del self.items[key]
                return True
        return False

    def list_range(self, *, start: date, end: date, employee_id=None):
        return [
            {"schedule_id": sc.schedule_id, "employee_id": sc.employee_id, "work_date": sc.work_date, "shift_id": sc.shift_id}
            for sc in self.items.values()
            if start <= sc.work_date <= end and (employee_id is None or sc.employee_id == employee_id)
        ]


class InMemoryAttendance:
    def __init__(self, employees: InMemoryEmployees, shifts: InMemoryShifts):
        self.items: dict[int, AttendanceRecord] = {}
        self._employees = employees
        self._shifts = shifts
        self._id = 0

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        if not record.attendance_id:
            self._id += 1
            record = replace(record, attendance_id=self._id)
        self._id = max(self._id, record.attendance_id)
        self.items[record.attendance_id] = record
        return record

    def get_by_id(self, attendance_id: int):
        return self.items.get(attendance_id)

    def get_for_employee_and_date(self, employee_id: int, work_date: date):
        return next(
            (r for r in self.items.values() if r.employee_id == employee_id and r.work_date == work_date),
            None,
        )

    def list_for_employee(self, employee_id: int, *, start: date, end: date):
        rows = [r for r in self.items.values() if r.employee_id == employee_id and start <= r.work_date <= end]
        return sorted(rows, key=lambda r: r.work_date, reverse=True)

    def list_rows(self, *, start, end, dept_id=None, employee_id=None, status=None, work_mode=None, flagged_only=False):
        out = []
        for r in sorted(self.items.values(), key=lambda r: (r.work_date, r.employee_id)):
            e = self._employees.get_by_id(r.employee_id)
            if not (start <= r.work_date <= end):
                continue
            if dept_id is not None and (not e or e.dept_id != dept_id):
                continue
            if employee_id is not None and r.employee_id != employee_id:
                continue
            if status is not None and r.status != status:
                continue
            if work_mode is not None and r.work_mode != work_mode:
                continue
            if flagged_only and not r.is_flagged:
                continue
            shift = self._shifts.get_by_id(r.shift_id) if r.shift_id else None
            out.append(
                AttendanceListRow(
                    record=r,
                    full_name=e.full_name if e else "",
                    employee_code=e.employee_code if e else "",
                    dept_id=e.dept_id if e else None,
                    dept_name=e.dept_name if e else None,
                    shift_name=shift.shift_name if shift else None,
                )
            )
        return out

    def create_clock_in(self, *, employee_id, work_date, shift_id, clock_in, is_late, late_minutes, work_mode, location, remarks) -> int:
        if self.get_for_employee_and_date(employee_id, work_date):
            raise ConflictError("Already clocked in for this work date")
        rec = self.add(
            AttendanceRecord(
                attendance_id=0,
                employee_id=employee_id,
                work_date=work_date,
                clock_in=clock_in,
                clock_out=None,
                status=AttendanceStatus.INCOMPLETE,
                shift_id=shift_id,
                is_late=is_late,
                late_minutes=late_minutes,
                work_mode=work_mode,
                location=location,
                remarks=remarks,
            )
        )
        return rec.attendance_id

    def save(self, record: AttendanceRecord) -> bool:
        if record.attendance_id not in self.items:
            return False
        self.items[record.attendance_id] = record
        return True

    def settle(self, *, attendance_id, status, reason, half_day_type=None, clear_clock_out=False) -> bool:
        rec = self.items.get(attendance_id)
        if not rec or rec.status != AttendanceStatus.INCOMPLETE:
            return False
        self.items[attendance_id] = replace(
            rec,
            status=status,
            status_reason=reason,
            half_day_type=half_day_type,
            clock_out=None if clear_clock_out else rec.clock_out,
        )
        return True

    def insert_final(self, *, employee_id, work_date, shift_id, status, reason) -> bool:
        if self.get_for_employee_and_date(employee_id, work_date):
            return False
        self.add(
            AttendanceRecord(
                attendance_id=0,
                employee_id=employee_id,
                work_date=work_date,
                clock_in=None,
                clock_out=None,
                status=status,
                shift_id=shift_id,
                status_reason=reason,
            )
        )
        return True


class InMemoryCorrections:
    def __init__(self, employees: InMemoryEmployees, shifts: InMemoryShifts):
        self.items: dict[int, CorrectionRequest] = {}
        self.schedule_changes: dict[int, ScheduleChangeRequest] = {}
        self._employees = employees
        self._shifts = shifts

    def _name(self, employee_id: int) -> Optional[str]:
        e = self._employees.get_by_id(employee_id)
        return e.full_name if e else None

    def create(self, *, employee_id, attendance_id, work_date, issue_type, requested_clock_in, requested_clock_out, reason) -> int:
        request_id = max(self.items, default=0) + 1
        self.items[request_id] = CorrectionRequest(
            request_id=request_id,
            employee_id=employee_id,
            attendance_id=attendance_id,
            work_date=work_date,
            issue_type=issue_type,
            requested_clock_in=requested_clock_in,
            requested_clock_out=requested_clock_out,
            reason=reason,
            status=RequestStatus.PENDING,
            employee_name=self._name(employee_id),
        )
        return request_id

    def get(self, request_id: int):
        return self.items.get(request_id)

    def list(self, *, status=None, employee_id=None, limit=200):
        rows = [
            r
            for r in self.items.values()
            if (status is None or r.status == status) and (employee_id is None or r.employee_id == employee_id)
        ]
        return sorted(rows, key=lambda r: r.request_id, reverse=True)[:limit]

    def get_pending_for_attendance(self, attendance_id: int):
        rows = [r for r in self.items.values() if r.attendance_id == attendance_id and r.status == RequestStatus.PENDING]
        return max(rows, key=lambda r: r.request_id, default=None)

    def update_pending(self, request_id: int, *, requested_clock_in, requested_clock_out, reason) -> bool:
        req = self.items.get(request_id)
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.items[request_id] = replace(
            req,
            requested_clock_in=requested_clock_in,
            requested_clock_out=requested_clock_out,
            reason=reason,
        )
        return True

    def count_pending(self) -> int:
        return sum(1 for r in self.items.values() if r.status == RequestStatus.PENDING)

    def decide(self, *, request_id, status, decided_by, admin_note=None) -> bool:
        req = self.items.get(request_id)
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.items[request_id] = replace(req, status=status, decided_by=decided_by, admin_note=admin_note)
        return True

    def create_schedule_change(self, *, employee_id, work_date, requested_shift_id, reason) -> int:
        request_id = max(self.schedule_changes, default=0) + 1
        shift = self._shifts.get_by_id(requested_shift_id)
        self.schedule_changes[request_id] = ScheduleChangeRequest(
            request_id=request_id,
            employee_id=employee_id,
            work_date=work_date,
            requested_shift_id=requested_shift_id,
            reason=reason,
            status=RequestStatus.PENDING,
            employee_name=self._name(employee_id),
            shift_name=shift.shift_name if shift else None,
        )
        return request_id

    def get_schedule_change(self, request_id: int):
        return self.schedule_changes.get(request_id)

    def list_schedule_changes(self, *, status=None, employee_id=None, limit=200):
        rows = [
            r
            for r in self.schedule_changes.values()
            if (status is None or r.status == status) and (employee_id is None or r.employee_id == employee_id)
        ]
        return sorted(rows, key=lambda r: r.request_id, reverse=True)[:limit]

    def decide_schedule_change(self, *, request_id, status, decided_by, admin_note=None) -> bool:
        req = self.schedule_changes.get(request_id)
        if not req or req.status != RequestStatus.PENDING:
            return False
        self.schedule_changes[request_id] = replace(req, status=status, decided_by=decided_by, admin_note=admin_note)
        return True


DEFAULT_LEAVE_TYPES = (
    LeaveType("CL", "Casual Leave", Decimal("12"), is_paid=True, carry_forward=False),
    LeaveType("SL", "Sick Leave", Decimal("10"), is_paid=True, carry_forward=False),
    LeaveType("EL", "Earned Leave", Decimal("15"), is_paid=True, carry_forward=True, max_carry_forward=Decimal("5")),
    LeaveType("LOP", "Loss of Pay", Decimal("0"), is_paid=False),
)


class InMemoryLeave:
    def __init__(self, employees: InMemoryEmployees, types: Iterable[LeaveType] = DEFAULT_LEAVE_TYPES):
        self.types = {t.code: t for t in types}
        self.balances: dict[int, LeaveBalance] = {}
        self.requests: dict[int, LeaveRequest] = {}
        self._employees = employees

    def list_types(self, *, active_only: bool = True):
        return [t for t in self.types.values() if t.is_active or not active_only]

    def get_type(self, code: str):
        return self.types.get(code)

    def create_type(self, leave_type: LeaveType) -> None:
        if leave_type.code in self.types:
            raise ConflictError("Leave type already exists")
        self.types[leave_type.code] = leave_type

    def get_balance(self, *, employee_id, leave_type, year):
        return next(
            (
                b
                for b in self.balances.values()
                if b.employee_id == employee_id and b.leave_type == leave_type and b.year == year
            ),
            None,
        )

    def get_balance_by_id(self, balance_id: int):
        return self.balances.get(balance_id)

    def list_balances(self, *, year, employee_id=None):
        return [
            b
            for b in sorted(self.balances.values(), key=lambda b: (b.employee_id, b.leave_type))
            if b.year == year and (employee_id is None or b.employee_id == employee_id)
        ]

    def ensure_balance(self, *, employee_id, leave_type, year, allocated, carried_forward=Decimal("0")) -> bool:
        if self.get_balance(employee_id=employee_id, leave_type=leave_type, year=year):
            return False
        balance_id = max(self.balances, default=0) + 1
        t = self.types.get(leave_type)
        self.balances[balance_id] = LeaveBalance(
            balance_id=balance_id,
            employee_id=employee_id,
            leave_type=leave_type,
            year=year,
            allocated=Decimal(allocated),
            carried_forward=Decimal(carried_forward),
            leave_type_name=t.name if t else None,
        )
        return True

    def change_balance(self, balance_id, *, allocated=Decimal("0"), used=Decimal("0"), pending=Decimal("0")) -> bool:
        b = self.balances.get(balance_id)
        if not b:
            return False
        self.balances[balance_id] = replace(
            b,
            allocated=max(b.allocated + allocated, Decimal("0")),
            used=max(b.used + used, Decimal("0")),
            pending=max(b.pending + pending, Decimal("0")),
        )
        return True

    def create_request(self, *, employee_id, leave_type, start_date, end_date, days, is_half_day, half_day_period, reason) -> int:
        request_id = max(self.requests, default=0) + 1
        e = self._employees.get_by_id(employee_id)
        t = self.types.get(leave_type)
        self.requests[request_id] = LeaveRequest(
            request_id=request_id,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            days=days,
            status=LeaveStatus.PENDING,
            is_half_day=is_half_day,
            half_day_period=half_day_period,
            reason=reason,
            employee_name=e.full_name if e else None,
            dept_id=e.dept_id if e else None,
            dept_name=e.dept_name if e else None,
            leave_type_name=t.name if t else None,
        )
        return request_id

    def get_request(self, request_id: int):
        return self.requests.get(request_id)

    def list_requests(self, *, employee_id=None, dept_id=None, statuses=None, start=None, end=None, limit=200):
        statuses = set(statuses) if statuses else None
        out = []
        for r in sorted(self.requests.values(), key=lambda r: r.request_id, reverse=True):
            if employee_id is not None and r.employee_id != employee_id:
                continue
            if dept_id is not None and r.dept_id != dept_id:
                continue
            if statuses is not None and r.status not in statuses:
                continue
            if start is not None and r.end_date < start:
                continue
            if end is not None and r.start_date > end:
                continue
            out.append(r)
        return out[:limit]

    def count_requests(self, *, status) -> int:
        return sum(1 for r in self.requests.values() if r.status == status)

    def decide_request(self, *, request_id, status, expected, decided_by, note=None) -> bool:
        r = self.requests.get(request_id)
        if not r or r.status != expected:
            return False
        self.requests[request_id] = replace(r, status=status, decided_by=decided_by, decision_note=note)
        return True


class InMemoryCalendar:
    def __init__(self):
        self.holidays: dict[int, Holiday] = {}
        self.rules: dict[int, WorkingRule] = {}
        self.templates: dict[int, HolidayTemplate] = {}

    def add_holiday(self, name: str, day: date, *, recurring: bool = False) -> Holiday:
        holiday_id = self.create_holiday(
            name=name,
            holiday_type=HolidayType.RECURRING if recurring else HolidayType.ONE_TIME,
            holiday_date=None if recurring else day,
            recurring_md=day.strftime("%m-%d") if recurring else None,
        )
        return self.holidays[holiday_id]

    def list_holidays(self, *, active_only: bool = True):
        return [h for h in self.holidays.values() if h.is_active or not active_only]

    def get_holiday(self, holiday_id: int):
        return self.holidays.get(holiday_id)

    def create_holiday(self, *, name, holiday_type, holiday_date, recurring_md) -> int:
        holiday_id = max(self.holidays, default=0) + 1
        self.holidays[holiday_id] = Holiday(holiday_id, name, holiday_type, holiday_date, recurring_md)
        return holiday_id

    def deactivate_holiday(self, holiday_id: int) -> bool:
        h = self.holidays.get(holiday_id)
        if not h:
            return False
        self.holidays[holiday_id] = replace(h, is_active=False)
        return True

    def list_working_rules(self):
        return sorted(self.rules.values(), key=lambda r: r.effective_from)

    def upsert_working_rule(self, *, name, weekend_days, effective_from) -> int:
        for rule in self.rules.values():
            if rule.effective_from == effective_from:
                self.rules[rule.rule_id] = replace(rule, name=name, weekend_days=tuple(weekend_days))
                return rule.rule_id
        rule_id = max(self.rules, default=0) + 1
        self.rules[rule_id] = WorkingRule(rule_id, name, effective_from, tuple(weekend_days))
        return rule_id

    def list_templates(self, *, country=None):
        return [t for t in self.templates.values() if country is None or t.country == country]

    def get_template(self, template_id: int):
        return self.templates.get(template_id)

    def create_template(self, *, name, country, holidays, is_default, created_by) -> int:
        template_id = max(self.templates, default=0) + 1
        self.templates[template_id] = HolidayTemplate(template_id, name, country, list(holidays), is_default, created_by)
        return template_id

    def update_template(self, template: HolidayTemplate) -> bool:
        if template.template_id not in self.templates:
            return False
        self.templates[template.template_id] = template
        return True

    def delete_template(self, template_id: int) -> bool:
        return self.templates.pop(template_id, None) is not None


class InMemoryNotifications:
    def __init__(self):
        self.items: dict[int, Notification] = {}

    def create(self, *, employee_id, title, message, type, category, data) -> int:
        notification_id = max(self.items, default=0) + 1
        self.items[notification_id] = Notification(
            notification_id, employee_id, title, message, type, category, dict(data or {})
        )
        return notification_id

    def for_employee(self, employee_id: int) -> list[Notification]:
        return [n for n in self.items.values() if n.employee_id == employee_id]

    def list_for_employee(self, employee_id: int, *, unread_only=False, limit=50):
        rows = [n for n in self.for_employee(employee_id) if not (unread_only and n.is_read)]
        return sorted(rows, key=lambda n: n.notification_id, reverse=True)[:limit]

    def list_after(self, employee_id: int, after_id: int, *, limit=50):
        rows = [n for n in self.for_employee(employee_id) if n.notification_id > after_id]
        return sorted(rows, key=lambda n: n.notification_id)[:limit]

    def latest_id(self, employee_id: int) -> int:
        return max((n.notification_id for n in self.for_employee(employee_id)), default=0)

    def count_unread(self, employee_id: int) -> int:
        return sum(1 for n in self.for_employee(employee_id) if not n.is_read)

    def mark_read(self, employee_id: int, notification_id: int) -> bool:
        n = self.items.get(notification_id)
        if not n or n.employee_id != employee_id:
            return False
        self.items[notification_id] = replace(n, is_read=True)
        return True

    def mark_all_read(self, employee_id: int) -> int:
        count = 0
        for n in self.for_employee(employee_id):
            if not n.is_read:
                self.items[n.notification_id] = replace(n, is_read=True)
                count += 1
        return count


class InMemoryPayroll:
    def __init__(self, employees: InMemoryEmployees):
        self.structures: dict[int, SalaryStructure] = {}
        self.payslips: dict[int, Payslip] = {}
        self._employees = employees

    def get_salary_structure(self, employee_id: int):
        return self.structures.get(employee_id)

    def upsert_salary_structure(self, *, employee_id, basic_salary, allowances, effective_from) -> None:
        self.structures[employee_id] = SalaryStructure(employee_id, Decimal(basic_salary), Decimal(allowances), effective_from)

    def exists_payslip(self, *, employee_id, year, month) -> bool:
        return any(
            p.employee_id == employee_id and p.year == year and p.month == month for p in self.payslips.values()
        )

    def create_payslip(self, *, employee_id, year, month, figures: PayslipFigures, generated_by) -> int:
        if self.exists_payslip(employee_id=employee_id, year=year, month=month):
            raise ConflictError("Payslip already exists for this period")
        payslip_id = max(self.payslips, default=0) + 1
        e = self._employees.get_by_id(employee_id)
        self.payslips[payslip_id] = Payslip(
            payslip_id=payslip_id,
            employee_id=employee_id,
            month=month,
            year=year,
            figures=figures,
            generated_by=generated_by,
            employee_name=e.full_name if e else None,
            employee_code=e.employee_code if e else None,
        )
        return payslip_id

    def get_payslip(self, payslip_id: int):
        return self.payslips.get(payslip_id)

    def list_payslips(self, *, employee_id=None, year=None, month=None):
        return [
            p
            for p in self.payslips.values()
            if (employee_id is None or p.employee_id == employee_id)
            and (year is None or p.year == year)
            and (month is None or p.month == month)
        ]

    def delete_payslip(self, payslip_id: int) -> bool:
        return self.payslips.pop(payslip_id, None) is not None


class InMemoryLeads:
    def __init__(self):
        self.items: dict[int, Lead] = {}

    def get_by_id(self, lead_id: int):
        return self.items.get(lead_id)

    def list(self, *, visible_to=None, status=None, assigned_to=None):
        out = []
        for lead in self.items.values():
            if visible_to is not None and visible_to not in (lead.created_by, lead.assigned_to):
                continue
            if status is not None and lead.status != status:
                continue
            if assigned_to is not None and lead.assigned_to != assigned_to:
                continue
            out.append(lead)
        return out

    def create(self, *, name, company, email, phone, source, assigned_to, created_by, notes) -> int:
        lead_id = max(self.items, default=0) + 1
        self.items[lead_id] = Lead(lead_id, name, company, email, phone, LeadStatus.NEW, source, assigned_to, created_by, notes)
        return lead_id

    def update(self, lead_id: int, fields: dict[str, Any]) -> bool:
        lead = self.items.get(lead_id)
        if not lead:
            return False
        self.items[lead_id] = replace(lead, **fields)
        return True


class InMemoryAudit:
    def __init__(self):
        self.items: list[AuditLog] = []

    def create(self, *, action, entity_type, entity_id, actor_id, actor_role, summary, meta, ip_address) -> int:
        audit_id = len(self.items) + 1
        self.items.append(
            AuditLog(audit_id, action, entity_type, entity_id, actor_id, actor_role, summary, dict(meta or {}), ip_address)
        )
        return audit_id

    def list(self, *, entity_type=None, entity_id=None, actor_id=None, limit=200):
        rows = [
            a
            for a in self.items
            if (entity_type is None or a.entity_type == entity_type)
            and (entity_id is None or a.entity_id == entity_id)
            and (actor_id is None or a.actor_id == actor_id)
        ]
        return list(reversed(rows))[:limit]

    def actions(self) -> list[str]:
        return [a.action for a in self.items]


@dataclass
class World:
    """Repositories plus a seeded company: two departments, day and night shifts."""

    repos: Repositories
    day_shift: Shift
    night_shift: Shift
    engineering: Department
    sales: Department
    employees: dict[str, Employee] = field(default_factory=dict)


DAY_SHIFT = Shift(
    shift_id=1,
    shift_name="Day",
    start_time=datetime.strptime("09:00", "%H:%M").time(),
    end_time=datetime.strptime("18:00", "%H:%M").time(),
    grace_period_minutes=15,
    break_minutes=60,
    full_day_hours=8,
    half_day_hours=4,
)
NIGHT_SHIFT = Shift(
    shift_id=2,
    shift_name="Night",
    start_time=datetime.strptime("22:00", "%H:%M").time(),
    end_time=datetime.strptime("06:00", "%H:%M").time(),
    grace_period_minutes=10,
    break_minutes=30,
    full_day_hours=7,
    half_day_hours=3.5,
)


def make_world() -> World:
    engineering = Department(1, "Engineering")
    sales = Department(2, "Sales")
    departments = InMemoryDepartments([engineering, sales])
    employees = InMemoryEmployees(departments)
    shifts = InMemoryShifts([DAY_SHIFT, NIGHT_SHIFT])
    repos = Repositories(
        employees=employees,
        departments=departments,
        shifts=shifts,
        schedules=InMemorySchedules(),
        attendance=InMemoryAttendance(employees, shifts),
        corrections=InMemoryCorrections(employees, shifts),
        leave=InMemoryLeave(employees),
        calendar=InMemoryCalendar(),
        notifications=InMemoryNotifications(),
        payroll=InMemoryPayroll(employees),
        leads=InMemoryLeads(),
        audit=InMemoryAudit(),
    )
    world = World(repos=repos, day_shift=DAY_SHIFT, night_shift=NIGHT_SHIFT, engineering=engineering, sales=sales)

    def person(key, employee_id, name, role, dept, shift_id):
        world.employees[key] = employees.add(
            Employee(
                employee_id=employee_id,
                employee_code=f"EMP{employee_id:03d}",
                full_name=name,
                email=f"{key}@example.com",
                password_hash="",
                role=role,
                dept_id=dept.dept_id,
                shift_id=shift_id,
                date_of_joining=date(2024, 1, 1),
            )
        )

    person("admin", 1, "Asha Admin", Role.SUPER_ADMIN, engineering, DAY_SHIFT.shift_id)
    person("hr", 2, "Hari HR", Role.HR_ADMIN, engineering, DAY_SHIFT.shift_id)
    person("manager", 3, "Mina Manager", Role.HR_MANAGER, engineering, DAY_SHIFT.shift_id)
    person("dev", 4, "Dev Patel", Role.EMPLOYEE, engineering, DAY_SHIFT.shift_id)
    person("seller", 5, "Sam Seller", Role.EMPLOYEE, sales, DAY_SHIFT.shift_id)
    person("night", 6, "Nia Night", Role.EMPLOYEE, engineering, NIGHT_SHIFT.shift_id)
    return world


def make_settings(**overrides) -> Settings:
    values = dict(
        SECRET_KEY="test-secret",
        JWT_SECRET="test-jwt-secret",
        COMPANY_TIMEZONE="Asia/Kolkata",
        TESTING=True,
        SSE_MAX_SECONDS=0,
    )
    values.update(overrides)
    return Settings(**values)


def make_container(world: World, clock: CompanyClock, **settings_overrides):
    return build_services(
        world.repos,
        make_settings(**settings_overrides),
        clock=clock,
        stream_sleep=lambda _seconds: None,
    )

