from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from ..audit.service import AuditService
from ..common.datetime_utils import CompanyClock, iter_dates, month_bounds
from ..common.validators import optional_text, require_non_empty
from ..company_calendar.service import CalendarService
from ..core.enums import HalfDayType, LeaveStatus, NotificationType
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import Permission, Role, has_permission
from ..employees.repository import EmployeeRepository
from ..notifications.service import NotificationService
from .calculation import LeaveDuration, calculate_duration
from .model import LeaveBalance, LeaveRequest, LeaveType
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

_ACTIVE = (LeaveStatus.PENDING, LeaveStatus.APPROVED)


def _decimal(value: Any, field_name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")


class LeaveService:
    def __init__(
        self,
        leave: LeaveRepository,
        employees: EmployeeRepository,
        calendar: CalendarService,
        notifications: NotificationService,
        audit: AuditService,
        clock: CompanyClock,
        *,
        exclude_weekends: bool = True,
        exclude_holidays: bool = True,
    ):
        self._leave = leave
        self._employees = employees
        self._calendar = calendar
        self._notifications = notifications
        self._audit = audit
        self._clock = clock
        self._exclude_weekends = bool(exclude_weekends)
        self._exclude_holidays = bool(exclude_holidays)

    # -------- Leave types --------
    def list_types(self, *, active_only: bool = True):
        return self._leave.list_types(active_only=active_only)

    def create_type(self, *, current_role: Role, data: dict) -> LeaveType:
        if not has_permission(current_role, Permission.LEAVE_CONFIGURE):
            raise AuthorizationError("You do not have permission")

        code = require_non_empty(data.get("code"), "Code").upper()
        if self._leave.get_type(code):
            raise ConflictError(f"Leave type {code} already exists")

        quota = _decimal(data.get("annual_quota", 0), "annual_quota")
        max_cf = _decimal(data.get("max_carry_forward", 0), "max_carry_forward")
        if quota < 0 or max_cf < 0:
            raise ValidationError("Quotas cannot be negative")

        leave_type = LeaveType(
            code=code,
            name=require_non_empty(data.get("name"), "Name"),
            annual_quota=quota,
            is_paid=bool(data.get("is_paid", True)),
            carry_forward=bool(data.get("carry_forward", False)),
            max_carry_forward=max_cf,
        )
        self._leave.create_type(leave_type)
        return leave_type

    def _type(self, code: str) -> LeaveType:
        leave_type = self._leave.get_type(str(code or "").upper())
        if not leave_type or not leave_type.is_active:
            raise ValidationError("Leave type is invalid")
        return leave_type

    # -------- Balances --------
    def _ensure_defaults(self, employee_id: int, year: int) -> int:
        created = 0
        for t in self._leave.list_types(active_only=True):
            if self._leave.ensure_balance(employee_id=employee_id, leave_type=t.code, year=year, allocated=t.annual_quota):
                created += 1
        return created

    def balances(self, employee_id: int, *, year: Optional[int] = None) -> list[LeaveBalance]:
        year = year or self._clock.today().year
        rows = list(self._leave.list_balances(year=year, employee_id=int(employee_id)))
        if not rows and self._ensure_defaults(int(employee_id), year):
            rows = list(self._leave.list_balances(year=year, employee_id=int(employee_id)))
        return rows

    def _balance_for(self, employee_id: int, leave_type: LeaveType, year: int) -> LeaveBalance:
        bal = self._leave.get_balance(employee_id=employee_id, leave_type=leave_type.code, year=year)
        if bal is None:
            self._leave.ensure_balance(employee_id=employee_id, leave_type=leave_type.code, year=year, allocated=leave_type.annual_quota)
            bal = self._leave.get_balance(employee_id=employee_id, leave_type=leave_type.code, year=year)
        return bal

    def assign_default_quotas(
        self,
        *,
        current_role: Role,
        actor_id: int,
        year: Optional[int] = None,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> dict:
        if not has_permission(current_role, Permission.LEAVE_CONFIGURE):
            raise AuthorizationError("You do not have permission")

        year = year or self._clock.today().year
        if employee_ids is None:
            employee_ids = [e.employee_id for e in self._employees.list(active=True)]

        employees = 0
        created = 0
        for employee_id in employee_ids:
            employees += 1
            created += self._ensure_defaults(int(employee_id), year)

        if created:
            self._audit.log(
                action="leave.assign_defaults",
                entity_type="leave_balance",
                actor_id=actor_id,
                actor_role=current_role,
                summary=f"Assigned {created} default balances for {year}",
            )
        return {"year": year, "employees": employees, "created": created}

    def adjust(self, *, current_role: Role, actor_id: int, balance_id: int, delta: Any, reason: str) -> LeaveBalance:
        if not has_permission(current_role, Permission.LEAVE_CONFIGURE):
            raise AuthorizationError("You do not have permission")

        reason = require_non_empty(reason, "Reason")
        delta = _decimal(delta, "delta")
        if delta == 0:
            raise ValidationError("Adjustment cannot be zero")

        bal = self._leave.get_balance_by_id(int(balance_id))
        if not bal:
            raise NotFoundError("Leave balance not found")
        if bal.allocated + delta < 0:
            raise ValidationError("Allocation cannot become negative")

        self._leave.change_balance(bal.balance_id, allocated=delta)
        self._audit.log(
            action="leave.adjust",
            entity_type="leave_balance",
            entity_id=bal.balance_id,
            actor_id=actor_id,
            actor_role=current_role,
            summary=reason,
            meta={"employee_id": bal.employee_id, "leave_type": bal.leave_type, "year": bal.year, "delta": delta},
        )
        return self._leave.get_balance_by_id(bal.balance_id)

    def rollover(self, *, current_role: Role, actor_id: Optional[int], from_year: int) -> dict:
        """Open next-year balances; carry-forward types keep part of what remains."""

        if not has_permission(current_role, Permission.LEAVE_CONFIGURE):
            raise AuthorizationError("You do not have permission")

        to_year = int(from_year) + 1
        types = {t.code: t for t in self._leave.list_types(active_only=True)}
        remaining = {(b.employee_id, b.leave_type): b.remaining for b in self._leave.list_balances(year=int(from_year))}

        created = 0
        carried = Decimal("0")
        for employee in self._employees.list(active=True):
            for code, t in types.items():
                carry = Decimal("0")
                if t.carry_forward:
                    left = remaining.get((employee.employee_id, code), Decimal("0"))
                    carry = max(Decimal("0"), min(left, t.max_carry_forward))
                if self._leave.ensure_balance(
                    employee_id=employee.employee_id,
                    leave_type=code,
                    year=to_year,
                    allocated=t.annual_quota,
                    carried_forward=carry,
                ):
                    created += 1
                    carried += carry

        logger.info("Leave rollover %s -> %s: %s balances created", from_year, to_year, created)
        if created:
            self._audit.log(
                action="leave.rollover",
                entity_type="leave_balance",
                actor_id=actor_id,
                actor_role=current_role,
                summary=f"Rolled leave balances over from {from_year} to {to_year}",
                meta={"created": created, "carried_forward": carried},
            )
        return {"from_year": int(from_year), "to_year": to_year, "created": created, "carried_forward": carried}

    # -------- Requests --------
    def duration(self, start: date, end: date, *, is_half_day: bool = False) -> LeaveDuration:
        return calculate_duration(
            start,
            end,
            is_half_day=is_half_day,
            exclude_weekends=self._exclude_weekends,
            exclude_holidays=self._exclude_holidays,
            calendar=self._calendar,
        )

    def apply(
        self,
        *,
        employee_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        is_half_day: bool = False,
        half_day_period: Optional[HalfDayType] = None,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            raise NotFoundError("Employee not found")
        t = self._type(leave_type)

        duration = self.duration(start_date, end_date, is_half_day=is_half_day)
        days = duration.working_days
        if days <= 0:
            raise ValidationError("The selected dates contain no working days")
        if is_half_day and half_day_period not in (HalfDayType.FIRST_HALF, HalfDayType.SECOND_HALF):
            half_day_period = HalfDayType.FIRST_HALF

        overlapping = self._leave.list_requests(
            employee_id=employee.employee_id,
            statuses=_ACTIVE,
            start=start_date,
            end=end_date,
        )
        if overlapping:
            raise ConflictError("Leave request overlaps an existing request")

        balance = self._balance_for(employee.employee_id, t, start_date.year)
        if t.is_paid and balance.remaining < days:
            raise ValidationError(f"Insufficient {t.name} balance: {balance.remaining} day(s) remaining, {days} requested")

        request_id = self._leave.create_request(
            employee_id=employee.employee_id,
            leave_type=t.code,
            start_date=start_date,
            end_date=end_date,
            days=days,
            is_half_day=is_half_day,
            half_day_period=half_day_period if is_half_day else None,
            reason=optional_text(reason),
        )
        self._leave.change_balance(balance.balance_id, pending=days)
        logger.info("Leave request %s: employee %s %s %s..%s (%s days)", request_id, employee.employee_id, t.code, start_date, end_date, days)
        return self._leave.get_request(request_id)

    def get(self, request_id: int) -> LeaveRequest:
        req = self._leave.get_request(int(request_id))
        if not req:
            raise NotFoundError("Leave request not found")
        return req

    def list_mine(self, employee_id: int, *, status: Optional[LeaveStatus] = None):
        return self._leave.list_requests(employee_id=int(employee_id), statuses=[status] if status else None)

    def list_for_approver(
        self,
        *,
        current_role: Role,
        actor_id: int,
        status: Optional[LeaveStatus] = LeaveStatus.PENDING,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ):
        dept_id = None
        if not has_permission(current_role, Permission.LEAVE_APPROVE_ANY):
            if not has_permission(current_role, Permission.LEAVE_APPROVE_DEPARTMENT):
                raise AuthorizationError("You do not have permission")
            approver = self._employees.get_by_id(int(actor_id))
            if not approver or approver.dept_id is None:
                return []
            dept_id = approver.dept_id
        return self._leave.list_requests(
            dept_id=dept_id,
            statuses=[status] if status else None,
            start=start,
            end=end,
            limit=500,
        )

    def count_pending(self) -> int:
        return self._leave.count_requests(status=LeaveStatus.PENDING)

    def _check_approver(self, current_role: Role, actor_id: int, req: LeaveRequest) -> None:
        if int(actor_id) == req.employee_id:
            raise AuthorizationError("You cannot decide your own leave request")
        if has_permission(current_role, Permission.LEAVE_APPROVE_ANY):
            return
        if has_permission(current_role, Permission.LEAVE_APPROVE_DEPARTMENT):
            approver = self._employees.get_by_id(int(actor_id))
            if approver and approver.dept_id is not None and approver.dept_id == req.dept_id:
                return
            raise AuthorizationError("You can only decide requests from your department")
        raise AuthorizationError("You do not have permission")

    def _balance_of(self, req: LeaveRequest) -> Optional[LeaveBalance]:
        return self._leave.get_balance(employee_id=req.employee_id, leave_type=req.leave_type, year=req.start_date.year)

    def approve(self, *, current_role: Role, actor_id: int, request_id: int, note: Optional[str] = None) -> LeaveRequest:
        req = self.get(request_id)
        self._check_approver(current_role, actor_id, req)
        if req.status != LeaveStatus.PENDING or not self._leave.decide_request(
            request_id=req.request_id,
            status=LeaveStatus.APPROVED,
            expected=LeaveStatus.PENDING,
            decided_by=int(actor_id),
            note=optional_text(note),
        ):
            raise ConflictError("Leave request has already been decided")

        bal = self._balance_of(req)
        if bal:
            self._leave.change_balance(bal.balance_id, used=req.days, pending=-req.days)

        self._notifications.notify(
            req.employee_id,
            "Leave approved",
            f"Your {req.leave_type_name or req.leave_type} from {req.start_date.isoformat()} to {req.end_date.isoformat()} was approved.",
            type=NotificationType.SUCCESS,
            category="leave",
            data={"request_id": req.request_id},
        )
        return self.get(req.request_id)

    def reject(self, *, current_role: Role, actor_id: int, request_id: int, note: Optional[str] = None) -> LeaveRequest:
        req = self.get(request_id)
        self._check_approver(current_role, actor_id, req)
        if req.status != LeaveStatus.PENDING or not self._leave.decide_request(
            request_id=req.request_id,
            status=LeaveStatus.REJECTED,
            expected=LeaveStatus.PENDING,
            decided_by=int(actor_id),
            note=optional_text(note),
        ):
            raise ConflictError("Leave request has already been decided")

        bal = self._balance_of(req)
        if bal:
            self._leave.change_balance(bal.balance_id, pending=-req.days)

        self._notifications.notify(
            req.employee_id,
            "Leave rejected",
            f"Your {req.leave_type_name or req.leave_type} from {req.start_date.isoformat()} to {req.end_date.isoformat()} was rejected."
            + (f" Note: {note.strip()}" if optional_text(note) else ""),
            type=NotificationType.WARNING,
            category="leave",
            data={"request_id": req.request_id},
        )
        return self.get(req.request_id)

    def cancel(self, *, employee_id: int, request_id: int) -> LeaveRequest:
        req = self.get(request_id)
        if req.employee_id != int(employee_id):
            raise NotFoundError("Leave request not found")

        if req.status == LeaveStatus.APPROVED and req.start_date <= self._clock.today():
            raise ValidationError("Leave that has already started cannot be cancelled")
        if req.status not in _ACTIVE or not self._leave.decide_request(
            request_id=req.request_id,
            status=LeaveStatus.CANCELLED,
            expected=req.status,
            decided_by=None,
            note="Cancelled by employee",
        ):
            raise ConflictError("Leave request can no longer be cancelled")

        bal = self._balance_of(req)
        if bal:
            if req.status == LeaveStatus.PENDING:
                self._leave.change_balance(bal.balance_id, pending=-req.days)
            else:
                self._leave.change_balance(bal.balance_id, used=-req.days)
        return self.get(req.request_id)

    # -------- Lookups for attendance, payroll and dashboards --------
    def approved_between(self, start: date, end: date, *, employee_id: Optional[int] = None) -> list[LeaveRequest]:
        return list(
            self._leave.list_requests(
                employee_id=employee_id,
                statuses=[LeaveStatus.APPROVED],
                start=start,
                end=end,
                limit=10000,
            )
        )

    def leave_on(self, *, employee_id: int, day: date) -> Optional[LeaveRequest]:
        for req in self.approved_between(day, day, employee_id=int(employee_id)):
            if req.covers(day):
                return req
        return None

    def is_on_leave(self, *, employee_id: int, day: date) -> bool:
        return self.leave_on(employee_id=employee_id, day=day) is not None

    def leave_dates_in_month(self, *, employee_id: int, year: int, month: int) -> set[date]:
        start, end = month_bounds(year, month)
        dates: set[date] = set()
        for req in self.approved_between(start, end, employee_id=int(employee_id)):
            for day in iter_dates(max(start, req.start_date), min(end, req.end_date)):
                dates.add(day)
        return dates

    def unpaid_days(self, *, employee_id: int, start: date, end: date, working_days: Iterable[date]) -> Decimal:
        """Approved unpaid leave falling on the given working days."""

        working = set(working_days)
        unpaid = {t.code for t in self._leave.list_types(active_only=False) if not t.is_paid}
        total = Decimal("0")
        for req in self.approved_between(start, end, employee_id=int(employee_id)):
            if req.leave_type not in unpaid:
                continue
            if req.is_half_day:
                if req.start_date in working:
                    total += Decimal("0.5")
                continue
            for day in iter_dates(max(start, req.start_date), min(end, req.end_date)):
                if day in working:
                    total += 1
        return total
