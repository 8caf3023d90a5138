from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Any, Optional

from ..audit.service import AuditService
from ..common.datetime_utils import CompanyClock
from ..common.ip_lookup import IpLookupClient
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceState, AttendanceStatus, WorkMode
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import Permission, Role, has_permission
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..schedules.service import ShiftResolver
from ..shifts.model import Shift
from .calculation import (
    DEFAULT_SHIFT,
    belongs_to_previous_day,
    break_minutes,
    early_exit_minutes,
    late_status,
    overtime_minutes,
    shift_window,
    worked_minutes,
)
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, BreakSession
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodayStatus:
    state: AttendanceState
    work_date: date
    shift: Optional[Shift]
    record: Optional[AttendanceRecord]

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "work_date": self.work_date,
            "shift": {
                "shift_id": self.shift.shift_id,
                "shift_name": self.shift.shift_name,
                "start_time": self.shift.start_time,
                "end_time": self.shift.end_time,
            }
            if self.shift
            else None,
            "record": self.record.to_dict() if self.record else None,
        }


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        shift_resolver: ShiftResolver,
        clock: CompanyClock,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        ip_lookup: IpLookupClient | None = None,
        audit: AuditService | None = None,
        default_shift: Shift = DEFAULT_SHIFT,
    ):
        self._attendance = attendance
        self._employees = employees
        self._resolver = shift_resolver
        self._clock = clock
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._ip_lookup = ip_lookup
        self._audit = audit
        self._default_shift = default_shift

    def _employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            raise NotFoundError("Employee not found")
        return employee

    def effective_shift(self, employee: Employee, work_date: date) -> Shift:
        shift = self._resolver.resolve(
            employee_id=employee.employee_id,
            work_date=work_date,
            fallback_shift_id=employee.shift_id,
        )
        return shift or self._default_shift

    def _local(self, instant: datetime) -> datetime:
        return self._clock.local(instant).replace(tzinfo=None)

    def resolve_work_date(self, employee: Employee, local_now: datetime) -> tuple[date, Shift]:
        """Work date a punch at ``local_now`` belongs to, and that day's shift."""

        today = local_now.date()
        yesterday = today - timedelta(days=1)
        previous = self.effective_shift(employee, yesterday)
        if belongs_to_previous_day(previous, local_now):
            return yesterday, previous
        return today, self.effective_shift(employee, today)

    def _open_record(self, employee_id: int, local_today: date) -> Optional[AttendanceRecord]:
        for day in (local_today, local_today - timedelta(days=1)):
            rec = self._attendance.get_for_employee_and_date(employee_id, day)
            if rec and rec.clock_in and not rec.clock_out and rec.status == AttendanceStatus.INCOMPLETE:
                return rec
        return None

    def _require_open_record(self, employee_id: int, now: datetime) -> AttendanceRecord:
        local_today = self._local(now).date()
        rec = self._open_record(employee_id, local_today)
        if rec:
            return rec
        today = self._attendance.get_for_employee_and_date(employee_id, local_today)
        if today and today.clock_out:
            raise ConflictError("You have already clocked out today")
        raise ValidationError("You have not clocked in yet")

    def clock_in(
        self,
        employee_id: int,
        *,
        work_mode: WorkMode = WorkMode.OFFICE,
        ip_address: Optional[str] = None,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or self._clock.now()
        employee = self._employee(employee_id)
        local_now = self._local(now)
        work_date, shift = self.resolve_work_date(employee, local_now)

        if self._attendance.get_for_employee_and_date(employee.employee_id, work_date):
            raise ConflictError(f"Attendance already recorded for {work_date.isoformat()}")

        window = shift_window(shift, work_date)
        strategy = self._factory.for_clock_in(at=local_now, window=window)
        decision = strategy.decide_clock_in(at=local_now, window=window)

        location = None
        if ip_address:
            found = self._ip_lookup.lookup(ip_address) if self._ip_lookup else None
            location = found.to_dict() if found else {"ip": ip_address}

        attendance_id = self._attendance.create_clock_in(
            employee_id=employee.employee_id,
            work_date=work_date,
            shift_id=shift.shift_id or None,
            clock_in=now,
            is_late=decision.is_late,
            late_minutes=decision.late_minutes,
            work_mode=work_mode,
            location=location,
            remarks=(remarks or "").strip() or decision.note,
        )
        logger.info(
            "Employee %s clocked in for %s (late=%s, %s min)",
            employee.employee_id,
            work_date,
            decision.is_late,
            decision.late_minutes,
        )
        return self._attendance.get_by_id(attendance_id)

    def clock_out(self, employee_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock.now()
        employee = self._employee(employee_id)
        record = self._require_open_record(employee.employee_id, now)

        if record.on_break:
            raise ValidationError("End your break before clocking out")
        if now < record.clock_in:
            raise ValidationError("Clock-out cannot be before clock-in")

        shift = self.effective_shift(employee, record.work_date)
        window = shift_window(shift, record.work_date)
        local_out = self._local(now)
        strategy = self._factory.for_clock_out(at=local_out, window=window)
        decision = strategy.decide_clock_out(at=local_out, window=window)

        worked = worked_minutes(record.clock_in, now, record.breaks)
        updated = replace(
            record,
            clock_out=now,
            total_break_minutes=break_minutes(record.breaks),
            worked_minutes=worked,
            overtime_minutes=overtime_minutes(worked, shift.full_day_hours),
            is_early_departure=decision.is_early_departure,
            early_exit_minutes=decision.early_exit_minutes,
            remarks=record.remarks or decision.note,
        )
        self._attendance.save(updated)
        logger.info("Employee %s clocked out for %s (%s min worked)", employee.employee_id, record.work_date, worked)
        return updated

    def start_break(self, employee_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock.now()
        record = self._require_open_record(self._employee(employee_id).employee_id, now)
        if record.on_break:
            raise ConflictError("A break is already in progress")

        updated = replace(record, breaks=record.breaks + (BreakSession(break_in=now),))
        self._attendance.save(updated)
        return updated

    def end_break(self, employee_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock.now()
        record = self._require_open_record(self._employee(employee_id).employee_id, now)
        if not record.on_break:
            raise ValidationError("No break in progress")

        breaks = tuple(replace(b, break_out=now) if b.is_open else b for b in record.breaks)
        updated = replace(record, breaks=breaks, total_break_minutes=break_minutes(breaks))
        self._attendance.save(updated)
        return updated

    def today_status(self, employee_id: int, *, now: Optional[datetime] = None) -> TodayStatus:
        now = now or self._clock.now()
        employee = self._employee(employee_id)
        local_now = self._local(now)

        record = self._open_record(employee.employee_id, local_now.date())
        if record is None:
            work_date, _ = self.resolve_work_date(employee, local_now)
            record = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        else:
            work_date = record.work_date

        return TodayStatus(
            state=record.state if record else AttendanceState.NOT_CLOCKED_IN,
            work_date=work_date,
            shift=self.effective_shift(employee, work_date),
            record=record,
        )

    def history(self, employee_id: int, *, start: Optional[date] = None, end: Optional[date] = None):
        end = end or self._clock.today()
        start = start or end - timedelta(days=DEFAULT_HISTORY_LIMIT - 1)
        if end < start:
            raise ValidationError("End date is before start date")
        return self._attendance.list_for_employee(int(employee_id), start=start, end=end)

    def get(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def list_records(
        self,
        *,
        current_role: Role,
        start: date,
        end: date,
        dept_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        work_mode: Optional[WorkMode] = None,
        flagged_only: bool = False,
    ):
        if not has_permission(current_role, Permission.ATTENDANCE_VIEW_ALL):
            raise AuthorizationError("You do not have permission")
        if end < start:
            raise ValidationError("End date is before start date")
        return self._attendance.list_rows(
            start=start,
            end=end,
            dept_id=dept_id,
            employee_id=employee_id,
            status=status,
            work_mode=work_mode,
            flagged_only=flagged_only,
        )

    def recompute(
        self,
        record: AttendanceRecord,
        *,
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
    ) -> AttendanceRecord:
        """Record with new punches and every derived minute count refreshed."""

        if clock_in and clock_out and clock_out < clock_in:
            raise ValidationError("Clock-out cannot be before clock-in")

        employee = self._employees.get_by_id(record.employee_id)
        if employee:
            shift = self.effective_shift(employee, record.work_date)
        else:
            shift = self._default_shift
        window = shift_window(shift, record.work_date)

        breaks = record.breaks
        if clock_in and clock_out:
            breaks = tuple(b for b in breaks if b.break_out and clock_in <= b.break_in and b.break_out <= clock_out)

        is_late, late = late_status(self._local(clock_in), window) if clock_in else (False, 0)
        early = early_exit_minutes(self._local(clock_out), window) if clock_out else 0
        worked = worked_minutes(clock_in, clock_out, breaks)
        return replace(
            record,
            clock_in=clock_in,
            clock_out=clock_out,
            breaks=breaks,
            total_break_minutes=break_minutes(breaks),
            worked_minutes=worked,
            overtime_minutes=overtime_minutes(worked, shift.full_day_hours),
            is_late=is_late,
            late_minutes=late,
            is_early_departure=early > 0,
            early_exit_minutes=early,
        )

    def admin_update(
        self,
        *,
        current_role: Role,
        actor_id: int,
        attendance_id: int,
        fields: dict[str, Any],
    ) -> AttendanceRecord:
        if not has_permission(current_role, Permission.ATTENDANCE_EDIT):
            raise AuthorizationError("You do not have permission")

        record = self.get(attendance_id)
        clock_in = fields["clock_in"] if "clock_in" in fields else record.clock_in
        clock_out = fields["clock_out"] if "clock_out" in fields else record.clock_out
        updated = self.recompute(record, clock_in=clock_in, clock_out=clock_out)

        status = fields.get("status")
        if status is not None:
            if not isinstance(status, AttendanceStatus):
                raise ValidationError("Status is invalid")
            updated = replace(updated, status=status, status_reason=fields.get("status_reason") or "Edited by admin")
        if fields.get("work_mode") is not None:
            updated = replace(updated, work_mode=fields["work_mode"])
        if "remarks" in fields:
            updated = replace(updated, remarks=fields["remarks"])

        self._attendance.save(updated)
        if self._audit:
            self._audit.log(
                action="attendance.update",
                entity_type="attendance",
                entity_id=record.attendance_id,
                actor_id=actor_id,
                actor_role=current_role,
                summary=f"Edited attendance of employee {record.employee_id} on {record.work_date}",
                meta={k: (v.value if hasattr(v, "value") else v) for k, v in fields.items()},
            )
        return updated

    def flag(self, *, current_role: Role, actor_id: int, attendance_id: int, reason: str) -> AttendanceRecord:
        if not has_permission(current_role, Permission.ATTENDANCE_FLAG):
            raise AuthorizationError("You do not have permission")

        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("Flag reason is required")

        record = self.get(attendance_id)
        updated = replace(record, flagged_reason=reason, flagged_by=int(actor_id), flagged_at=self._clock.now())
        self._attendance.save(updated)
        if self._audit:
            self._audit.log(
                action="attendance.flag",
                entity_type="attendance",
                entity_id=record.attendance_id,
                actor_id=actor_id,
                actor_role=current_role,
                summary=reason,
            )
        return updated
