"""End-of-day settlement of attendance records.

A record stays ``incomplete`` while the employee may still punch. Once the
shift is over (plus a grace period) the finalizer decides the final status.
Only ``incomplete`` or missing records are touched, so running it twice for
the same date is harmless.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import CompanyClock
from ..company_calendar.service import CalendarService
from ..core.constants import FINALIZATION_GRACE_MINUTES
from ..core.enums import AttendanceStatus, NotificationType
from ..corrections.service import CorrectionService
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..leave.service import LeaveService
from ..notifications.service import NotificationService
from .calculation import settle_worked_day, shift_window, worked_minutes
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .service import AttendanceService

logger = logging.getLogger(__name__)


@dataclass
class FinalizationResult:
    work_date: date
    skipped_reason: Optional[str] = None
    processed: int = 0
    waiting: int = 0
    present: int = 0
    half_day: int = 0
    absent: int = 0
    leave: int = 0
    pending_correction: int = 0
    unchanged: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "work_date": self.work_date,
            "skipped_reason": self.skipped_reason,
            "processed": self.processed,
            "waiting": self.waiting,
            "present": self.present,
            "half_day": self.half_day,
            "absent": self.absent,
            "leave": self.leave,
            "pending_correction": self.pending_correction,
            "unchanged": self.unchanged,
            "errors": list(self.errors),
        }


class AttendanceFinalizer:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        attendance_service: AttendanceService,
        calendar: CalendarService,
        leave: LeaveService,
        corrections: CorrectionService,
        notifications: NotificationService,
        clock: CompanyClock,
        *,
        grace_minutes: int = FINALIZATION_GRACE_MINUTES,
    ):
        self._attendance = attendance
        self._employees = employees
        self._attendance_service = attendance_service
        self._calendar = calendar
        self._leave = leave
        self._corrections = corrections
        self._notifications = notifications
        self._clock = clock
        self._grace = timedelta(minutes=int(grace_minutes))

    def finalize_date(self, work_date: date, *, now: Optional[datetime] = None) -> FinalizationResult:
        now = now or self._clock.now()
        local_now = self._clock.local(now).replace(tzinfo=None)
        result = FinalizationResult(work_date=work_date)

        holiday = self._calendar.holiday_on(work_date)
        if holiday:
            result.skipped_reason = f"Holiday: {holiday.name}"
            return result
        if not self._calendar.is_working_day(work_date):
            result.skipped_reason = "Non-working day"
            return result

        for employee in self._employees.list(active=True):
            if employee.date_of_joining and employee.date_of_joining > work_date:
                continue
            try:
                self._finalize_employee(employee, work_date, local_now, result)
            except Exception as e:
                # One bad row must not stop the rest of the day.
                logger.exception("Finalization failed for employee %s on %s", employee.employee_id, work_date)
                result.errors.append(f"{employee.employee_id}: {e}")

        logger.info(
            "Finalized %s: processed=%s waiting=%s present=%s half_day=%s absent=%s leave=%s pending=%s",
            work_date,
            result.processed,
            result.waiting,
            result.present,
            result.half_day,
            result.absent,
            result.leave,
            result.pending_correction,
        )
        return result

    def _finalize_employee(self, employee: Employee, work_date: date, local_now: datetime, result: FinalizationResult) -> None:
        shift = self._attendance_service.effective_shift(employee, work_date)
        window = shift_window(shift, work_date)
        if local_now < window.end + self._grace:
            result.waiting += 1
            return

        record = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        if record is None:
            self._settle_missing(employee, work_date, shift.shift_id or None, result)
            return
        if record.status != AttendanceStatus.INCOMPLETE:
            result.unchanged += 1
            return

        result.processed += 1
        if record.clock_in and not record.clock_out:
            self._settle_missed_clock_out(record, result)
        elif record.clock_out and not record.clock_in:
            if self._attendance.settle(
                attendance_id=record.attendance_id,
                status=AttendanceStatus.ABSENT,
                reason="Clock-out without clock-in",
                clear_clock_out=True,
            ):
                result.absent += 1
        else:
            worked = record.worked_minutes or worked_minutes(record.clock_in, record.clock_out, record.breaks)
            settlement = settle_worked_day(
                worked,
                shift,
                local_clock_in=self._clock.local(record.clock_in).replace(tzinfo=None),
                window=window,
            )
            if self._attendance.settle(
                attendance_id=record.attendance_id,
                status=settlement.status,
                reason=settlement.reason,
                half_day_type=settlement.half_day_type,
            ):
                if settlement.status == AttendanceStatus.PRESENT:
                    result.present += 1
                elif settlement.status == AttendanceStatus.HALF_DAY:
                    result.half_day += 1
                else:
                    result.absent += 1

    def _settle_missing(self, employee: Employee, work_date: date, shift_id: Optional[int], result: FinalizationResult) -> None:
        leave = self._leave.leave_on(employee_id=employee.employee_id, day=work_date)
        if leave:
            if self._attendance.insert_final(
                employee_id=employee.employee_id,
                work_date=work_date,
                shift_id=shift_id,
                status=AttendanceStatus.LEAVE,
                reason=f"On approved leave ({leave.leave_type})",
            ):
                result.processed += 1
                result.leave += 1
            return

        if self._attendance.insert_final(
            employee_id=employee.employee_id,
            work_date=work_date,
            shift_id=shift_id,
            status=AttendanceStatus.ABSENT,
            reason="Auto marked absent (no clock-in)",
        ):
            result.processed += 1
            result.absent += 1
            self._notifications.notify(
                employee.employee_id,
                "Marked absent",
                f"No clock-in was recorded for {work_date.isoformat()}; you have been marked absent.",
                type=NotificationType.WARNING,
                category="attendance",
                data={"work_date": work_date.isoformat()},
            )

    def _settle_missed_clock_out(self, record: AttendanceRecord, result: FinalizationResult) -> None:
        if not self._attendance.settle(
            attendance_id=record.attendance_id,
            status=AttendanceStatus.PENDING_CORRECTION,
            reason="Missing clock-out",
        ):
            return
        result.pending_correction += 1
        request_id = self._corrections.request_missed_punch(record)
        self._notifications.notify(
            record.employee_id,
            "Missing clock-out",
            f"You did not clock out on {record.work_date.isoformat()}. Submit a correction with your clock-out time.",
            type=NotificationType.WARNING,
            category="attendance",
            data={"attendance_id": record.attendance_id, "request_id": request_id},
        )
