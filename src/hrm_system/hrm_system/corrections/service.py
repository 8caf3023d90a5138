from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..common.validators import optional_text
from ..core.enums import AttendanceStatus, CorrectionIssue, NotificationType, RequestStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import Permission, Role, has_permission
from ..notifications.service import NotificationService
from ..schedules.repository import ScheduleRepository
from ..shifts.repository import ShiftRepository
from .model import CorrectionRequest, ScheduleChangeRequest
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)


def _require_approver(current_role: Role) -> None:
    if not has_permission(current_role, Permission.CORRECTION_APPROVE):
        raise AuthorizationError("You do not have permission")


class CorrectionService:
    def __init__(
        self,
        corrections: CorrectionRepository,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
        schedules: ScheduleRepository,
        shifts: ShiftRepository,
        notifications: NotificationService,
    ):
        self._corrections = corrections
        self._attendance = attendance
        self._attendance_service = attendance_service
        self._schedules = schedules
        self._shifts = shifts
        self._notifications = notifications

    # -------- Attendance corrections --------
    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        requested_clock_in: Optional[datetime],
        requested_clock_out: Optional[datetime],
        reason: Optional[str],
        issue_type: CorrectionIssue = CorrectionIssue.WRONG_TIME,
    ) -> int:
        """File a correction, or fill in the open missed clock-out request for that day.

        Finalization opens a ``missed_punch`` request with no clock-out; the
        employee's submission completes that request instead of conflicting
        with it. Any other pending request for the day is a conflict.
        """

        rec = self._attendance.get_for_employee_and_date(int(employee_id), work_date)
        if not rec:
            raise NotFoundError("No attendance record for this date")

        reason = optional_text(reason)
        if not requested_clock_in and not requested_clock_out and not reason:
            raise ValidationError("Provide a new clock-in, clock-out or a reason")
        if requested_clock_in and requested_clock_out and requested_clock_out < requested_clock_in:
            raise ValidationError("Clock-out cannot be before clock-in")

        pending = self._corrections.get_pending_for_attendance(rec.attendance_id)
        if pending is None:
            return self._corrections.create(
                employee_id=int(employee_id),
                attendance_id=rec.attendance_id,
                work_date=work_date,
                issue_type=issue_type,
                requested_clock_in=requested_clock_in,
                requested_clock_out=requested_clock_out,
                reason=reason,
            )

        if pending.issue_type != CorrectionIssue.MISSED_PUNCH or pending.employee_id != int(employee_id):
            raise ConflictError("A correction for this day is already pending")
        if not requested_clock_out:
            raise ValidationError("Provide the missing clock-out time")

        clock_in = requested_clock_in or pending.requested_clock_in or rec.clock_in
        if clock_in and requested_clock_out < clock_in:
            raise ValidationError("Clock-out cannot be before clock-in")
        if not self._corrections.update_pending(
            pending.request_id,
            requested_clock_in=clock_in,
            requested_clock_out=requested_clock_out,
            reason=reason or pending.reason,
        ):
            raise ConflictError("Request has already been decided")
        logger.info("Missed clock-out request %s completed by employee %s", pending.request_id, employee_id)
        return pending.request_id

    def request_missed_punch(self, record: AttendanceRecord) -> Optional[int]:
        """Open a missed clock-out request for ``record`` unless one is pending."""

        if self._corrections.get_pending_for_attendance(record.attendance_id) is not None:
            return None
        return self._corrections.create(
            employee_id=record.employee_id,
            attendance_id=record.attendance_id,
            work_date=record.work_date,
            issue_type=CorrectionIssue.MISSED_PUNCH,
            requested_clock_in=record.clock_in,
            requested_clock_out=None,
            reason="Missing clock-out detected by attendance finalization",
        )

    def get(self, request_id: int) -> CorrectionRequest:
        req = self._corrections.get(int(request_id))
        if not req:
            raise NotFoundError("Request not found")
        return req

    def list_mine(self, *, employee_id: int):
        return self._corrections.list(employee_id=int(employee_id))

    def list(self, *, current_role: Role, status: Optional[RequestStatus] = RequestStatus.PENDING, limit: int = 200):
        _require_approver(current_role)
        return self._corrections.list(status=status, limit=limit)

    def count_pending(self) -> int:
        return self._corrections.count_pending()

    def cancel(self, *, employee_id: int, request_id: int) -> None:
        req = self.get(request_id)
        if req.employee_id != int(employee_id):
            raise NotFoundError("Request not found")
        if req.status != RequestStatus.PENDING or not self._corrections.decide(
            request_id=req.request_id,
            status=RequestStatus.CANCELLED,
            decided_by=int(employee_id),
            admin_note=None,
        ):
            raise ConflictError("Only pending requests can be cancelled")
        logger.info("Correction %s cancelled by employee %s", req.request_id, employee_id)

    def approve(
        self,
        *,
        current_role: Role,
        actor_id: int,
        request_id: int,
        admin_note: str = "",
        clock_out: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Apply a pending correction; ``clock_out`` lets the approver supply a missing punch."""

        _require_approver(current_role)

        req = self.get(request_id)
        if req.status != RequestStatus.PENDING:
            raise ConflictError("Request has already been decided")

        rec = self._attendance.get_by_id(req.attendance_id) if req.attendance_id else None
        rec = rec or self._attendance.get_for_employee_and_date(req.employee_id, req.work_date)
        if not rec:
            raise NotFoundError("Attendance record to correct was not found")

        new_clock_out = clock_out or req.requested_clock_out or rec.clock_out
        if req.issue_type == CorrectionIssue.MISSED_PUNCH and not new_clock_out:
            raise ValidationError("A clock-out time is required to approve a missed punch")

        updated = self._attendance_service.recompute(
            rec,
            clock_in=req.requested_clock_in or rec.clock_in,
            clock_out=new_clock_out,
        )
        if rec.status == AttendanceStatus.PENDING_CORRECTION:
            updated = replace(updated, status=AttendanceStatus.INCOMPLETE, status_reason=None)

        if not self._corrections.decide(
            request_id=req.request_id,
            status=RequestStatus.APPROVED,
            decided_by=int(actor_id),
            admin_note=optional_text(admin_note),
        ):
            raise ConflictError("Request has already been decided")
        self._attendance.save(updated)
        logger.info("Correction %s approved by %s", req.request_id, actor_id)

        self._notifications.notify(
            req.employee_id,
            "Attendance correction approved",
            f"Your correction for {req.work_date.isoformat()} was approved.",
            type=NotificationType.SUCCESS,
            category="attendance",
            data={"request_id": req.request_id},
        )
        return updated

    def reject(self, *, current_role: Role, actor_id: int, request_id: int, admin_note: str = "") -> None:
        _require_approver(current_role)

        req = self.get(request_id)
        if req.status != RequestStatus.PENDING or not self._corrections.decide(
            request_id=req.request_id,
            status=RequestStatus.REJECTED,
            decided_by=int(actor_id),
            admin_note=optional_text(admin_note),
        ):
            raise ConflictError("Request has already been decided")

        self._notifications.notify(
            req.employee_id,
            "Attendance correction rejected",
            f"Your correction for {req.work_date.isoformat()} was rejected."
            + (f" Note: {admin_note.strip()}" if optional_text(admin_note) else ""),
            type=NotificationType.WARNING,
            category="attendance",
            data={"request_id": req.request_id},
        )

    # -------- Schedule change requests --------
    def create_schedule_change(
        self,
        *,
        employee_id: int,
        work_date: date,
        requested_shift_id: int,
        reason: Optional[str],
    ) -> int:
        shift = self._shifts.get_by_id(int(requested_shift_id)) if int(requested_shift_id) > 0 else None
        if not shift or not shift.is_active:
            raise ValidationError("Shift is invalid")

        return self._corrections.create_schedule_change(
            employee_id=int(employee_id),
            work_date=work_date,
            requested_shift_id=shift.shift_id,
            reason=optional_text(reason),
        )

    def list_my_schedule_changes(self, *, employee_id: int):
        return self._corrections.list_schedule_changes(employee_id=int(employee_id))

    def list_schedule_changes(self, *, current_role: Role, status: Optional[RequestStatus] = RequestStatus.PENDING):
        if not has_permission(current_role, Permission.SCHEDULE_MANAGE):
            raise AuthorizationError("You do not have permission")
        return self._corrections.list_schedule_changes(status=status)

    def _pending_schedule_change(self, current_role: Role, request_id: int) -> ScheduleChangeRequest:
        if not has_permission(current_role, Permission.SCHEDULE_MANAGE):
            raise AuthorizationError("You do not have permission")
        req = self._corrections.get_schedule_change(int(request_id))
        if not req:
            raise NotFoundError("Request not found")
        if req.status != RequestStatus.PENDING:
            raise ConflictError("Request has already been decided")
        return req

    def approve_schedule_change(self, *, current_role: Role, actor_id: int, request_id: int, admin_note: str = "") -> int:
        req = self._pending_schedule_change(current_role, request_id)

        if not self._corrections.decide_schedule_change(
            request_id=req.request_id,
            status=RequestStatus.APPROVED,
            decided_by=int(actor_id),
            admin_note=optional_text(admin_note),
        ):
            raise ConflictError("Request has already been decided")
        schedule_id = self._schedules.upsert(
            employee_id=req.employee_id,
            work_date=req.work_date,
            shift_id=req.requested_shift_id,
            note=req.reason,
        )

        self._notifications.notify(
            req.employee_id,
            "Shift change approved",
            f"Your shift on {req.work_date.isoformat()} is now {req.shift_name or req.requested_shift_id}.",
            type=NotificationType.SUCCESS,
            category="schedule",
            data={"request_id": req.request_id},
        )
        return schedule_id

    def reject_schedule_change(self, *, current_role: Role, actor_id: int, request_id: int, admin_note: str = "") -> None:
        req = self._pending_schedule_change(current_role, request_id)

        if not self._corrections.decide_schedule_change(
            request_id=req.request_id,
            status=RequestStatus.REJECTED,
            decided_by=int(actor_id),
            admin_note=optional_text(admin_note),
        ):
            raise ConflictError("Request has already been decided")

        self._notifications.notify(
            req.employee_id,
            "Shift change rejected",
            f"Your shift change for {req.work_date.isoformat()} was rejected.",
            type=NotificationType.WARNING,
            category="schedule",
            data={"request_id": req.request_id},
        )
