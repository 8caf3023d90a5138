from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CorrectionIssue, RequestStatus
from .model import CorrectionRequest, ScheduleChangeRequest


class CorrectionRepository(Protocol):
    # Attendance corrections
    def create(
        self,
        *,
        employee_id: int,
        attendance_id: Optional[int],
        work_date: date,
        issue_type: CorrectionIssue,
        requested_clock_in: Optional[datetime],
        requested_clock_out: Optional[datetime],
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def list(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        raise NotImplementedError

    def get_pending_for_attendance(self, attendance_id: int) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def update_pending(
        self,
        request_id: int,
        *,
        requested_clock_in: Optional[datetime],
        requested_clock_out: Optional[datetime],
        reason: Optional[str],
    ) -> bool:
        """Replace the requested punches of a pending request; returns False otherwise."""

        raise NotImplementedError

    def count_pending(self) -> int:
        raise NotImplementedError

    def decide(self, *, request_id: int, status: RequestStatus, decided_by: int, admin_note: Optional[str] = None) -> bool:
        """Only a pending request changes; returns False otherwise."""

        raise NotImplementedError

    # Schedule change requests
    def create_schedule_change(
        self,
        *,
        employee_id: int,
        work_date: date,
        requested_shift_id: int,
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def get_schedule_change(self, request_id: int) -> Optional[ScheduleChangeRequest]:
        raise NotImplementedError

    def list_schedule_changes(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[ScheduleChangeRequest]:
        raise NotImplementedError

    def decide_schedule_change(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        decided_by: int,
        admin_note: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError
