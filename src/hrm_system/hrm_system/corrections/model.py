from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import CorrectionIssue, RequestStatus


@dataclass(frozen=True)
class CorrectionRequest:
    """Employee request to fix the punches of one attendance record.

    Requested times are naive UTC, like the record they replace.
    """

    request_id: int
    employee_id: int
    attendance_id: Optional[int]
    work_date: date
    issue_type: CorrectionIssue
    requested_clock_in: Optional[datetime]
    requested_clock_out: Optional[datetime]
    reason: Optional[str]
    status: RequestStatus
    created_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    admin_note: Optional[str] = None
    employee_name: Optional[str] = None


@dataclass(frozen=True)
class ScheduleChangeRequest:
    request_id: int
    employee_id: int
    work_date: date
    requested_shift_id: int
    reason: Optional[str]
    status: RequestStatus
    created_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    admin_note: Optional[str] = None
    employee_name: Optional[str] = None
    shift_name: Optional[str] = None
