from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status stored in ``attendance_records.status``.

    ``incomplete`` is the working state of a record until the finalization
    job settles it; ``pending_correction`` waits for an approved correction.
    """

    PRESENT = "present"
    ABSENT = "absent"
    LEAVE = "leave"
    HALF_DAY = "half_day"
    HOLIDAY = "holiday"
    INCOMPLETE = "incomplete"
    PENDING_CORRECTION = "pending_correction"


class WorkMode(str, Enum):
    OFFICE = "office"
    WFH = "wfh"
    HYBRID = "hybrid"
    FIELD = "field"


class HalfDayType(str, Enum):
    FIRST_HALF = "first_half"
    SECOND_HALF = "second_half"
    FULL_DAY = "full_day"


class AttendanceState(str, Enum):
    """Live state of an employee's day, derived from the record."""

    NOT_CLOCKED_IN = "not_clocked_in"
    WORKING = "working"
    ON_BREAK = "on_break"
    CLOCKED_OUT = "clocked_out"


class RequestStatus(str, Enum):
    """Approval workflow status (corrections, schedule changes)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class CorrectionIssue(str, Enum):
    MISSED_PUNCH = "missed_punch"
    WRONG_TIME = "wrong_time"
    OTHER = "other"


class HolidayType(str, Enum):
    ONE_TIME = "ONE_TIME"
    RECURRING = "RECURRING"


class DayType(str, Enum):
    """Calendar classification of a date, highest priority first."""

    WEEKEND = "WEEKEND"
    HOLIDAY = "HOLIDAY"
    LEAVE = "LEAVE"
    WORKING_DAY = "WORKING_DAY"


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    WON = "won"
    LOST = "lost"


class PayslipStatus(str, Enum):
    GENERATED = "generated"
    PAID = "paid"


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
