"""Read-only aggregates for the admin and employee home screens.

The company "today" views are visible to every employee, so they only expose
names, departments and leave details, never contact data or punch times.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..common.datetime_utils import CompanyClock
from ..company_calendar.service import CalendarService
from ..core.enums import AttendanceState, AttendanceStatus, WorkMode
from ..core.exceptions import AuthorizationError
from ..core.permissions import Permission, Role, has_permission
from ..corrections.service import CorrectionService
from ..employees.repository import EmployeeRepository
from ..leave.service import LeaveService
from ..notifications.service import NotificationService

UPCOMING_HOLIDAY_DAYS = 30


class DashboardService:
    def __init__(
        self,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
        leave: LeaveService,
        corrections: CorrectionService,
        calendar: CalendarService,
        notifications: NotificationService,
        clock: CompanyClock,
    ):
        self._employees = employees
        self._attendance = attendance
        self._attendance_service = attendance_service
        self._leave = leave
        self._corrections = corrections
        self._calendar = calendar
        self._notifications = notifications
        self._clock = clock

    def admin_summary(self, *, current_role: Role, day: Optional[date] = None) -> dict:
        if not has_permission(current_role, Permission.DASHBOARD_ADMIN):
            raise AuthorizationError("You do not have permission")

        day = day or self._clock.today()
        rows = self._attendance.list_rows(start=day, end=day)
        clocked_in = [r for r in rows if r.record.clock_in]

        return {
            "date": day,
            "headcount": len(self._employees.list(active=True)),
            "clocked_in": len(clocked_in),
            "late": sum(1 for r in clocked_in if r.record.is_late),
            "wfh": sum(1 for r in clocked_in if r.record.work_mode == WorkMode.WFH),
            "absent": sum(1 for r in rows if r.record.status == AttendanceStatus.ABSENT),
            "flagged": sum(1 for r in rows if r.record.is_flagged),
            "on_leave": len(self._on_leave(day)),
            "pending_leave_requests": self._leave.count_pending(),
            "pending_corrections": self._corrections.count_pending(),
            "is_working_day": self._calendar.is_working_day(day),
        }

    def employee_summary(self, employee_id: int) -> dict:
        today = self._clock.today()
        return {
            "today": self._attendance_service.today_status(employee_id).to_dict(),
            "leave_balances": [b.to_dict() for b in self._leave.balances(employee_id, year=today.year)],
            "unread_notifications": self._notifications.unread_count(employee_id),
            "upcoming_holidays": self._calendar.holidays_between(
                today, today + timedelta(days=UPCOMING_HOLIDAY_DAYS)
            ),
        }

    def _on_leave(self, day: date):
        return [req for req in self._leave.approved_between(day, day) if req.covers(day)]

    def leave_today(self, *, day: Optional[date] = None) -> list[dict]:
        day = day or self._clock.today()
        return [
            {
                "employee_id": req.employee_id,
                "full_name": req.employee_name,
                "dept_name": req.dept_name,
                "leave_type": req.leave_type_name or req.leave_type,
                "start_date": req.start_date,
                "end_date": req.end_date,
                "days": req.days,
                "is_half_day": req.is_half_day,
                "half_day_period": req.half_day_period.value if req.half_day_period else None,
            }
            for req in self._on_leave(day)
        ]

    def wfh_today(self, *, day: Optional[date] = None) -> list[dict]:
        day = day or self._clock.today()
        rows = self._attendance.list_rows(start=day, end=day, work_mode=WorkMode.WFH)
        return [
            {"employee_id": r.record.employee_id, "full_name": r.full_name, "dept_name": r.dept_name}
            for r in rows
            if r.record.clock_in
        ]

    def status_today(self, *, day: Optional[date] = None) -> dict:
        """Everyone's coarse status for the day plus the counts per status."""

        day = day or self._clock.today()
        records = {r.record.employee_id: r.record for r in self._attendance.list_rows(start=day, end=day)}
        on_leave = {req.employee_id for req in self._on_leave(day)}

        people = []
        counts = {"in_office": 0, "wfh": 0, "on_break": 0, "clocked_out": 0, "on_leave": 0, "not_clocked_in": 0}
        for employee in self._employees.list(active=True):
            record = records.get(employee.employee_id)
            if employee.employee_id in on_leave:
                status = "on_leave"
            elif record is None or not record.clock_in:
                status = "not_clocked_in"
            elif record.state == AttendanceState.ON_BREAK:
                status = "on_break"
            elif record.state == AttendanceState.CLOCKED_OUT:
                status = "clocked_out"
            elif record.work_mode == WorkMode.WFH:
                status = "wfh"
            else:
                status = "in_office"
            counts[status] += 1
            people.append(
                {
                    "employee_id": employee.employee_id,
                    "full_name": employee.full_name,
                    "dept_name": employee.dept_name,
                    "status": status,
                }
            )

        people.sort(key=lambda p: (p["dept_name"] or "", p["full_name"]))
        return {"date": day, "counts": counts, "employees": people}
