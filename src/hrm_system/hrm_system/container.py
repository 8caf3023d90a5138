from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional

from mysql.connector import errors as mysql_errors

from .attendance.calculation import DEFAULT_SHIFT
from .attendance.factory import AttendanceStrategyFactory
from .attendance.finalization import AttendanceFinalizer
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .audit.service import AuditService
from .auth.tokens import TokenService
from .common.datetime_utils import CompanyClock
from .common.ip_lookup import IpLookupClient
from .company_calendar.mysql_calendar_repository import MySQLCalendarRepository
from .company_calendar.repository import CalendarRepository
from .company_calendar.service import CalendarService
from .corrections.mysql_correction_repository import MySQLCorrectionRepository
from .corrections.repository import CorrectionRepository
from .corrections.service import CorrectionService
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_department_repository import MySQLDepartmentRepository
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import DepartmentRepository, EmployeeRepository
from .employees.service import AuthService, DepartmentService, EmployeeService
from .leads.mysql_lead_repository import MySQLLeadRepository
from .leads.repository import LeadRepository
from .leads.service import LeadService
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.repository import LeaveRepository
from .leave.service import LeaveService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService, NotificationStream
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollReportService, PayslipService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService, ShiftResolver
from .settings import Settings
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.service import ShiftService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Repositories:
    employees: EmployeeRepository
    departments: DepartmentRepository
    shifts: ShiftRepository
    schedules: ScheduleRepository
    attendance: AttendanceRepository
    corrections: CorrectionRepository
    leave: LeaveRepository
    calendar: CalendarRepository
    notifications: NotificationRepository
    payroll: PayrollRepository
    leads: LeadRepository
    audit: AuditRepository


@dataclass(frozen=True)
class Container:
    settings: Settings
    clock: CompanyClock
    repos: Repositories
    token_service: TokenService
    health_check: Callable[[], bool]

    audit_service: AuditService
    auth_service: AuthService
    employee_service: EmployeeService
    department_service: DepartmentService
    shift_service: ShiftService
    schedule_service: ScheduleService
    shift_resolver: ShiftResolver
    calendar_service: CalendarService
    notification_service: NotificationService
    notification_stream: NotificationStream
    attendance_service: AttendanceService
    correction_service: CorrectionService
    leave_service: LeaveService
    attendance_finalizer: AttendanceFinalizer
    payroll_report_service: PayrollReportService
    payslip_service: PayslipService
    dashboard_service: DashboardService
    lead_service: LeadService


def build_services(
    repos: Repositories,
    settings: Settings,
    *,
    clock: Optional[CompanyClock] = None,
    ip_lookup: Optional[IpLookupClient] = None,
    health_check: Optional[Callable[[], bool]] = None,
    stream_sleep: Optional[Callable[[float], None]] = None,
) -> Container:
    """Wire every service on top of the given repositories.

    Shared by the MySQL container and the in-memory one the tests build.
    """

    clock = clock or CompanyClock(settings.COMPANY_TIMEZONE)
    token_service = TokenService(settings.JWT_SECRET, expires_hours=settings.JWT_EXPIRES_HOURS)

    audit_service = AuditService(repos.audit)
    notification_service = NotificationService(repos.notifications)
    stream_kwargs = {"sleep": stream_sleep} if stream_sleep else {}
    notification_stream = NotificationStream(
        repos.notifications,
        poll_seconds=settings.SSE_POLL_SECONDS,
        max_seconds=settings.SSE_MAX_SECONDS,
        **stream_kwargs,
    )
    calendar_service = CalendarService(repos.calendar)
    shift_resolver = ShiftResolver(repos.shifts, repos.schedules)

    attendance_service = AttendanceService(
        repos.attendance,
        repos.employees,
        shift_resolver,
        clock,
        strategy_factory=AttendanceStrategyFactory(),
        ip_lookup=ip_lookup,
        audit=audit_service,
        default_shift=replace(DEFAULT_SHIFT, grace_period_minutes=settings.DEFAULT_GRACE_MINUTES),
    )
    correction_service = CorrectionService(
        repos.corrections,
        repos.attendance,
        attendance_service,
        repos.schedules,
        repos.shifts,
        notification_service,
    )
    leave_service = LeaveService(
        repos.leave,
        repos.employees,
        calendar_service,
        notification_service,
        audit_service,
        clock,
        exclude_weekends=settings.LEAVE_EXCLUDE_WEEKENDS,
        exclude_holidays=settings.LEAVE_EXCLUDE_HOLIDAYS,
    )
    attendance_finalizer = AttendanceFinalizer(
        repos.attendance,
        repos.employees,
        attendance_service,
        calendar_service,
        leave_service,
        correction_service,
        notification_service,
        clock,
        grace_minutes=settings.FINALIZATION_GRACE_MINUTES,
    )

    return Container(
        settings=settings,
        clock=clock,
        repos=repos,
        token_service=token_service,
        health_check=health_check or (lambda: True),
        audit_service=audit_service,
        auth_service=AuthService(repos.employees, token_service),
        employee_service=EmployeeService(repos.employees, repos.departments, audit_service),
        department_service=DepartmentService(repos.departments),
        shift_service=ShiftService(repos.shifts),
        schedule_service=ScheduleService(repos.schedules, repos.shifts, repos.employees),
        shift_resolver=shift_resolver,
        calendar_service=calendar_service,
        notification_service=notification_service,
        notification_stream=notification_stream,
        attendance_service=attendance_service,
        correction_service=correction_service,
        leave_service=leave_service,
        attendance_finalizer=attendance_finalizer,
        payroll_report_service=PayrollReportService(repos.attendance, clock),
        payslip_service=PayslipService(
            repos.payroll,
            repos.attendance,
            repos.employees,
            calendar_service,
            leave_service,
            notification_service,
            audit_service,
            clock,
            pf_rate=settings.PF_RATE,
            tax_rate=settings.TAX_RATE,
            tax_threshold=settings.TAX_THRESHOLD,
        ),
        dashboard_service=DashboardService(
            repos.employees,
            repos.attendance,
            attendance_service,
            leave_service,
            correction_service,
            calendar_service,
            notification_service,
            clock,
        ),
        lead_service=LeadService(repos.leads, repos.employees, audit_service),
    )


def build_container(*, db_config: dict, settings: Settings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    def health_check() -> bool:
        try:
            return conn.ping()
        except mysql_errors.Error:
            logger.warning("Database health check failed", exc_info=True)
            return False

    repos = Repositories(
        employees=MySQLEmployeeRepository(conn),
        departments=MySQLDepartmentRepository(conn),
        shifts=MySQLShiftRepository(conn),
        schedules=MySQLScheduleRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        corrections=MySQLCorrectionRepository(conn),
        leave=MySQLLeaveRepository(conn),
        calendar=MySQLCalendarRepository(conn),
        notifications=MySQLNotificationRepository(conn),
        payroll=MySQLPayrollRepository(conn),
        leads=MySQLLeadRepository(conn),
        audit=MySQLAuditRepository(conn),
    )
    ip_lookup = IpLookupClient(
        base_url=settings.IP_LOOKUP_URL,
        ttl_seconds=settings.IP_LOOKUP_TTL_SECONDS,
        max_entries=settings.IP_LOOKUP_CACHE_SIZE,
        enabled=settings.IP_LOOKUP_ENABLED,
    )
    return build_services(repos, settings, ip_lookup=ip_lookup, health_check=health_check)
