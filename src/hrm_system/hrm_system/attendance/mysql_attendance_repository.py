from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import AttendanceStatus, HalfDayType, WorkMode
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import AttendanceListRow, AttendanceRecord, BreakSession
from .repository import AttendanceRepository

_COLUMNS = """
    a.attendance_id, a.employee_id, a.shift_id, a.work_date, a.clock_in, a.clock_out, a.break_sessions,
    a.total_break_minutes, a.worked_minutes, a.late_minutes, a.early_exit_minutes, a.overtime_minutes,
    a.is_late, a.is_early_departure, a.status, a.status_reason, a.half_day_type, a.work_mode, a.location,
    a.flagged_reason, a.flagged_by, a.flagged_at, a.remarks
"""


def _parse_breaks(value: Any) -> tuple[BreakSession, ...]:
    out = []
    for item in load_json(value, []) or []:
        if not item or not item.get("break_in"):
            continue
        out.append(
            BreakSession(
                break_in=datetime.fromisoformat(str(item["break_in"]).rstrip("Z")),
                break_out=datetime.fromisoformat(str(item["break_out"]).rstrip("Z")) if item.get("break_out") else None,
            )
        )
    return tuple(out)


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        clock_in=r.get("clock_in"),
        clock_out=r.get("clock_out"),
        status=AttendanceStatus(r["status"]),
        shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
        breaks=_parse_breaks(r.get("break_sessions")),
        total_break_minutes=int(r.get("total_break_minutes") or 0),
        worked_minutes=int(r.get("worked_minutes") or 0),
        late_minutes=int(r.get("late_minutes") or 0),
        early_exit_minutes=int(r.get("early_exit_minutes") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        is_late=bool(r.get("is_late")),
        is_early_departure=bool(r.get("is_early_departure")),
        status_reason=r.get("status_reason"),
        half_day_type=HalfDayType(r["half_day_type"]) if r.get("half_day_type") else None,
        work_mode=WorkMode(r.get("work_mode") or WorkMode.OFFICE.value),
        location=load_json(r.get("location")),
        flagged_reason=r.get("flagged_reason"),
        flagged_by=int(r["flagged_by"]) if r.get("flagged_by") is not None else None,
        flagged_at=r.get("flagged_at"),
        remarks=r.get("remarks"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records a WHERE a.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records a WHERE a.employee_id=%s AND a.work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_for_employee(self, employee_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records a
                WHERE a.employee_id=%s AND a.work_date BETWEEN %s AND %s
                ORDER BY a.work_date DESC
                """,
                (int(employee_id), start, end),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_rows(
        self,
        *,
        start: date,
        end: date,
        dept_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        work_mode: Optional[WorkMode] = None,
        flagged_only: bool = False,
    ) -> Sequence[AttendanceListRow]:
        clauses = ["a.work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if dept_id is not None:
            clauses.append("e.dept_id=%s")
            params.append(int(dept_id))
        if employee_id is not None:
            clauses.append("a.employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("a.status=%s")
            params.append(status.value)
        if work_mode is not None:
            clauses.append("a.work_mode=%s")
            params.append(work_mode.value)
        if flagged_only:
            clauses.append("a.flagged_at IS NOT NULL")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, e.full_name, e.employee_code, e.dept_id, d.dept_name, s.shift_name
                FROM attendance_records a
                JOIN employees e ON e.employee_id = a.employee_id
                LEFT JOIN departments d ON d.dept_id = e.dept_id
                LEFT JOIN shifts s ON s.shift_id = a.shift_id
                WHERE {' AND '.join(clauses)}
                ORDER BY a.work_date ASC, e.full_name ASC
                """,
                tuple(params),
            )
            return [
                AttendanceListRow(
                    record=_row_to_record(r),
                    full_name=r["full_name"],
                    employee_code=r["employee_code"],
                    dept_id=int(r["dept_id"]) if r.get("dept_id") is not None else None,
                    dept_name=r.get("dept_name"),
                    shift_name=r.get("shift_name"),
                )
                for r in fetchall(cur)
            ]

    def create_clock_in(
        self,
        *,
        employee_id: int,
        work_date: date,
        shift_id: Optional[int],
        clock_in: datetime,
        is_late: bool,
        late_minutes: int,
        work_mode: WorkMode,
        location: Optional[dict[str, Any]],
        remarks: Optional[str],
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records
                        (employee_id, work_date, shift_id, clock_in, status, is_late, late_minutes,
                         work_mode, location, remarks, break_sessions)
                    VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        work_date,
                        shift_id,
                        clock_in,
                        AttendanceStatus.INCOMPLETE.value,
                        1 if is_late else 0,
                        int(late_minutes),
                        work_mode.value,
                        dump_json(location),
                        remarks,
                        dump_json([]),
                    ),
                )
                return int(cur.lastrowid)
        except mysql_errors.IntegrityError:
            raise ConflictError("Attendance already recorded for this date")

    def save(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET shift_id=%s, clock_in=%s, clock_out=%s, break_sessions=%s, total_break_minutes=%s,
                    worked_minutes=%s, late_minutes=%s, early_exit_minutes=%s, overtime_minutes=%s,
                    is_late=%s, is_early_departure=%s, status=%s, status_reason=%s, half_day_type=%s,
                    work_mode=%s, location=%s, flagged_reason=%s, flagged_by=%s, flagged_at=%s, remarks=%s
                WHERE attendance_id=%s
                """,
                (
                    record.shift_id,
                    record.clock_in,
                    record.clock_out,
                    dump_json([b.to_dict() for b in record.breaks]),
                    record.total_break_minutes,
                    record.worked_minutes,
                    record.late_minutes,
                    record.early_exit_minutes,
                    record.overtime_minutes,
                    1 if record.is_late else 0,
                    1 if record.is_early_departure else 0,
                    record.status.value,
                    record.status_reason,
                    record.half_day_type.value if record.half_day_type else None,
                    record.work_mode.value,
                    dump_json(record.location),
                    record.flagged_reason,
                    record.flagged_by,
                    record.flagged_at,
                    record.remarks,
                    record.attendance_id,
                ),
            )
            return cur.rowcount > 0

    def settle(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        reason: Optional[str],
        half_day_type: Optional[HalfDayType] = None,
        clear_clock_out: bool = False,
    ) -> bool:
        clear = ", clock_out=NULL, worked_minutes=0, overtime_minutes=0" if clear_clock_out else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET status=%s, status_reason=%s, half_day_type=%s{clear}
                WHERE attendance_id=%s AND status=%s
                """,
                (
                    status.value,
                    reason,
                    half_day_type.value if half_day_type else None,
                    int(attendance_id),
                    AttendanceStatus.INCOMPLETE.value,
                ),
            )
            return cur.rowcount > 0

    def insert_final(
        self,
        *,
        employee_id: int,
        work_date: date,
        shift_id: Optional[int],
        status: AttendanceStatus,
        reason: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO attendance_records(employee_id, work_date, shift_id, status, status_reason, break_sessions)
                VALUES (%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), work_date, shift_id, status.value, reason, dump_json([])),
            )
            return cur.rowcount > 0
