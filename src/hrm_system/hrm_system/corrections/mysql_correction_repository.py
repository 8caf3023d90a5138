from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import CorrectionIssue, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CorrectionRequest, ScheduleChangeRequest
from .repository import CorrectionRepository


def _to_correction(r: dict) -> CorrectionRequest:
    return CorrectionRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        attendance_id=int(r["attendance_id"]) if r.get("attendance_id") is not None else None,
        work_date=r["work_date"],
        issue_type=CorrectionIssue(r["issue_type"]),
        requested_clock_in=r.get("requested_clock_in"),
        requested_clock_out=r.get("requested_clock_out"),
        reason=r.get("reason"),
        status=RequestStatus(r["status"]),
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        admin_note=r.get("admin_note"),
        employee_name=r.get("full_name"),
    )


def _to_schedule_change(r: dict) -> ScheduleChangeRequest:
    return ScheduleChangeRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        requested_shift_id=int(r["requested_shift_id"]),
        reason=r.get("reason"),
        status=RequestStatus(r["status"]),
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        admin_note=r.get("admin_note"),
        employee_name=r.get("full_name"),
        shift_name=r.get("shift_name"),
    )


def _filters(status: Optional[RequestStatus], employee_id: Optional[int]) -> tuple[str, list]:
    where = []
    params: list[object] = []
    if status is not None:
        where.append("r.status=%s")
        params.append(status.value)
    if employee_id is not None:
        where.append("r.employee_id=%s")
        params.append(int(employee_id))
    return ("WHERE " + " AND ".join(where)) if where else "", params


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Attendance corrections --------
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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_correction_requests(
                    employee_id, attendance_id, work_date, issue_type,
                    requested_clock_in, requested_clock_out, reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    attendance_id,
                    work_date,
                    issue_type.value,
                    requested_clock_in,
                    requested_clock_out,
                    reason,
                    RequestStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT r.*, e.full_name
                FROM attendance_correction_requests r
                JOIN employees e ON e.employee_id = r.employee_id
                WHERE r.request_id=%s
                """,
                (int(request_id),),
            )
            r = fetchone(cur)
            return _to_correction(r) if r else None

    def list(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        where, params = _filters(status, employee_id)
        params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT r.*, e.full_name
                FROM attendance_correction_requests r
                JOIN employees e ON e.employee_id = r.employee_id
                {where}
                ORDER BY r.created_at DESC, r.request_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_correction(r) for r in fetchall(cur)]

    def get_pending_for_attendance(self, attendance_id: int) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT r.*, e.full_name
                FROM attendance_correction_requests r
                JOIN employees e ON e.employee_id = r.employee_id
                WHERE r.attendance_id=%s AND r.status=%s
                ORDER BY r.request_id DESC
                LIMIT 1
                """,
                (int(attendance_id), RequestStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _to_correction(r) if r else None

    def update_pending(
        self,
        request_id: int,
        *,
        requested_clock_in: Optional[datetime],
        requested_clock_out: Optional[datetime],
        reason: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_correction_requests
                SET requested_clock_in=%s, requested_clock_out=%s, reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (requested_clock_in, requested_clock_out, reason, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def count_pending(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM attendance_correction_requests WHERE status=%s",
                (RequestStatus.PENDING.value,),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def decide(self, *, request_id: int, status: RequestStatus, decided_by: int, admin_note: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_correction_requests
                SET status=%s, decided_by=%s, decided_at=UTC_TIMESTAMP(), admin_note=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, int(decided_by), admin_note, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    # -------- Schedule change requests --------
    def create_schedule_change(
        self,
        *,
        employee_id: int,
        work_date: date,
        requested_shift_id: int,
        reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedule_change_requests(employee_id, work_date, requested_shift_id, reason, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(employee_id), work_date, int(requested_shift_id), reason, RequestStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_schedule_change(self, request_id: int) -> Optional[ScheduleChangeRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT r.*, e.full_name, s.shift_name
                FROM schedule_change_requests r
                JOIN employees e ON e.employee_id = r.employee_id
                JOIN shifts s ON s.shift_id = r.requested_shift_id
                WHERE r.request_id=%s
                """,
                (int(request_id),),
            )
            r = fetchone(cur)
            return _to_schedule_change(r) if r else None

    def list_schedule_changes(
        self,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[ScheduleChangeRequest]:
        where, params = _filters(status, employee_id)
        params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT r.*, e.full_name, s.shift_name
                FROM schedule_change_requests r
                JOIN employees e ON e.employee_id = r.employee_id
                JOIN shifts s ON s.shift_id = r.requested_shift_id
                {where}
                ORDER BY r.created_at DESC, r.request_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_schedule_change(r) for r in fetchall(cur)]

    def decide_schedule_change(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        decided_by: int,
        admin_note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE schedule_change_requests
                SET status=%s, decided_by=%s, decided_at=UTC_TIMESTAMP(), admin_note=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, int(decided_by), admin_note, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0
