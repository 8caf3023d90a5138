from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Schedule
from .repository import ScheduleRepository


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT schedule_id, employee_id, work_date, shift_id, note
                FROM schedules
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Schedule(
                schedule_id=int(r["schedule_id"]),
                employee_id=int(r["employee_id"]),
                work_date=r["work_date"],
                shift_id=int(r["shift_id"]),
                note=r.get("note"),
            )

    def upsert(self, *, employee_id: int, work_date: date, shift_id: int, note: Optional[str] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedules(employee_id, work_date, shift_id, note)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE shift_id=VALUES(shift_id), note=VALUES(note)
                """,
                (int(employee_id), work_date, int(shift_id), note),
            )

            # If it was an update, lastrowid can be 0; fetch schedule_id.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT schedule_id FROM schedules WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return int(r["schedule_id"]) if r else 0

    def delete(self, *, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedules WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[dict]:
        clauses = ["sc.work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if employee_id is not None:
            clauses.append("e.employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT sc.schedule_id, sc.work_date, e.employee_id, e.full_name, e.employee_code,
                       s.shift_id, s.shift_name, s.start_time, s.end_time, sc.note
                FROM schedules sc
                JOIN employees e ON e.employee_id = sc.employee_id
                JOIN shifts s ON s.shift_id = sc.shift_id
                WHERE {' AND '.join(clauses)}
                ORDER BY sc.work_date ASC, e.employee_id ASC
                """,
                tuple(params),
            )
            return [
                {
                    "schedule_id": int(r["schedule_id"]),
                    "work_date": r["work_date"],
                    "employee_id": int(r["employee_id"]),
                    "full_name": r["full_name"],
                    "employee_code": r["employee_code"],
                    "shift_id": int(r["shift_id"]),
                    "shift_name": r["shift_name"],
                    "start_time": normalize_mysql_time(r["start_time"]),
                    "end_time": normalize_mysql_time(r["end_time"]),
                    "note": r.get("note") or "",
                }
                for r in fetchall(cur)
            ]
