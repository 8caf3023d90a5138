from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Shift
from .repository import ShiftRepository

_COLUMNS = """
    shift_id, shift_name, start_time, end_time, grace_period_minutes, break_minutes,
    full_day_hours, half_day_hours, is_active
"""


def _row_to_shift(r: dict) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        shift_name=r["shift_name"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        grace_period_minutes=int(r.get("grace_period_minutes") or 0),
        break_minutes=int(r.get("break_minutes") or 0),
        full_day_hours=float(r.get("full_day_hours") or 0),
        half_day_hours=float(r.get("half_day_hours") or 0),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _row_to_shift(r) if r else None

    def list_all(self, *, active_only: bool = False) -> Sequence[Shift]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts {where} ORDER BY start_time")
            return [_row_to_shift(r) for r in fetchall(cur)]

    def create(self, shift: Shift) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(shift_name, start_time, end_time, grace_period_minutes, break_minutes,
                                   full_day_hours, half_day_hours, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    shift.shift_name,
                    shift.start_time,
                    shift.end_time,
                    shift.grace_period_minutes,
                    shift.break_minutes,
                    shift.full_day_hours,
                    shift.half_day_hours,
                    1 if shift.is_active else 0,
                ),
            )
            return int(cur.lastrowid)

    def update(self, shift: Shift) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shifts
                SET shift_name=%s, start_time=%s, end_time=%s, grace_period_minutes=%s, break_minutes=%s,
                    full_day_hours=%s, half_day_hours=%s, is_active=%s
                WHERE shift_id=%s
                """,
                (
                    shift.shift_name,
                    shift.start_time,
                    shift.end_time,
                    shift.grace_period_minutes,
                    shift.break_minutes,
                    shift.full_day_hours,
                    shift.half_day_hours,
                    1 if shift.is_active else 0,
                    shift.shift_id,
                ),
            )
            return cur.rowcount > 0
