from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import LeadStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Lead
from .repository import LeadRepository

_SELECT = """
    SELECT l.*, a.full_name AS assigned_to_name, c.full_name AS created_by_name
    FROM leads l
    LEFT JOIN employees a ON a.employee_id = l.assigned_to
    LEFT JOIN employees c ON c.employee_id = l.created_by
"""

_UPDATABLE = ("name", "company", "email", "phone", "status", "source", "assigned_to", "notes")


def _to_lead(r: dict) -> Lead:
    return Lead(
        lead_id=int(r["lead_id"]),
        name=r["name"],
        company=r.get("company"),
        email=r.get("email"),
        phone=r.get("phone"),
        status=LeadStatus(r["status"]),
        source=r.get("source"),
        assigned_to=int(r["assigned_to"]) if r.get("assigned_to") is not None else None,
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
        notes=r.get("notes"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        assigned_to_name=r.get("assigned_to_name"),
        created_by_name=r.get("created_by_name"),
    )


class MySQLLeadRepository(LeadRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, lead_id: int) -> Optional[Lead]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE l.lead_id=%s", (int(lead_id),))
            row = fetchone(cur)
        return _to_lead(row) if row else None

    def list(
        self,
        *,
        visible_to: Optional[int] = None,
        status: Optional[LeadStatus] = None,
        assigned_to: Optional[int] = None,
    ) -> Sequence[Lead]:
        where = []
        params: list[object] = []
        if visible_to is not None:
            where.append("(l.created_by=%s OR l.assigned_to=%s)")
            params.extend([int(visible_to), int(visible_to)])
        if status is not None:
            where.append("l.status=%s")
            params.append(status.value)
        if assigned_to is not None:
            where.append("l.assigned_to=%s")
            params.append(int(assigned_to))

        sql = _SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY l.updated_at DESC, l.lead_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            rows = fetchall(cur)
        return [_to_lead(r) for r in rows]

    def create(
        self,
        *,
        name: str,
        company: Optional[str],
        email: Optional[str],
        phone: Optional[str],
        source: Optional[str],
        assigned_to: Optional[int],
        created_by: Optional[int],
        notes: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leads(name, company, email, phone, status, source, assigned_to, created_by, notes)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, company, email, phone, LeadStatus.NEW.value, source, assigned_to, created_by, notes),
            )
            return int(cur.lastrowid)

    def update(self, lead_id: int, fields: dict[str, Any]) -> bool:
        sets = []
        params: list[object] = []
        for key in _UPDATABLE:
            if key not in fields:
                continue
            value = fields[key]
            sets.append(f"{key}=%s")
            params.append(value.value if isinstance(value, LeadStatus) else value)
        if not sets:
            return False
        params.append(int(lead_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE leads SET {', '.join(sets)} WHERE lead_id=%s", tuple(params))
            return cur.rowcount > 0
