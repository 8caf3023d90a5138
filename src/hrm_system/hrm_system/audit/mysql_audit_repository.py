from __future__ import annotations

from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, load_json
from .model import AuditLog
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        action: str,
        entity_type: str,
        entity_id: Optional[str],
        actor_id: Optional[int],
        actor_role: Optional[str],
        summary: Optional[str],
        meta: Optional[dict[str, Any]],
        ip_address: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(action, entity_type, entity_id, actor_id, actor_role, summary, meta, ip_address)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (action, entity_type, entity_id, actor_id, actor_role, summary, dump_json(meta), ip_address),
            )
            return int(cur.lastrowid)

    def list(
        self,
        *,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        actor_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[AuditLog]:
        where = ["1=1"]
        params: list = []
        if entity_type:
            where.append("entity_type=%s")
            params.append(entity_type)
        if entity_id:
            where.append("entity_id=%s")
            params.append(entity_id)
        if actor_id:
            where.append("actor_id=%s")
            params.append(int(actor_id))
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT audit_id, action, entity_type, entity_id, actor_id, actor_role, summary, meta, ip_address, created_at
                FROM audit_logs
                WHERE {' AND '.join(where)}
                ORDER BY audit_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [
                AuditLog(
                    audit_id=int(r["audit_id"]),
                    action=r["action"],
                    entity_type=r["entity_type"],
                    entity_id=r.get("entity_id"),
                    actor_id=int(r["actor_id"]) if r.get("actor_id") is not None else None,
                    actor_role=r.get("actor_role"),
                    summary=r.get("summary"),
                    meta=load_json(r.get("meta"), {}),
                    ip_address=r.get("ip_address"),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
