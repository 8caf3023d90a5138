from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Notification
from .repository import NotificationRepository

_COLUMNS = "notification_id, employee_id, title, message, type, category, data, is_read, created_at"


def _row_to_notification(r: dict) -> Notification:
    return Notification(
        notification_id=int(r["notification_id"]),
        employee_id=int(r["employee_id"]),
        title=r["title"],
        message=r["message"],
        type=NotificationType(r["type"]),
        category=r.get("category") or "general",
        data=load_json(r.get("data"), {}),
        is_read=bool(r.get("is_read", 0)),
        created_at=r.get("created_at"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        title: str,
        message: str,
        type: NotificationType,
        category: str,
        data: Optional[dict[str, Any]],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(employee_id, title, message, type, category, data)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), title, message, type.value, category, dump_json(data)),
            )
            return int(cur.lastrowid)

    def list_for_employee(self, employee_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        unread = "AND is_read=0" if unread_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM notifications
                WHERE employee_id=%s {unread}
                ORDER BY notification_id DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_row_to_notification(r) for r in fetchall(cur)]

    def list_after(self, employee_id: int, after_id: int, *, limit: int = 50) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM notifications
                WHERE employee_id=%s AND notification_id>%s
                ORDER BY notification_id ASC
                LIMIT %s
                """,
                (int(employee_id), int(after_id), int(limit)),
            )
            return [_row_to_notification(r) for r in fetchall(cur)]

    def latest_id(self, employee_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COALESCE(MAX(notification_id), 0) AS max_id FROM notifications WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return int(r["max_id"]) if r else 0

    def count_unread(self, employee_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS cnt FROM notifications WHERE employee_id=%s AND is_read=0", (int(employee_id),))
            r = fetchone(cur)
            return int(r["cnt"]) if r else 0

    def mark_read(self, employee_id: int, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1 WHERE notification_id=%s AND employee_id=%s",
                (int(notification_id), int(employee_id)),
            )
            return cur.rowcount > 0

    def mark_all_read(self, employee_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE notifications SET is_read=1 WHERE employee_id=%s AND is_read=0", (int(employee_id),))
            return int(cur.rowcount)
