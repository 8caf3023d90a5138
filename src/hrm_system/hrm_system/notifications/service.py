from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Iterator, Optional

from ..core.enums import NotificationType
from ..core.exceptions import NotFoundError
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify(
        self,
        employee_id: int,
        title: str,
        message: str,
        *,
        type: NotificationType = NotificationType.INFO,
        category: str = "general",
        data: Optional[dict[str, Any]] = None,
    ) -> int:
        notification_id = self._notifications.create(
            employee_id=int(employee_id),
            title=title,
            message=message,
            type=type,
            category=category,
            data=data,
        )
        logger.debug("Notification %s -> employee %s: %s", notification_id, employee_id, title)
        return notification_id

    def list(self, employee_id: int, *, unread_only: bool = False, limit: int = 50):
        return self._notifications.list_for_employee(employee_id, unread_only=unread_only, limit=limit)

    def unread_count(self, employee_id: int) -> int:
        return self._notifications.count_unread(employee_id)

    def mark_read(self, employee_id: int, notification_id: int) -> None:
        if not self._notifications.mark_read(employee_id, notification_id):
            raise NotFoundError("Notification not found")

    def mark_all_read(self, employee_id: int) -> int:
        return self._notifications.mark_all_read(employee_id)


def _sse(event: str, payload: Any, event_id: Optional[int] = None) -> str:
    lines = []
    if event_id is not None:
        lines.append(f"id: {event_id}")
    lines.append(f"event: {event}")
    lines.append(f"data: {json.dumps(payload, default=str)}")
    return "\n".join(lines) + "\n\n"


class NotificationStream:
    """Server-sent events for one employee.

    Polls the notification table for rows newer than the last one sent and
    emits a comment heartbeat between polls. The generator ends after
    ``max_seconds`` so a client reconnect picks up with Last-Event-ID.
    """

    def __init__(
        self,
        notifications: NotificationRepository,
        *,
        poll_seconds: float = 5.0,
        heartbeat_seconds: float = 25.0,
        max_seconds: float = 300.0,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self._notifications = notifications
        self._poll = float(poll_seconds)
        self._heartbeat = float(heartbeat_seconds)
        self._max = float(max_seconds)
        self._sleep = sleep
        self._monotonic = monotonic

    def events(self, employee_id: int, *, last_event_id: Optional[int] = None) -> Iterator[str]:
        last_id = int(last_event_id) if last_event_id is not None else self._notifications.latest_id(employee_id)
        started = self._monotonic()
        last_beat = started

        yield _sse("connected", {"unread": self._notifications.count_unread(employee_id)}, last_id)

        while True:
            for n in self._notifications.list_after(employee_id, last_id):
                last_id = n.notification_id
                yield _sse("notification", _to_payload(n), last_id)

            now = self._monotonic()
            if now - started >= self._max:
                return
            if now - last_beat >= self._heartbeat:
                last_beat = now
                yield ": heartbeat\n\n"
            self._sleep(self._poll)


def _to_payload(n: Notification) -> dict:
    return {
        "notification_id": n.notification_id,
        "title": n.title,
        "message": n.message,
        "type": n.type.value,
        "category": n.category,
        "data": n.data,
        "created_at": n.created_at.isoformat() + "Z" if n.created_at else None,
    }
