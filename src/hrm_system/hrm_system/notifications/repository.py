from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import NotificationType
from .model import Notification


class NotificationRepository(Protocol):
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
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        raise NotImplementedError

    def list_after(self, employee_id: int, after_id: int, *, limit: int = 50) -> Sequence[Notification]:
        """Notifications with id > after_id, oldest first (used by the event stream)."""

        raise NotImplementedError

    def latest_id(self, employee_id: int) -> int:
        raise NotImplementedError

    def count_unread(self, employee_id: int) -> int:
        raise NotImplementedError

    def mark_read(self, employee_id: int, notification_id: int) -> bool:
        raise NotImplementedError

    def mark_all_read(self, employee_id: int) -> int:
        raise NotImplementedError
