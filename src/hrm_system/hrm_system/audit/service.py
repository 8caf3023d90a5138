from __future__ import annotations

import logging
from typing import Any, Optional

from ..core.permissions import Role
from .repository import AuditRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Records privileged actions.

    Writing the trail must never undo the action it describes, so a failed
    insert is logged and swallowed here (and only here).
    """

    def __init__(self, audit: AuditRepository):
        self._audit = audit

    def log(
        self,
        *,
        action: str,
        entity_type: str,
        entity_id: Any = None,
        actor_id: Optional[int] = None,
        actor_role: Optional[Role] = None,
        summary: Optional[str] = None,
        meta: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> Optional[int]:
        try:
            return self._audit.create(
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                actor_id=actor_id,
                actor_role=actor_role.value if isinstance(actor_role, Role) else actor_role,
                summary=summary,
                meta=meta,
                ip_address=ip_address,
            )
        except Exception:
            logger.exception("Failed to write audit log %s %s:%s", action, entity_type, entity_id)
            return None

    def list(self, *, entity_type: Optional[str] = None, entity_id: Optional[str] = None, actor_id: Optional[int] = None, limit: int = 200):
        return self._audit.list(entity_type=entity_type, entity_id=entity_id, actor_id=actor_id, limit=limit)
