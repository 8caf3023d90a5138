from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import AuditLog


class AuditRepository(Protocol):
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
        raise NotImplementedError

    def list(
        self,
        *,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        actor_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[AuditLog]:
        raise NotImplementedError
