from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class AuditLog:
    audit_id: int
    action: str
    entity_type: str
    entity_id: Optional[str]
    actor_id: Optional[int]
    actor_role: Optional[str]
    summary: Optional[str]
    meta: dict[str, Any] = field(default_factory=dict)
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None
