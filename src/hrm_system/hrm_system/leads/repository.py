from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import LeadStatus
from .model import Lead


class LeadRepository(Protocol):
    def get_by_id(self, lead_id: int) -> Optional[Lead]:
        raise NotImplementedError

    def list(
        self,
        *,
        visible_to: Optional[int] = None,
        status: Optional[LeadStatus] = None,
        assigned_to: Optional[int] = None,
    ) -> Sequence[Lead]:
        """``visible_to`` limits the result to leads created by or assigned to that employee."""

        raise NotImplementedError

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
        raise NotImplementedError

    def update(self, lead_id: int, fields: dict[str, Any]) -> bool:
        raise NotImplementedError
