from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import LeadStatus


@dataclass(frozen=True)
class Lead:
    lead_id: int
    name: str
    company: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    status: LeadStatus
    source: Optional[str]
    assigned_to: Optional[int]
    created_by: Optional[int]
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    assigned_to_name: Optional[str] = None
    created_by_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "lead_id": self.lead_id,
            "name": self.name,
            "company": self.company,
            "email": self.email,
            "phone": self.phone,
            "status": self.status.value,
            "source": self.source,
            "assigned_to": self.assigned_to,
            "assigned_to_name": self.assigned_to_name,
            "created_by": self.created_by,
            "created_by_name": self.created_by_name,
            "notes": self.notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
