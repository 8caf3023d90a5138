from __future__ import annotations

from typing import Any, Optional

from ..audit.service import AuditService
from ..common.validators import optional_int, optional_text, require_email, require_enum, require_non_empty
from ..core.enums import LeadStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import Permission, Role, has_permission
from ..employees.repository import EmployeeRepository
from .model import Lead
from .repository import LeadRepository

# won and lost are terminal
LEAD_TRANSITIONS: dict[LeadStatus, frozenset[LeadStatus]] = {
    LeadStatus.NEW: frozenset({LeadStatus.CONTACTED, LeadStatus.LOST}),
    LeadStatus.CONTACTED: frozenset({LeadStatus.QUALIFIED, LeadStatus.LOST}),
    LeadStatus.QUALIFIED: frozenset({LeadStatus.WON, LeadStatus.LOST}),
    LeadStatus.WON: frozenset(),
    LeadStatus.LOST: frozenset(),
}


class LeadService:
    def __init__(self, leads: LeadRepository, employees: EmployeeRepository, audit: AuditService):
        self._leads = leads
        self._employees = employees
        self._audit = audit

    def _check_assignee(self, assigned_to: Optional[int]) -> None:
        if assigned_to is None:
            return
        employee = self._employees.get_by_id(int(assigned_to))
        if not employee or not employee.is_active:
            raise ValidationError("Assignee not found")

    def _visible(self, lead: Lead, *, current_role: Role, actor_id: int) -> bool:
        if has_permission(current_role, Permission.LEAD_VIEW_ALL):
            return True
        return actor_id in (lead.created_by, lead.assigned_to)

    def get(self, lead_id: int, *, current_role: Role, actor_id: int) -> Lead:
        lead = self._leads.get_by_id(int(lead_id))
        if not lead or not self._visible(lead, current_role=current_role, actor_id=actor_id):
            raise NotFoundError("Lead not found")
        return lead

    def list(self, *, current_role: Role, actor_id: int, status: Optional[LeadStatus] = None, assigned_to: Optional[int] = None):
        visible_to = None if has_permission(current_role, Permission.LEAD_VIEW_ALL) else int(actor_id)
        return self._leads.list(visible_to=visible_to, status=status, assigned_to=assigned_to)

    def create(self, *, current_role: Role, actor_id: int, data: dict[str, Any]) -> Lead:
        if not has_permission(current_role, Permission.LEAD_MANAGE):
            raise AuthorizationError("You do not have permission")

        email = data.get("email")
        assigned_to = optional_int(data.get("assigned_to"), "assigned_to")
        self._check_assignee(assigned_to)

        lead_id = self._leads.create(
            name=require_non_empty(data.get("name"), "name"),
            company=optional_text(data.get("company")),
            email=require_email(email) if email else None,
            phone=optional_text(data.get("phone")),
            source=optional_text(data.get("source")),
            assigned_to=assigned_to,
            created_by=actor_id,
            notes=optional_text(data.get("notes")),
        )
        return self._leads.get_by_id(lead_id)

    def update(self, *, current_role: Role, actor_id: int, lead_id: int, data: dict[str, Any]) -> Lead:
        """Edit details, move the status one step along its flow, or reassign."""

        lead = self.get(lead_id, current_role=current_role, actor_id=actor_id)
        if not has_permission(current_role, Permission.LEAD_MANAGE):
            raise AuthorizationError("You do not have permission")

        fields: dict[str, Any] = {}
        if "name" in data:
            fields["name"] = require_non_empty(data.get("name"), "name")
        for key in ("company", "phone", "source", "notes"):
            if key in data:
                fields[key] = optional_text(data.get(key))
        if "email" in data:
            fields["email"] = require_email(data["email"]) if data.get("email") else None

        if data.get("status"):
            status = require_enum(LeadStatus, data["status"], "status")
            if status != lead.status:
                if status not in LEAD_TRANSITIONS[lead.status]:
                    raise ValidationError(f"Cannot move a lead from {lead.status.value} to {status.value}")
                fields["status"] = status

        if "assigned_to" in data:
            assigned_to = optional_int(data.get("assigned_to"), "assigned_to")
            self._check_assignee(assigned_to)
            fields["assigned_to"] = assigned_to

        if not fields:
            return lead
        self._leads.update(lead.lead_id, fields)

        if "status" in fields or "assigned_to" in fields:
            self._audit.log(
                action="lead.update",
                entity_type="lead",
                entity_id=lead.lead_id,
                actor_id=actor_id,
                actor_role=current_role,
                meta={k: fields[k] for k in ("status", "assigned_to") if k in fields},
            )
        return self._leads.get_by_id(lead.lead_id)
