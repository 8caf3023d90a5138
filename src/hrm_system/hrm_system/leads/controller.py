from __future__ import annotations

from flask import Flask, request

from ..auth.guards import current_principal, jwt_required
from ..common.validators import optional_int, require_enum
from ..container import Container
from ..core.enums import LeadStatus
from ..web.responses import get_json_body, send_response


def register(app: Flask, container: Container) -> None:
    svc = container.lead_service

    @app.route("/api/leads", methods=["GET"], endpoint="api_leads")
    @jwt_required
    def leads_list():
        p = current_principal()
        status = request.args.get("status")
        items = svc.list(
            current_role=p.role,
            actor_id=p.employee_id,
            status=require_enum(LeadStatus, status, "status") if status else None,
            assigned_to=optional_int(request.args.get("assigned_to"), "assigned_to"),
        )
        return send_response([lead.to_dict() for lead in items])

    @app.route("/api/leads", methods=["POST"], endpoint="api_leads_create")
    @jwt_required
    def leads_create():
        p = current_principal()
        lead = svc.create(current_role=p.role, actor_id=p.employee_id, data=get_json_body())
        return send_response(lead.to_dict(), "Lead created", status=201)

    @app.route("/api/leads/<int:lead_id>", methods=["GET"], endpoint="api_leads_get")
    @jwt_required
    def leads_get(lead_id: int):
        p = current_principal()
        return send_response(svc.get(lead_id, current_role=p.role, actor_id=p.employee_id).to_dict())

    @app.route("/api/leads/<int:lead_id>", methods=["PUT"], endpoint="api_leads_update")
    @jwt_required
    def leads_update(lead_id: int):
        p = current_principal()
        lead = svc.update(current_role=p.role, actor_id=p.employee_id, lead_id=lead_id, data=get_json_body())
        return send_response(lead.to_dict(), "Lead updated")
