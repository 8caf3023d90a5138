from __future__ import annotations

from flask import Flask, Response, request, stream_with_context

from ..auth.guards import current_principal, jwt_required
from ..common.validators import optional_int
from ..container import Container
from ..web.responses import send_response


def register(app: Flask, container: Container) -> None:
    @app.route("/api/employee/notifications", methods=["GET"], endpoint="api_employee_notifications")
    @jwt_required
    def employee_notifications():
        p = current_principal()
        unread_only = request.args.get("unread", "0").lower() in {"1", "true", "yes"}
        limit = min(optional_int(request.args.get("limit"), "limit") or 50, 200)
        items = container.notification_service.list(p.employee_id, unread_only=unread_only, limit=limit)
        return send_response(items)

    @app.route("/api/employee/notifications/unread-count", methods=["GET"], endpoint="api_employee_notifications_unread")
    @jwt_required
    def employee_notifications_unread():
        return send_response({"unread": container.notification_service.unread_count(current_principal().employee_id)})

    @app.route("/api/employee/notifications/<int:notification_id>/read", methods=["POST"], endpoint="api_employee_notification_read")
    @jwt_required
    def employee_notification_read(notification_id: int):
        container.notification_service.mark_read(current_principal().employee_id, notification_id)
        return send_response(None, "Marked as read")

    @app.route("/api/employee/notifications/read-all", methods=["POST"], endpoint="api_employee_notifications_read_all")
    @jwt_required
    def employee_notifications_read_all():
        count = container.notification_service.mark_all_read(current_principal().employee_id)
        return send_response({"updated": count}, "All notifications marked as read")

    @app.route("/api/employee/notifications/stream", methods=["GET"], endpoint="api_employee_notifications_stream")
    @jwt_required(allow_query_token=True)
    def employee_notifications_stream():
        employee_id = current_principal().employee_id
        last_event_id = optional_int(request.headers.get("Last-Event-ID") or request.args.get("last_event_id"), "last_event_id")
        events = container.notification_stream.events(employee_id, last_event_id=last_event_id)
        return Response(
            stream_with_context(events),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )
