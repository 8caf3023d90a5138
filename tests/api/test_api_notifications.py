from __future__ import annotations

import json

from src.hrm_system.hrm_system.core.enums import NotificationType


def test_stream_accepts_query_token_and_sends_connected_event(client, container, world, auth_header):
    dev = world.employees["dev"].employee_id
    container.notification_service.notify(dev, "Hello", "First", type=NotificationType.INFO)
    token = auth_header("dev")["Authorization"].split(" ", 1)[1]

    resp = client.get(f"/api/employee/notifications/stream?token={token}&last_event_id=0")

    assert resp.status_code == 200
    assert resp.mimetype == "text/event-stream"
    assert resp.headers["Cache-Control"] == "no-cache"
    chunks = resp.get_data(as_text=True).split("\n\n")
    assert chunks[0].startswith("id: 0\nevent: connected\n")
    assert json.loads(chunks[0].split("data: ", 1)[1]) == {"unread": 1}
    assert "event: notification" in chunks[1]
    assert '"title": "Hello"' in chunks[1]


def test_stream_without_token_is_401(client):
    assert client.get("/api/employee/notifications/stream").status_code == 401


def test_unread_count_and_read_all(client, container, world, auth_header):
    dev = world.employees["dev"].employee_id
    container.notification_service.notify(dev, "One", "x")
    container.notification_service.notify(dev, "Two", "y")
    headers = auth_header("dev")

    assert client.get("/api/employee/notifications/unread-count", headers=headers).get_json()["data"] == {"unread": 2}

    resp = client.post("/api/employee/notifications/read-all", headers=headers)

    assert resp.get_json()["data"] == {"updated": 2}
    assert client.get("/api/employee/notifications/unread-count", headers=headers).get_json()["data"] == {"unread": 0}
