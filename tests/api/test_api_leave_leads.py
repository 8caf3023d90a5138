from __future__ import annotations


def test_apply_for_leave_returns_201(client, auth_header):
    resp = client.post(
        "/api/employee/leave-requests",
        json={"leave_type": "CL", "start_date": "2026-03-09", "end_date": "2026-03-10", "reason": "Family"},
        headers=auth_header("dev"),
    )

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["status"] == "pending"
    assert data["days"] == 2.0


def test_leave_apply_requires_start_date(client, auth_header):
    resp = client.post("/api/employee/leave-requests", json={"leave_type": "CL"}, headers=auth_header("dev"))

    assert resp.status_code == 400


def test_lead_created_and_listed_for_owner(client, auth_header):
    created = client.post("/api/leads", json={"name": "Acme Corp", "email": "buyer@acme.test"}, headers=auth_header("seller"))

    assert created.status_code == 201
    lead_id = created.get_json()["data"]["lead_id"]

    own = client.get("/api/leads", headers=auth_header("seller")).get_json()["data"]
    other = client.get("/api/leads", headers=auth_header("dev")).get_json()["data"]

    assert [lead["lead_id"] for lead in own] == [lead_id]
    assert other == []
    assert client.get(f"/api/leads/{lead_id}", headers=auth_header("dev")).status_code == 404
