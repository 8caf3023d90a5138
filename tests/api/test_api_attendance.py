from __future__ import annotations

from datetime import date, time


def test_clock_in_reports_lateness(client, auth_header):
    resp = client.post("/api/employee/attendance/clock-in", json={}, headers=auth_header("dev"))

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["message"] == "Clocked in (late by 45 min)"
    assert body["data"]["clock_in"] == "2026-03-04T04:30:00Z"
    assert body["data"]["work_date"] == "2026-03-04"
    assert body["data"]["state"] == "working"


def test_second_clock_in_conflicts(client, auth_header):
    headers = auth_header("dev")
    client.post("/api/employee/attendance/clock-in", json={}, headers=headers)

    resp = client.post("/api/employee/attendance/clock-in", json={}, headers=headers)

    assert resp.status_code == 409
    assert resp.get_json()["success"] is False


def test_invalid_work_mode_is_400(client, auth_header):
    resp = client.post("/api/employee/attendance/clock-in", json={"work_mode": "BEACH"}, headers=auth_header("dev"))

    assert resp.status_code == 400


def test_today_then_clock_out(client, clock, auth_header):
    headers = auth_header("dev")
    before = client.get("/api/employee/attendance/today", headers=headers).get_json()["data"]
    assert before["state"] == "not_clocked_in"
    assert before["shift"]["shift_name"] == "Day"

    client.post("/api/employee/attendance/clock-in", json={}, headers=headers)
    clock.set(clock.to_utc(date(2026, 3, 4), time(18, 30)))
    resp = client.post("/api/employee/attendance/clock-out", headers=headers)

    assert resp.status_code == 200
    assert resp.get_json()["data"]["state"] == "clocked_out"


def test_admin_listing_includes_employee_names(client, auth_header):
    client.post("/api/employee/attendance/clock-in", json={"work_mode": "wfh"}, headers=auth_header("dev"))

    resp = client.get("/api/admin/attendance?date=2026-03-04", headers=auth_header("manager"))

    assert resp.status_code == 200
    rows = resp.get_json()["data"]
    assert [r["full_name"] for r in rows] == ["Dev Patel"]
    assert rows[0]["work_mode"] == "wfh"


def test_admin_listing_rejects_bad_date(client, auth_header):
    resp = client.get("/api/admin/attendance?date=04/03/2026", headers=auth_header("manager"))

    assert resp.status_code == 400


def _missed_clock_out(client, clock, container, auth_header):
    client.post("/api/employee/attendance/clock-in", json={}, headers=auth_header("dev"))
    clock.set(clock.to_utc(date(2026, 3, 5), time(10, 0)))
    container.attendance_finalizer.finalize_date(date(2026, 3, 4))
    mine = client.get("/api/employee/attendance/corrections", headers=auth_header("dev")).get_json()["data"]
    return mine[0]["request_id"]


def test_employee_completes_and_cancels_missed_punch_request(client, clock, container, auth_header):
    request_id = _missed_clock_out(client, clock, container, auth_header)
    headers = auth_header("dev")

    resp = client.post(
        "/api/employee/attendance/corrections",
        json={"work_date": "2026-03-04", "clock_out": "18:00", "reason": "Forgot"},
        headers=headers,
    )
    assert resp.status_code == 201
    assert resp.get_json()["data"]["request_id"] == request_id

    resp = client.post(f"/api/employee/attendance/corrections/{request_id}/cancel", headers=auth_header("seller"))
    assert resp.status_code == 404
    resp = client.post(f"/api/employee/attendance/corrections/{request_id}/cancel", headers=headers)
    assert resp.status_code == 200
    mine = client.get("/api/employee/attendance/corrections", headers=headers).get_json()["data"]
    assert mine[0]["status"] == "cancelled"


def test_approver_supplies_missing_clock_out(client, clock, container, auth_header):
    request_id = _missed_clock_out(client, clock, container, auth_header)
    url = f"/api/admin/attendance/corrections/{request_id}/approve"

    assert client.post(url, json={}, headers=auth_header("manager")).status_code == 400

    resp = client.post(url, json={"clock_out": "18:00"}, headers=auth_header("manager"))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["clock_out"] == "2026-03-04T12:30:00Z"
    assert resp.get_json()["data"]["status"] == "incomplete"
