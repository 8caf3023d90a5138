from __future__ import annotations

from datetime import date

from src.hrm_system.hrm_system.core.permissions import Role

WED = date(2026, 3, 4)


def _approved_leave_today(container, world, key):
    svc = container.leave_service
    req = svc.apply(employee_id=world.employees[key].employee_id, leave_type="CL", start_date=WED, end_date=WED)
    svc.approve(current_role=Role.SUPER_ADMIN, actor_id=world.employees["admin"].employee_id, request_id=req.request_id)


def test_leave_today_lists_approved_absences(client, container, world, auth_header):
    _approved_leave_today(container, world, "seller")

    resp = client.get("/api/employee/company/leave-today", headers=auth_header("dev"))

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert [d["full_name"] for d in data] == ["Sam Seller"]
    assert data[0]["dept_name"] == "Sales"


def test_wfh_today_lists_remote_clock_ins(client, auth_header):
    client.post("/api/employee/attendance/clock-in", json={"work_mode": "wfh"}, headers=auth_header("dev"))
    client.post("/api/employee/attendance/clock-in", json={}, headers=auth_header("manager"))

    resp = client.get("/api/employee/company/wfh-today", headers=auth_header("seller"))

    assert [d["full_name"] for d in resp.get_json()["data"]] == ["Dev Patel"]


def test_status_today_counts_everyone(client, container, world, auth_header):
    _approved_leave_today(container, world, "seller")
    client.post("/api/employee/attendance/clock-in", json={"work_mode": "wfh"}, headers=auth_header("dev"))
    client.post("/api/employee/attendance/clock-in", json={}, headers=auth_header("manager"))

    resp = client.get("/api/employee/company/status-today", headers=auth_header("dev"))

    data = resp.get_json()["data"]
    assert data["date"] == "2026-03-04"
    assert data["counts"] == {
        "in_office": 1,
        "wfh": 1,
        "on_break": 0,
        "clocked_out": 0,
        "on_leave": 1,
        "not_clocked_in": 3,
    }
    by_name = {p["full_name"]: p["status"] for p in data["employees"]}
    assert by_name["Sam Seller"] == "on_leave"
    assert by_name["Mina Manager"] == "in_office"


def test_company_endpoints_need_a_token(client):
    assert client.get("/api/employee/company/status-today").status_code == 401
