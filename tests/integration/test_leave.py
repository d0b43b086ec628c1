"""Integration tests for employee leave endpoints"""

import pytest
from fastapi.testclient import TestClient
from kasa_gateway.infrastructure.database.repositories import LeaveRepository

EMPLOYEE = {
    "firstName": "Ayşe",
    "lastName": "Yılmaz",
    "tcNo": "12345678901",
    "department": "Gişe",
    "startDate": "2000-01-01",
}


@pytest.fixture
def admin(auth):
    return auth("admin-1", "admin")


@pytest.fixture
def employee(client: TestClient, admin) -> dict:
    response = client.post("/v1/leave/employees", json=EMPLOYEE, headers=admin)
    assert response.status_code == 201
    return response.json()


def _entitlement(client: TestClient, admin, employee_id: str) -> dict:
    entitlements = client.get(f"/v1/leave/entitlements/{employee_id}", headers=admin).json()
    assert len(entitlements) == 1
    return entitlements[0]


def _request(client: TestClient, admin, employee_id: str, start: str, end: str, leave_type: str = "annual"):
    return client.post(
        "/v1/leave/requests",
        json={"employeeId": employee_id, "leaveType": leave_type, "startDate": start, "endDate": end},
        headers=admin,
    )


def test_employee_gets_entitlement(client: TestClient, admin, employee):
    """Test a senior employee opens the year with 26 days"""
    assert employee["isActive"] is True
    assert employee["tcNo"] == "12345678901"

    entitlement = _entitlement(client, admin, employee["id"])
    assert entitlement["totalDays"] == 26
    assert entitlement["usedDays"] == 0
    assert entitlement["remainingDays"] == 26


def test_duplicate_tc_no_conflict(client: TestClient, admin, employee):
    response = client.post("/v1/leave/employees", json=EMPLOYEE, headers=admin)
    assert response.status_code == 409


def test_leave_endpoints_admin_only(client: TestClient, auth):
    response = client.post("/v1/leave/employees", json=EMPLOYEE, headers=auth("sup-1", "supervisor"))
    assert response.status_code == 403


def test_request_counts_workdays(client: TestClient, admin, employee):
    """Test Monday to Sunday is five workdays"""
    response = _request(client, admin, employee["id"], "2030-03-04", "2030-03-10")

    assert response.status_code == 201
    data = response.json()
    assert data["totalDays"] == 5
    assert data["status"] == "pending"


def test_request_validation(client: TestClient, admin, employee):
    reversed_range = _request(client, admin, employee["id"], "2030-03-10", "2030-03-04")
    too_long = _request(client, admin, employee["id"], "2030-03-04", "2030-04-19")
    unknown_employee = _request(client, admin, "00000000-0000-0000-0000-000000000000", "2030-03-04", "2030-03-05")

    assert reversed_range.status_code == 400
    assert too_long.status_code == 400
    assert unknown_employee.status_code == 404


def test_overlapping_request_conflict(client: TestClient, admin, employee):
    assert _request(client, admin, employee["id"], "2030-03-04", "2030-03-08").status_code == 201

    response = _request(client, admin, employee["id"], "2030-03-08", "2030-03-12", leave_type="unpaid")

    assert response.status_code == 409


def test_approve_debits_and_cancel_credits(client: TestClient, admin, employee):
    """Test the entitlement follows approval and cancellation"""
    request_id = _request(client, admin, employee["id"], "2030-03-04", "2030-03-05").json()["id"]

    approved = client.patch(
        f"/v1/leave/requests/{request_id}/review", json={"action": "approve", "notes": "ok"}, headers=admin
    )
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"
    assert approved.json()["reviewedBy"] == "admin-1"

    entitlement = _entitlement(client, admin, employee["id"])
    assert (entitlement["usedDays"], entitlement["remainingDays"]) == (2, 24)

    cancelled = client.patch(f"/v1/leave/requests/{request_id}/cancel", headers=admin)
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"

    entitlement = _entitlement(client, admin, employee["id"])
    assert (entitlement["usedDays"], entitlement["remainingDays"]) == (0, 26)

    # Cancelled requests no longer block the range
    assert _request(client, admin, employee["id"], "2030-03-04", "2030-03-05").status_code == 201


def test_reject_leaves_entitlement(client: TestClient, admin, employee):
    request_id = _request(client, admin, employee["id"], "2030-03-04", "2030-03-05").json()["id"]

    rejected = client.patch(f"/v1/leave/requests/{request_id}/review", json={"action": "reject"}, headers=admin)

    assert rejected.json()["status"] == "rejected"
    assert _entitlement(client, admin, employee["id"])["usedDays"] == 0
    assert client.patch(f"/v1/leave/requests/{request_id}/cancel", headers=admin).status_code == 409


def test_review_only_pending(client: TestClient, admin, employee):
    request_id = _request(client, admin, employee["id"], "2030-03-04", "2030-03-05").json()["id"]
    client.patch(f"/v1/leave/requests/{request_id}/review", json={"action": "approve"}, headers=admin)

    again = client.patch(f"/v1/leave/requests/{request_id}/review", json={"action": "reject"}, headers=admin)
    bad_action = client.patch(f"/v1/leave/requests/{request_id}/review", json={"action": "revise"}, headers=admin)

    assert again.status_code == 409
    assert bad_action.status_code == 400


def test_list_requests_filters(client: TestClient, admin, employee):
    first = _request(client, admin, employee["id"], "2030-03-04", "2030-03-05").json()
    _request(client, admin, employee["id"], "2031-03-04", "2031-03-05")
    client.patch(f"/v1/leave/requests/{first['id']}/review", json={"action": "approve"}, headers=admin)

    by_status = client.get("/v1/leave/requests", params={"status": "approved"}, headers=admin).json()
    by_year = client.get("/v1/leave/requests", params={"year": 2031}, headers=admin).json()
    by_employee = client.get("/v1/leave/requests", params={"employeeId": employee["id"]}, headers=admin).json()

    assert [r["id"] for r in by_status] == [first["id"]]
    assert [r["startDate"] for r in by_year] == ["2031-03-04"]
    assert len(by_employee) == 2


def test_review_and_cancel_lock_the_request(client: TestClient, admin, employee, monkeypatch):
    """Test status checks read the request under a row lock and a repeated approval debits once"""
    real_request_for_update = LeaveRepository.request_for_update
    locked = []

    def spy(self, request_id):
        locked.append(str(request_id))
        return real_request_for_update(self, request_id)

    monkeypatch.setattr(LeaveRepository, "request_for_update", spy)
    request_id = _request(client, admin, employee["id"], "2030-03-04", "2030-03-05").json()["id"]

    first = client.patch(f"/v1/leave/requests/{request_id}/review", json={"action": "approve"}, headers=admin)
    second = client.patch(f"/v1/leave/requests/{request_id}/review", json={"action": "approve"}, headers=admin)

    assert first.status_code == 200
    assert second.status_code == 409
    assert _entitlement(client, admin, employee["id"])["usedDays"] == 2

    assert client.patch(f"/v1/leave/requests/{request_id}/cancel", headers=admin).status_code == 200
    assert client.patch(f"/v1/leave/requests/{request_id}/cancel", headers=admin).status_code == 409
    assert _entitlement(client, admin, employee["id"])["usedDays"] == 0
    assert locked == [request_id] * 4


def test_review_unknown_request_not_found(client: TestClient, admin):
    response = client.patch("/v1/leave/requests/not-a-uuid/review", json={"action": "approve"}, headers=admin)
    assert response.status_code == 404
