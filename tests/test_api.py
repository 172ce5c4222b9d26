from __future__ import annotations

import pytest

from src.talent_tracker.talent_tracker.main import create_app

ENTRY = {
    "work_date": "2024-01-15",
    "check_in_time": "2024-01-15T08:00:00",
    "break_start_time": "2024-01-15T12:00:00",
    "break_end_time": "2024-01-15T12:33:00",
    "check_out_time": "2024-01-15T18:30:00",
}


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    app.config["TESTING"] = True
    return app.test_client()


def login(client, user_id: str) -> None:
    with client.session_transaction() as sess:
        sess["user_id"] = user_id


def create_timecard(client) -> dict:
    resp = client.post("/api/timecards", json={"projectId": "proj-1", "entries": [ENTRY]})
    assert resp.status_code == 201
    return resp.get_json()


def test_requires_session(client):
    resp = client.post("/api/timecards/calculate", json={"entry": ENTRY})

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "unauthenticated"


def test_calculate_endpoint(client):
    login(client, "escort-1")

    resp = client.post(
        "/api/timecards/calculate",
        json={"entry": ENTRY, "projectId": "proj-1", "role": "talent_escort"},
    )

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["total_hours"] == 10.0
    assert body["total_pay"] == 220.0
    assert body["is_valid"] is True


def test_calculate_without_check_in_reports_error(client):
    login(client, "escort-1")

    resp = client.post("/api/timecards/calculate", json={"entry": {"check_out_time": "2024-01-15T18:00:00"}})

    assert resp.status_code == 200
    assert resp.get_json()["validation_errors"] == ["missing-check-in"]


def test_bad_timestamp_is_400(client):
    login(client, "escort-1")

    resp = client.post("/api/timecards/calculate", json={"entry": {"check_in_time": "yesterday"}})

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid-request"


def test_numeric_timestamp_is_400(client):
    login(client, "escort-1")

    resp = client.post("/api/timecards/calculate", json={"entry": {"check_in_time": 123}})

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid-request"


def test_calculate_with_mixed_utc_offsets(client):
    login(client, "escort-1")
    entry = {
        "work_date": "2024-01-15",
        "check_in_time": "2024-01-15T08:00:00Z",
        "break_start_time": "2024-01-15T07:00:00-05:00",
        "break_end_time": "2024-01-15T12:33:00+00:00",
        "check_out_time": "2024-01-15T13:30:00-05:00",
    }

    resp = client.post(
        "/api/timecards/calculate",
        json={"entry": entry, "projectId": "proj-1", "role": "talent_escort"},
    )

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["total_hours"] == 10.0
    assert body["total_pay"] == 220.0
    assert body["break_duration"] == 30.0


def test_create_get_submit_flow(client):
    login(client, "escort-1")
    created = create_timecard(client)

    fetched = client.get(f"/api/timecards/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.get_json()["total_pay"] == 220.0

    resp = client.post("/api/timecards/submit", json={"timecardId": created["id"], "version": created["version"]})
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "submitted"


def test_reject_without_reason_is_400(client):
    login(client, "escort-1")
    created = create_timecard(client)
    client.post("/api/timecards/submit", json={"timecardId": created["id"]})

    login(client, "admin-1")
    resp = client.post("/api/timecards/reject", json={"timecardId": created["id"], "reason": ""})

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "reason-required"
    assert client.get(f"/api/timecards/{created['id']}").get_json()["status"] == "submitted"


def test_escort_cannot_approve(client):
    login(client, "escort-1")
    created = create_timecard(client)
    client.post("/api/timecards/submit", json={"timecardId": created["id"]})

    resp = client.post("/api/timecards/approve", json={"timecardId": created["id"]})

    assert resp.status_code == 403


def test_stale_version_is_409(client):
    login(client, "escort-1")
    created = create_timecard(client)
    client.post("/api/timecards/edit", json={"timecardId": created["id"], "editComment": "first"})

    resp = client.post(
        "/api/timecards/edit",
        json={"timecardId": created["id"], "editComment": "second", "version": created["version"]},
    )

    assert resp.status_code == 409


def test_unknown_timecard_is_404(client):
    login(client, "admin-1")

    assert client.get("/api/timecards/does-not-exist").status_code == 404


def test_resolve_breaks_and_validate_submission(client):
    login(client, "escort-1")
    resp = client.post(
        "/api/timecards",
        json={
            "projectId": "proj-1",
            "entries": [{"work_date": "2024-01-16", "check_in_time": "2024-01-16T09:00:00", "check_out_time": "2024-01-16T16:00:00"}],
        },
    )
    timecard_id = resp.get_json()["id"]

    check = client.get(f"/api/timecards/validate-submission?timecardIds={timecard_id}").get_json()
    assert check["can_submit"] is False
    assert check["missing_breaks"][0]["work_date"] == "2024-01-16"

    resolved = client.post(
        "/api/timecards/resolve-breaks",
        json={"timecardId": timecard_id, "resolutions": {"2024-01-16": "no_break"}},
    )
    assert resolved.status_code == 200
    assert resolved.get_json()["entries"][0]["no_break_acknowledged"] is True

    check = client.get(f"/api/timecards/validate-submission?timecardIds={timecard_id}").get_json()
    assert check["can_submit"] is True


def test_audit_log_endpoint_groups_changes(client, clock):
    login(client, "escort-1")
    created = create_timecard(client)
    client.post("/api/timecards/submit", json={"timecardId": created["id"]})

    clock.now = clock.now.replace(hour=10)
    login(client, "admin-1")
    client.post("/api/timecards/approve", json={"timecardId": created["id"]})
    resp = client.get(f"/api/timecards/{created['id']}/audit-logs?grouped=true")

    body = resp.get_json()
    assert resp.status_code == 200
    assert len(body["data"]) == 2
    assert body["data"][0]["changes"][0]["new_value"] == "approved"
    assert body["statistics"]["by_action"]["status_change"] == 2


def test_payroll_csv_export(client):
    login(client, "escort-1")
    create_timecard(client)

    assert client.get("/api/projects/proj-1/payroll").status_code == 403

    login(client, "admin-1")
    resp = client.get("/api/projects/proj-1/payroll.csv")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    text = resp.data.decode("utf-8-sig")
    assert text.splitlines()[0].startswith("timecard_id,user_id,full_name,status")
    assert "Erin Escort" in text
