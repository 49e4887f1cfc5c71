from datetime import datetime

import pytest

from src.site_attendance.site_attendance.main import create_app
from tests.conftest import ENGINEER_ID, FAR_AWAY, MANAGER_ID, ORG_ID, PROJECT_ID, SITE, WORKER_ID

DAYTIME = datetime(2026, 3, 2, 9, 0)


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, user_id=WORKER_ID, role="LABOUR"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


@pytest.fixture
def daytime(monkeypatch):
    # Controllers use the wall clock; pin it to a working hour.
    for module in (
        "src.site_attendance.site_attendance.attendance.ledger",
        "src.site_attendance.site_attendance.attendance.history",
        "src.site_attendance.site_attendance.attendance.manual",
        "src.site_attendance.site_attendance.attendance.blacklist_service",
        "src.site_attendance.site_attendance.payroll.service",
        "src.site_attendance.site_attendance.payroll.controller",
        "src.site_attendance.site_attendance.projects.service",
        "src.site_attendance.site_attendance.projects.controller",
        "src.site_attendance.site_attendance.sync.service",
    ):
        monkeypatch.setattr(f"{module}.now_local", lambda: DAYTIME)
    return DAYTIME


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_requires_session(client):
    resp = client.post("/api/attendance/check-in", json={})
    assert resp.status_code == 401


def test_role_is_enforced(client):
    login(client, role="MANAGER")
    resp = client.post("/api/attendance/check-in", json={"project_id": PROJECT_ID})
    assert resp.status_code == 403


def test_check_in_check_out_flow(client, daytime):
    login(client)

    resp = client.post(
        "/api/attendance/check-in",
        json={"project_id": PROJECT_ID, "latitude": SITE.latitude, "longitude": SITE.longitude},
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["wage"]["computation"] == "COMPUTED"

    again = client.post(
        "/api/attendance/check-in",
        json={"project_id": PROJECT_ID, "latitude": SITE.latitude, "longitude": SITE.longitude},
    )
    assert again.status_code == 409
    assert again.get_json()["reason"] == "ALREADY_CHECKED_IN"

    live = client.get("/api/attendance/live").get_json()
    assert live["data"]["status"] == "WORKING"


def test_outside_fence_maps_to_403(client, daytime):
    login(client)
    resp = client.post(
        "/api/attendance/check-in",
        json={"project_id": PROJECT_ID, "latitude": FAR_AWAY.latitude, "longitude": FAR_AWAY.longitude},
    )

    assert resp.status_code == 403
    body = resp.get_json()
    assert body == {
        "success": False,
        "reason": "OUTSIDE_GEOFENCE",
        "message": body["message"],
        "detail": body["detail"],
    }
    assert body["detail"]["geofence_type"] == "CIRCLE"


def test_invalid_coordinates_are_400(client, daytime):
    login(client)
    resp = client.post("/api/attendance/track", json={"latitude": 200, "longitude": 0})
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_sync_batch_endpoint(client, daytime):
    login(client)
    actions = [
        {
            "id": "api-1",
            "action_type": "CHECK_IN",
            "project_id": PROJECT_ID,
            "timestamp": "2026-03-02T08:00:00",
            "payload": {"latitude": SITE.latitude, "longitude": SITE.longitude},
        },
        {"id": "api-2", "action_type": "CHECK_OUT", "timestamp": "2026-03-02T08:45:00", "payload": {}},
    ]

    resp = client.post("/api/sync/batch", json={"actions": actions})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["summary"]["applied"] == 2

    empty = client.post("/api/sync/batch", json={"actions": []})
    assert empty.status_code == 400


def test_break_endpoints(client, daytime):
    login(client, user_id=7, role="SITE_ENGINEER")

    created = client.post(f"/api/projects/{PROJECT_ID}/breaks", json={"duration_minutes": 60, "reason": "Rain"})
    assert created.status_code == 201
    assert created.get_json()["data"]["remaining_minutes"] == 60

    clash = client.post(f"/api/projects/{PROJECT_ID}/breaks", json={"duration_minutes": 60})
    assert clash.status_code == 409

    active = client.get(f"/api/projects/{PROJECT_ID}/breaks/active").get_json()
    assert active["data"]["active"] is True


def test_wage_endpoints_are_manager_only(client, daytime):
    login(client)
    assert client.post("/api/wages/recompute?date=2026-03-02").status_code == 403

    login(client, user_id=3, role="MANAGER")
    resp = client.post("/api/wages/recompute?date=2026-03-02")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["computed"] == 0

    assert client.post("/api/wages/recompute?date=02-03-2026").status_code == 400
    assert client.post("/api/wages/999/recompute").status_code == 404


def _check_in(client):
    return client.post(
        "/api/attendance/check-in",
        json={"project_id": PROJECT_ID, "latitude": SITE.latitude, "longitude": SITE.longitude},
    )


def test_history_and_today(client, daytime):
    login(client)
    assert client.get("/api/attendance/today").get_json()["data"] == {"attendance": None}

    _check_in(client)

    today = client.get("/api/attendance/today").get_json()["data"]["attendance"]
    assert today["state"] == "ACTIVE"
    assert today["project_name"] == "Tower A"
    assert len(today["sessions"]) == 1

    history = client.get("/api/attendance/history?limit=5").get_json()["data"]["history"]
    assert [h["attendance_id"] for h in history] == [today["attendance_id"]]
    assert client.get("/api/attendance/history?limit=0").status_code == 400


def test_manual_mark(client, daytime):
    login(client, user_id=ENGINEER_ID, role="SITE_ENGINEER")

    resp = client.post(
        "/api/attendance/mark",
        json={"worker_id": WORKER_ID, "project_id": PROJECT_ID, "status": "APPROVED", "date": "2026-03-01"},
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["origin"] == "MANUAL"
    assert data["approved_by"] == ENGINEER_ID
    assert data["work_date"] == "2026-03-01"

    bad_status = client.post(
        "/api/attendance/mark", json={"worker_id": WORKER_ID, "project_id": PROJECT_ID, "status": "PRESENT"}
    )
    assert bad_status.status_code == 400
    bad_date = client.post(
        "/api/attendance/mark",
        json={"worker_id": WORKER_ID, "project_id": PROJECT_ID, "status": "APPROVED", "date": "03/01/2026"},
    )
    assert bad_date.status_code == 400

    login(client, user_id=ENGINEER_ID + 1, role="SITE_ENGINEER")
    unassigned = client.post(
        "/api/attendance/mark", json={"worker_id": WORKER_ID, "project_id": PROJECT_ID, "status": "APPROVED"}
    )
    assert unassigned.status_code == 403


def test_blacklist_administration(client, daytime):
    login(client, user_id=MANAGER_ID, role="MANAGER")

    added = client.post("/api/blacklist", json={"org_id": ORG_ID, "worker_id": WORKER_ID})
    assert added.status_code == 201
    entry = added.get_json()["data"]
    assert entry["active"] is True
    assert entry["reason"] == "Manually blacklisted"

    listed = client.get(f"/api/blacklist?org_id={ORG_ID}").get_json()["data"]["blacklist"]
    assert [e["entry_id"] for e in listed] == [entry["entry_id"]]
    assert client.get("/api/blacklist?org_id=999").status_code == 403

    login(client)
    blocked = _check_in(client)
    assert blocked.status_code == 403
    assert blocked.get_json()["detail"]["blacklisted"] is True

    login(client, user_id=MANAGER_ID, role="MANAGER")
    lifted = client.delete(f"/api/blacklist/{entry['entry_id']}")
    assert lifted.status_code == 200
    assert client.delete(f"/api/blacklist/{entry['entry_id']}").status_code == 404

    login(client)
    assert _check_in(client).status_code == 201


def test_blacklist_is_manager_only(client):
    login(client)
    assert client.get("/api/blacklist").status_code == 403


def test_my_wages(client, daytime):
    login(client)
    _check_in(client)

    data = client.get("/api/wages/mine").get_json()["data"]

    assert data["worker_id"] == WORKER_ID
    assert len(data["wages"]) == 1
    assert data["wages"][0]["status"] == "PENDING"
    assert data["wages"][0]["work_date"] == "2026-03-02"
    assert data["summary"]["approved_days"] == 0


def test_list_breaks(client, daytime):
    login(client, user_id=ENGINEER_ID, role="SITE_ENGINEER")
    client.post(f"/api/projects/{PROJECT_ID}/breaks", json={"duration_minutes": 60, "reason": "Lunch"})

    resp = client.get(f"/api/projects/{PROJECT_ID}/breaks")

    assert resp.status_code == 200
    breaks = resp.get_json()["data"]["breaks"]
    assert [b["reason"] for b in breaks] == ["Lunch"]
    assert breaks[0]["remaining_minutes"] == 60
