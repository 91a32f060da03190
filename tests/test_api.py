"""Tests for the HTTP API."""

import sqlite3
from datetime import date, datetime, timedelta, timezone

import pytest
from conftest import TODAY
from fastapi.testclient import TestClient

from habit_tracker.errors import ValidationError
from habit_tracker.main import app, get_database, get_today, local_today

HEADERS = {"X-Owner-Id": "alice"}


@pytest.fixture
def client(database):
    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_today] = lambda: TODAY
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def clock_client(database):
    app.dependency_overrides[get_database] = lambda: database
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create(client, name="Run", **extra):
    response = client.post("/api/trackables", json={"name": name, **extra}, headers=HEADERS)
    assert response.status_code == 201
    return response.json()


def test_status(client):
    response = client.get("/status")

    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_owner_header_is_required(client):
    response = client.get("/api/trackables")

    assert response.status_code == 401


def test_trackable_crud(client):
    created = _create(client, "Run", color="#3b82f6")
    assert created["name"] == "Run"
    assert created["icon"] == "check"

    response = client.patch(
        f"/api/trackables/{created['id']}", json={"description": "5k"}, headers=HEADERS
    )
    assert response.json()["description"] == "5k"

    listed = client.get("/api/trackables", headers=HEADERS).json()
    assert [t["id"] for t in listed] == [created["id"]]

    response = client.delete(f"/api/trackables/{created['id']}", headers=HEADERS)
    assert response.status_code == 200
    response = client.get(f"/api/trackables/{created['id']}", headers=HEADERS)
    assert response.status_code == 404
    assert response.json()["status"] == "error"


def test_blank_name_is_rejected(client):
    response = client.post("/api/trackables", json={"name": "   "}, headers=HEADERS)

    assert response.status_code == 422


def test_other_owner_cannot_see_trackable(client):
    created = _create(client)

    response = client.get(f"/api/trackables/{created['id']}", headers={"X-Owner-Id": "bob"})

    assert response.status_code == 404


def test_check_in_flow_and_stats(client):
    run = _create(client)
    for offset in range(3):
        day = (TODAY - timedelta(days=offset)).isoformat()
        response = client.put(
            f"/api/trackables/{run['id']}/entries/{day}", json={}, headers=HEADERS
        )
        assert response.status_code == 200

    stats = client.get(f"/api/trackables/{run['id']}/stats", headers=HEADERS).json()

    assert stats == {
        "current_streak": 3,
        "longest_streak": 3,
        "completion_rate_30d": 10,
        "total_completions": 3,
    }


def test_future_check_in_is_rejected(client):
    run = _create(client)
    tomorrow = (TODAY + timedelta(days=1)).isoformat()

    response = client.put(
        f"/api/trackables/{run['id']}/entries/{tomorrow}", json={}, headers=HEADERS
    )

    assert response.status_code == 422
    assert "future" in response.json()["detail"]


def test_toggle_and_notes(client):
    run = _create(client)
    url = f"/api/trackables/{run['id']}/entries/{TODAY.isoformat()}"

    assert client.post(f"{url}/toggle", headers=HEADERS).json()["completed"] is True
    notes = client.put(f"{url}/notes", json={"notes": "tired"}, headers=HEADERS).json()
    assert notes["completed"] is True
    assert notes["notes"] == "tired"
    assert client.post(f"{url}/toggle", headers=HEADERS).json()["completed"] is False

    entries = client.get("/api/entries", params={"trackable_id": run["id"]}, headers=HEADERS)
    assert entries.json() == []


def test_bulk_check_in(client):
    run = _create(client, "Run")
    read = _create(client, "Read")

    response = client.post(
        "/api/check-in", json={"trackable_ids": [run["id"], read["id"]]}, headers=HEADERS
    )

    assert response.status_code == 200
    assert response.json()["date"] == TODAY.isoformat()
    assert len(response.json()["entries"]) == 2


def test_goal_progress(client):
    run = _create(client)
    empty = client.get(f"/api/trackables/{run['id']}/goal-progress", headers=HEADERS).json()
    assert empty["goal"] is None

    response = client.post(
        f"/api/trackables/{run['id']}/goals",
        json={"target_value": 5, "target_period": "weekly"},
        headers=HEADERS,
    )
    assert response.status_code == 201

    # TODAY is a Wednesday: Monday to Wednesday fall in the current week
    for offset in range(3):
        day = (TODAY - timedelta(days=offset)).isoformat()
        client.put(f"/api/trackables/{run['id']}/entries/{day}", json={}, headers=HEADERS)

    report = client.get(f"/api/trackables/{run['id']}/goal-progress", headers=HEADERS).json()

    assert report["progress"]["current"] == 3
    assert report["progress"]["percentage"] == 60
    assert report["progress"]["period_start"] == "2026-10-12"
    assert report["progress"]["period_end"] == "2026-10-18"
    assert len(report["series"]) == 30


def test_invalid_goal_target(client):
    run = _create(client)

    response = client.post(
        f"/api/trackables/{run['id']}/goals", json={"target_value": 0}, headers=HEADERS
    )

    assert response.status_code == 422


def test_update_and_delete_goal(client):
    run = _create(client)
    goal = client.post(
        f"/api/trackables/{run['id']}/goals", json={"target_value": 2}, headers=HEADERS
    ).json()

    updated = client.patch(
        f"/api/goals/{goal['id']}", json={"target_period": "monthly"}, headers=HEADERS
    ).json()
    assert updated["target_period"] == "monthly"

    assert client.delete(f"/api/goals/{goal['id']}", headers=HEADERS).status_code == 200
    assert client.get(f"/api/trackables/{run['id']}/goals", headers=HEADERS).json() == []


def test_calendar_endpoints(client):
    run = _create(client)
    client.put(f"/api/trackables/{run['id']}/entries/{TODAY.isoformat()}", json={}, headers=HEADERS)

    grid = client.get("/api/calendar", headers=HEADERS).json()

    # 2026 starts on a Thursday
    assert grid["padding_days"] == 3
    assert all(len(week) == 7 for week in grid["weeks"])
    assert grid["total_completions"] == 1
    assert grid["month_labels"][0] == {"month": "Jan", "week_index": 0}

    single = client.get(f"/api/trackables/{run['id']}/calendar", headers=HEADERS).json()
    assert single["total_completions"] == 1


def test_dashboard_settings_flow(client):
    a = _create(client, "A")
    b = _create(client, "B")
    c = _create(client, "C")

    default = client.get("/api/dashboard/settings", headers=HEADERS).json()
    assert default["selected_trackables"] == [a["id"], b["id"], c["id"]]

    client.put(
        "/api/dashboard/settings",
        json={"selected_trackables": [a["id"], c["id"]], "trackable_order": [c["id"], b["id"], a["id"]]},
        headers=HEADERS,
    )
    cards = client.get("/api/dashboard", headers=HEADERS).json()["cards"]
    assert [card["trackable"]["name"] for card in cards] == ["C", "A"]

    client.post("/api/dashboard/settings/reset", headers=HEADERS)
    cards = client.get("/api/dashboard", headers=HEADERS).json()["cards"]
    assert [card["trackable"]["name"] for card in cards] == ["A", "B", "C"]


def test_demo_session_is_read_only(client):
    headers = {"X-Owner-Id": "demo-user", "X-Owner-Email": "demo@demo.demo"}

    listed = client.get("/api/trackables", headers=headers).json()
    assert len(listed) == 4

    response = client.post("/api/trackables", json={"name": "New"}, headers=headers)
    assert response.status_code == 403


def test_images(client):
    _create(client)

    dashboard = client.get("/api/dashboard.png", headers=HEADERS)
    calendar = client.get("/api/calendar.png", headers=HEADERS)

    for response in (dashboard, calendar):
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")


def test_local_today_follows_zone():
    now = datetime(2026, 10, 15, 19, 0, tzinfo=timezone.utc)

    assert local_today("UTC", now) == date(2026, 10, 15)
    assert local_today("Pacific/Auckland", now) == date(2026, 10, 16)
    assert local_today("America/Los_Angeles", now) == date(2026, 10, 15)


def test_local_today_rejects_unknown_zone():
    with pytest.raises(ValidationError):
        local_today("Mars/Olympus_Mons")


def test_timezone_header_sets_today(clock_client):
    headers = {**HEADERS, "X-Timezone": "Pacific/Auckland"}
    run = clock_client.post("/api/trackables", json={"name": "Run"}, headers=headers).json()
    local = local_today("Pacific/Auckland")

    response = clock_client.put(
        f"/api/trackables/{run['id']}/entries/{local.isoformat()}", json={}, headers=headers
    )
    assert response.status_code == 200

    dashboard = clock_client.get("/api/dashboard", headers=headers).json()
    assert dashboard["date"] == local.isoformat()
    assert dashboard["cards"][0]["checked_in_today"] is True


def test_unknown_timezone_header(clock_client):
    headers = {**HEADERS, "X-Timezone": "Mars/Olympus_Mons"}

    response = clock_client.get("/api/dashboard", headers=headers)

    assert response.status_code == 422
    assert response.json()["status"] == "error"


def test_storage_failure_returns_503(client, database):
    _create(client)
    conn = sqlite3.connect(database.db_path)
    conn.execute("DROP TABLE entries")
    conn.commit()
    conn.close()

    response = client.get("/api/entries", headers=HEADERS)

    assert response.status_code == 503
    assert response.json() == {"status": "error", "detail": "Storage is temporarily unavailable"}


def test_dashboard_toggle_and_move(client):
    a = _create(client, "A")
    b = _create(client, "B")
    c = _create(client, "C")

    response = client.post(
        "/api/dashboard/settings/toggle",
        json={"trackable_id": b["id"], "checked": False},
        headers=HEADERS,
    )
    assert response.status_code == 200
    assert response.json()["selected_trackables"] == [a["id"], c["id"]]

    response = client.post(
        "/api/dashboard/settings/move",
        json={"dragged_id": c["id"], "target_id": a["id"]},
        headers=HEADERS,
    )
    assert response.json()["trackable_order"] == [c["id"], a["id"], b["id"]]

    cards = client.get("/api/dashboard", headers=HEADERS).json()["cards"]
    assert [card["trackable"]["name"] for card in cards] == ["C", "A"]


def test_dashboard_toggle_unknown_trackable(client):
    response = client.post(
        "/api/dashboard/settings/toggle",
        json={"trackable_id": "ghost", "checked": True},
        headers=HEADERS,
    )

    assert response.status_code == 404


def test_dashboard_reports_read_only(client):
    demo = {"X-Owner-Id": "demo-user", "X-Owner-Email": "demo@demo.demo"}

    assert client.get("/api/dashboard", headers=HEADERS).json()["read_only"] is False
    assert client.get("/api/dashboard", headers=demo).json()["read_only"] is True
