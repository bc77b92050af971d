import datetime
from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from checkkit.application import create_app
from checkkit.core.db import get_db
from checkkit.web.dependencies import get_encryption


@contextmanager
def _client(engine, encryption):
    app = create_app(init_db=False)

    def _db_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = _db_override
    app.dependency_overrides[get_encryption] = lambda: encryption
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def client(engine, encryption):
    with _client(engine, encryption) as test_client:
        yield test_client


def _create(client, **payload):
    response = client.post("/api/routines", json=payload)
    assert response.status_code == 200, response.text
    return response.json()["routine"]


def test_routine_crud_flow(client):
    routine = _create(client, name="Read", repeat_pattern="weekly", repeat_days=[1, 3])
    assert routine["repeat_days"] == [1, 3]

    response = client.patch(f"/api/routines/{routine['id']}", json={"deadline": "21:30"})
    assert response.status_code == 200
    assert response.json()["routine"]["deadline"] == "21:30"

    assert [r["id"] for r in client.get("/api/routines").json()["routines"]] == [routine["id"]]

    response = client.delete(f"/api/routines/{routine['id']}")
    assert response.json() == {"status": "deleted", "id": routine["id"]}
    assert client.get("/api/routines").json()["routines"] == []
    assert len(client.get("/api/routines", params={"include_inactive": "true"}).json()["routines"]) == 1


def test_double_submit_returns_same_routine(client):
    first = _create(client, name="Stretch")
    second = _create(client, name="Stretch")
    assert first["id"] == second["id"]


def test_error_status_codes(client):
    assert client.post("/api/routines", json={"name": ""}).status_code == 400
    assert client.post("/api/routines", content="not json").status_code == 400
    assert client.patch("/api/routines/404", json={"name": "x"}).status_code == 404
    assert client.get("/api/routines/404").status_code == 404
    assert client.get("/api/day/2024-99-99").status_code == 400
    assert client.patch("/api/instances/404", json={"completed": True}).status_code == 404
    assert client.post("/api/backup/import", json={"backup": "garbage"}).status_code == 400
    assert client.post("/api/backup/import", json={}).status_code == 400


def test_today_materializes_and_toggle_completes(client):
    routine = _create(client, name="Water", item_type="number")

    first = client.get("/api/today").json()
    second = client.get("/api/today").json()
    assert first == second
    assert first["date"] == datetime.date.today().isoformat()
    assert [i["routine_id"] for i in first["instances"]] == [routine["id"]]

    instance_id = first["instances"][0]["id"]
    toggled = client.post(f"/api/instances/{instance_id}/toggle").json()["instance"]
    assert toggled["completed"] is True
    assert toggled["completed_at"]

    response = client.patch(f"/api/instances/{instance_id}", json={"value": "lots"})
    assert response.status_code == 400
    response = client.patch(f"/api/instances/{instance_id}", json={"value": 6, "notes": "ok"})
    assert response.json()["instance"]["value"] == 6


def test_day_range_report_and_deadlines(client):
    routine = _create(client, name="Gym", repeat_pattern="weekly", repeat_days=[1], deadline="18:00")

    assert len(client.get("/api/day/2024-01-01").json()["instances"]) == 1
    assert client.get("/api/day/2024-01-02").json()["instances"] == []

    instances = client.get("/api/instances", params={"start": "2024-01-01", "end": "2024-01-07"}).json()
    assert [i["date"] for i in instances["instances"]] == ["2024-01-01"]

    report = client.get("/api/reports", params={"start": "2024-01-01", "end": "2024-01-07"}).json()
    assert report["total"] == 1
    assert len(report["daily_stats"]) == 7

    deadlines = client.get("/api/deadlines/2024-01-01").json()["deadlines"]
    assert [d["routine_id"] for d in deadlines] == [routine["id"]]


def test_settings_and_clear(client):
    settings = client.get("/api/settings").json()["settings"]
    assert settings["notifications_enabled"] is True

    response = client.patch("/api/settings", json={"notifications_enabled": False})
    assert response.json()["settings"]["notifications_enabled"] is False
    assert client.patch("/api/settings", json={"encryption_key": "x"}).status_code == 400

    _create(client, name="Water")
    assert client.post("/api/data/clear").json() == {"status": "cleared"}
    assert client.get("/api/routines").json()["routines"] == []
    assert client.get("/api/settings").json()["settings"]["notifications_enabled"] is False


def test_backup_round_trip_over_http(client):
    _create(client, name="Water")
    client.get("/api/day/2024-01-01")
    blob = client.get("/api/backup/export").json()["backup"]

    client.post("/api/data/clear")
    assert client.get("/api/routines").json()["routines"] == []

    response = client.post("/api/backup/import", json={"backup": blob})
    assert response.status_code == 200
    assert response.json()["routines"] == 1
    assert [r["name"] for r in client.get("/api/routines").json()["routines"]] == ["Water"]
    assert len(client.get("/api/instances", params={"start": "2024-01-01", "end": "2024-01-01"}).json()["instances"]) == 1
