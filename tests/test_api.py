import os

import pytest
from fastapi.testclient import TestClient

from app import app
from trip_resolver.config.settings import settings
from trip_resolver.core.gtfs_sqlite import GTFSStore
from trip_resolver.services.gtfs_service import get_store


@pytest.fixture
def client(store, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", None)
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_effective_services_envelope(client):
    r = client.get("/services/", params={"date": "20240304"})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert [s["service_id"] for s in body["data"]] == ["S3", "S2"]
    assert body["meta"] == {"date": 20240304, "count": 2}


def test_effective_services_invalid_date_is_400(client):
    r = client.get("/services/", params={"date": "2024-13-01"})
    assert r.status_code == 400
    body = r.json()
    assert body["status"] == 400
    assert body["title"] == "Bad Request"


def test_read_service(client):
    r = client.get("/services/S1")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["monday"] == 1
    assert data["exceptions"] == [{"service_id": "S1", "date": 20240304, "exception_type": 2}]


def test_read_service_not_found(client):
    r = client.get("/services/NOPE")
    assert r.status_code == 404
    assert r.json()["title"] == "Service not found"


def test_trip_by_departure(client):
    r = client.get("/trips/departure", params={"origin": "A", "destination": "B", "time": "08:00", "date": "2024-03-04"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["trip_id"] == "T1"
    assert data["route"]["route_short_name"] == "C1"
    assert [st["stop_id"] for st in data["stop_times"]] == ["A", "B", "C"]
    assert data["stop_times"][0]["departure"] == "2024-03-04 08:00:00"


def test_trip_by_departure_rollover(client):
    r = client.get("/trips/departure", params={"origin": "A", "destination": "B", "time": "0130", "date": "20240305"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["trip_id"] == "T4"
    assert data["stop_times"][0]["departure_time"] == "25:30:00"
    assert data["stop_times"][0]["departure"] == "2024-03-04 25:30:00"


def test_trip_by_departure_not_found(client):
    r = client.get("/trips/departure", params={"origin": "A", "destination": "B", "time": "10:00", "date": "20240304"})
    assert r.status_code == 404


def test_trip_by_departure_bad_time(client):
    r = client.get("/trips/departure", params={"origin": "A", "destination": "B", "time": "99:00", "date": "20240304"})
    assert r.status_code == 400


def test_trip_by_departure_empty_origin(client):
    r = client.get("/trips/departure", params={"origin": "", "destination": "B", "time": "08:00", "date": "20240304"})
    assert r.status_code == 400


def test_read_trip(client):
    r = client.get("/trips/T1")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["service"]["service_id"] == "S3"
    assert data["stop_times"][0]["departure"] is None
    assert client.get("/trips/NOPE").status_code == 404


def test_read_trip_by_short_name(client):
    r = client.get("/trips/short-name/SAT1", params={"date": "20240304"})
    assert r.status_code == 200
    assert r.json()["data"]["trip_id"] == "T7"
    assert client.get("/trips/short-name/SAT1", params={"date": "20240305"}).status_code == 404


def test_missing_db_is_503(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", None)
    app.dependency_overrides[get_store] = lambda: GTFSStore(os.path.join(str(tmp_path), "missing.db"))
    try:
        r = TestClient(app).get("/services/", params={"date": "20240304"})
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 503
    assert r.json()["status"] == 503


def test_api_key_required_when_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "secret")
    assert client.get("/services/S1").status_code == 401
    assert client.get("/services/S1", headers={"X-API-Key": "wrong"}).status_code == 401
    assert client.get("/services/S1", headers={"X-API-Key": "secret"}).status_code == 200
