# tests/test_errors.py
# PURPOSE: unexpected failures map to generic 500/503 bodies without internals.

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from taskboard.main import app
from taskboard.routers import tasks as tasks_router


@pytest.fixture()
def quiet_client(client):
    # server exceptions come back as responses instead of being re-raised
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def test_unexpected_error_is_generic_500(quiet_client, register, monkeypatch):
    headers, _ = register(email="boom@example.com")

    def explode(*args, **kwargs):
        raise RuntimeError("SELECT secret FROM internals")

    monkeypatch.setattr(tasks_router, "db_task_stats", explode)
    r = quiet_client.get("/api/v1/tasks/stats", headers=headers)
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Internal server error"
    assert "internals" not in r.text


def test_store_unavailable_is_503(quiet_client, register, monkeypatch):
    headers, _ = register(email="down@example.com")

    def unavailable(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(tasks_router, "db_task_stats", unavailable)
    r = quiet_client.get("/api/v1/tasks/stats", headers=headers)
    assert r.status_code == 503
    assert "locked" not in r.text


def test_unknown_route_uses_error_envelope(client):
    r = client.get("/api/v1/nope")
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_security_headers_present(client):
    r = client.get("/health")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert "X-Request-ID" in r.headers
