"""Health endpoint."""
from fastapi.testclient import TestClient


def test_health_returns_ok(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    j = r.json()
    assert j.get("status") == "ok"
    assert j.get("database") in ("ok", "error")
    assert j.get("storage") == "sql"


def test_request_id_header(client: TestClient):
    r = client.get("/health")
    assert r.headers.get("X-Request-ID")
