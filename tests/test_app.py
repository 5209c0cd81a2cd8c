# tests/test_app.py
import time

import pytest

from app import create_app
from config import TestingConfig
from conftest import bearer

PROTECTED = [
    ("POST", "/api/auth/logout"),
    ("GET", "/api/vehicles"),
    ("GET", "/api/vehicles/veh-1/location"),
    ("POST", "/api/vehicles/veh-1/location"),
    ("POST", "/api/tickets/book"),
    ("GET", "/api/tickets"),
    ("GET", "/api/routes/plan?from=a&to=b"),
    ("GET", "/api/staff/stats"),
]


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "OK", "message": "CityConnect API is running"}


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Route not found"}


@pytest.mark.parametrize("method,path", PROTECTED)
def test_missing_token_is_401_without_datastore_call(client, store, method, path):
    resp = client.open(path, method=method, json={})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Access token required"
    assert store.calls == []


@pytest.mark.parametrize("method,path", PROTECTED)
def test_invalid_token_is_403_and_handler_never_runs(client, store, method, path):
    resp = client.open(path, method=method, json={}, headers=bearer("forged"))
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "Invalid or expired token"
    assert store.calls == ["verify_token"]


def test_non_bearer_scheme_counts_as_missing(client, store):
    resp = client.get("/api/vehicles", headers={"Authorization": "Basic abc"})
    assert resp.status_code == 401
    assert store.calls == []


def test_profile_lookup_failure_is_500(client, store, traveller):
    store.fail.add("get_profile")
    resp = client.get("/api/vehicles", headers=bearer(traveller))
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Authentication processing error"


def test_identity_resolved_once_per_request(client, store, staff):
    store.add_vehicle()
    client.get("/api/staff/stats", headers=bearer(staff))
    assert store.calls.count("verify_token") == 1
    assert store.calls.count("get_profile") == 1


def test_uncaught_exception_is_generic_500(client, store, traveller, monkeypatch):
    def boom():
        raise RuntimeError("secret internals")

    monkeypatch.setattr(store, "list_vehicles", boom)
    resp = client.get("/api/vehicles", headers=bearer(traveller))
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error"}


def test_security_headers(client):
    resp = client.get("/api/health")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert resp.headers["Cache-Control"] == "no-store"


def test_cors_allows_configured_origin_with_credentials(client):
    resp = client.get("/api/health", headers={"Origin": "http://localhost:3000"})
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert resp.headers["Access-Control-Allow-Credentials"] == "true"


def test_cors_ignores_other_origins(client):
    resp = client.get("/api/health", headers={"Origin": "http://evil.example"})
    assert "Access-Control-Allow-Origin" not in resp.headers


class _TinyLimits(TestingConfig):
    RATE_LIMIT_MAX = 3
    MAX_CONTENT_LENGTH = 256


@pytest.fixture
def tiny_client(store):
    return create_app(_TinyLimits, datastore=store).test_client()


def test_rate_limit_kicks_in_after_max(tiny_client):
    for _ in range(3):
        assert tiny_client.get("/api/health").status_code == 200
    resp = tiny_client.get("/api/health")
    assert resp.status_code == 429
    assert resp.get_json()["error"] == "Too many requests, please try again later."
    assert int(resp.headers["Retry-After"]) > 0
    assert resp.headers["X-RateLimit-Remaining"] == "0"
    assert int(resp.headers["X-RateLimit-Reset"]) >= int(time.time())


def test_rate_limit_is_per_client_address(tiny_client):
    for _ in range(3):
        tiny_client.get("/api/health", environ_base={"REMOTE_ADDR": "10.0.0.1"})
    assert tiny_client.get("/api/health", environ_base={"REMOTE_ADDR": "10.0.0.1"}).status_code == 429
    assert tiny_client.get("/api/health", environ_base={"REMOTE_ADDR": "10.0.0.2"}).status_code == 200


def test_rate_limit_headers_on_success(client):
    resp = client.get("/api/health")
    assert resp.headers["X-RateLimit-Limit"] == "100"
    assert resp.headers["X-RateLimit-Remaining"] == "99"
    reset_at = int(resp.headers["X-RateLimit-Reset"])
    assert time.time() - 5 < reset_at <= time.time() + 900


def test_oversized_body_is_413(tiny_client, store):
    resp = tiny_client.post("/api/auth/login", json={"email": "a@b.c", "password": "x" * 1000})
    assert resp.status_code == 413
    assert "error" in resp.get_json()
    assert store.calls == []
