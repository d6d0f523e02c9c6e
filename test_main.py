# type: ignore
"""
Tests for the Membership Roster Service HTTP surface
====================================================
CRUD endpoints, the administrative sweep trigger, ops endpoints,
middleware, and error paths. Each test gets a fresh in-memory store and
mock email transport through FastAPI dependency overrides.

Run:  pytest test_main.py -v
"""
from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import (
    get_member_service,
    get_record_store,
    get_sweep_service,
)
from app.repositories.member_repository import InMemoryRecordStore, StoreUnavailableError
from app.services.email_client import LogEmailClient
from app.services.member_service import MemberService
from app.services.sweep_service import SweepService
from main import app

client = TestClient(app, raise_server_exceptions=False)

TODAY = date(2026, 3, 10)


class DownStore(InMemoryRecordStore):
    """Every operation fails as if the database were unreachable."""

    def list_keys(self):
        raise StoreUnavailableError("connection refused")

    def get(self, key):
        raise StoreUnavailableError("connection refused")

    def put(self, key, record):
        raise StoreUnavailableError("connection refused")

    def delete(self, key):
        raise StoreUnavailableError("connection refused")


def _wire(store):
    transport = LogEmailClient()
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_member_service] = lambda: MemberService(store)
    app.dependency_overrides[get_sweep_service] = lambda: SweepService(
        store, transport, horizon_days=7, tz="UTC", clock=lambda: TODAY,
    )
    return transport


# ============================================
# Fixtures
# ============================================
@pytest.fixture(autouse=True)
def store():
    """Fresh store + transport per test; overrides removed afterwards."""
    s = InMemoryRecordStore()
    _wire(s)
    yield s
    app.dependency_overrides.clear()


@pytest.fixture
def transport(store):
    return _wire(store)


def _member(**overrides):
    base = {
        "email": "alice@example.com",
        "firstName": "alice",
        "endDate": (TODAY + timedelta(days=3)).isoformat(),
    }
    base.update(overrides)
    return base


# ══════════════════════════════════════════════════════════════════════════
# HEALTH & OPS ENDPOINTS
# ══════════════════════════════════════════════════════════════════════════
class TestHealthEndpoints:
    def test_health(self):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["service"] == "roster-service"
        assert "timestamp" in data

    def test_readiness_ok(self, store):
        store.put("k", {})
        resp = client.get("/health/ready")
        assert resp.status_code == 200
        assert resp.json()["members_in_store"] == 1

    def test_readiness_degraded(self):
        broken = MagicMock()
        broken.verify_connection.side_effect = StoreUnavailableError("DB down")
        app.dependency_overrides[get_record_store] = lambda: broken
        resp = client.get("/health/ready")
        assert resp.status_code == 503
        assert resp.json()["status"] == "degraded"

    def test_metrics_endpoint(self):
        client.get("/")
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "roster_requests_total" in resp.text


# ══════════════════════════════════════════════════════════════════════════
# MIDDLEWARE
# ══════════════════════════════════════════════════════════════════════════
class TestMiddleware:
    def test_request_id_auto_generated(self):
        resp = client.get("/health")
        assert resp.headers.get("x-request-id")

    def test_request_id_forwarded(self):
        resp = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["x-request-id"] == "req-123"

    def test_cors_preflight(self):
        resp = client.options(
            "/add-client",
            headers={
                "Origin": "https://roster.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "DELETE" in resp.headers["access-control-allow-methods"]

    def test_unknown_route_404(self):
        assert client.get("/nope").status_code == 404


# ══════════════════════════════════════════════════════════════════════════
# MEMBER CRUD
# ══════════════════════════════════════════════════════════════════════════
class TestListMembers:
    def test_empty(self):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_lists_key_and_data(self, store):
        store.put("student:a@x.com", {"email": "a@x.com", "firstName": "A"})
        resp = client.get("/")
        assert resp.json() == [
            {"key": "student:a@x.com", "data": {"email": "a@x.com", "firstName": "A"}}
        ]

    def test_store_down(self):
        _wire(DownStore())
        resp = client.get("/")
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to retrieve clients"}


class TestAddMember:
    def test_add(self, store):
        resp = client.post("/add-client", json=_member())
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Client added successfully!"
        assert body["key"] == "student:alice@example.com"
        assert store.get("student:alice@example.com")["firstName"] == "alice"

    def test_extra_fields_kept(self, store):
        client.post("/add-client", json=_member(lastName="Martin", phone="555-0100"))
        saved = store.get("student:alice@example.com")
        assert saved["lastName"] == "Martin"
        assert saved["phone"] == "555-0100"

    def test_email_trimmed(self, store):
        client.post("/add-client", json=_member(email="  bob@example.com "))
        assert store.list_keys() == ["student:bob@example.com"]

    def test_missing_email(self):
        payload = _member()
        del payload["email"]
        assert client.post("/add-client", json=payload).status_code == 422

    def test_invalid_email(self):
        assert client.post("/add-client", json=_member(email="not-an-email")).status_code == 422

    def test_invalid_end_date(self):
        assert client.post("/add-client", json=_member(endDate="next tuesday")).status_code == 422

    def test_store_down(self):
        _wire(DownStore())
        resp = client.post("/add-client", json=_member())
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to process request"}


class TestEditMember:
    def test_edit(self, store):
        store.put("student:a@x.com", {"email": "a@x.com", "firstName": "a"})
        resp = client.post("/edit-client", json={
            "key": "student:a@x.com",
            "data": {"email": "a@x.com", "firstName": "Anna"},
        })
        assert resp.status_code == 200
        assert resp.json()["message"] == "Client updated successfully!"
        assert store.get("student:a@x.com")["firstName"] == "Anna"

    def test_edit_unknown_key_creates(self, store):
        client.post("/edit-client", json={"key": "student:new@x.com", "data": {"firstName": "N"}})
        assert store.get("student:new@x.com") == {"firstName": "N"}

    def test_changed_end_date_clears_reminder(self, store):
        store.put("k", {"email": "a@x.com", "endDate": "2026-03-12", "reminderSent": True,
                        "reminderSentFor": "2026-03-12"})
        client.post("/edit-client", json={
            "key": "k",
            "data": {"email": "a@x.com", "endDate": "2027-03-12", "reminderSent": True},
        })
        saved = store.get("k")
        assert saved["reminderSent"] is False
        assert "reminderSentFor" not in saved

    def test_same_end_date_keeps_reminder(self, store):
        store.put("k", {"email": "a@x.com", "endDate": "2026-03-12", "reminderSent": True})
        client.post("/edit-client", json={
            "key": "k", "data": {"email": "a@x.com", "endDate": "2026-03-12", "firstName": "A"},
        })
        assert store.get("k")["reminderSent"] is True

    def test_missing_key(self):
        assert client.post("/edit-client", json={"data": {}}).status_code == 422

    def test_invalid_end_date(self):
        resp = client.post("/edit-client", json={"key": "k", "data": {"endDate": "soon"}})
        assert resp.status_code == 422

    def test_store_down(self):
        _wire(DownStore())
        resp = client.post("/edit-client", json={"key": "k", "data": {"firstName": "x"}})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to update client"}


class TestDeleteMember:
    def test_delete(self, store):
        store.put("k", {"email": "a@x.com"})
        resp = client.request("DELETE", "/delete-client", json={"key": "k"})
        assert resp.status_code == 200
        assert resp.json()["message"] == "Client deleted successfully!"
        assert store.list_keys() == []

    def test_delete_missing_is_ok(self):
        resp = client.request("DELETE", "/delete-client", json={"key": "ghost"})
        assert resp.status_code == 200

    def test_missing_key(self):
        assert client.request("DELETE", "/delete-client", json={}).status_code == 422

    def test_store_down(self):
        _wire(DownStore())
        resp = client.request("DELETE", "/delete-client", json={"key": "k"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to delete client"}


# ══════════════════════════════════════════════════════════════════════════
# SWEEP TRIGGER
# ══════════════════════════════════════════════════════════════════════════
class TestRunSweep:
    def test_sweep_notifies_due_member(self, store, transport):
        client.post("/add-client", json=_member(email="a@x.com", firstName="JOHN"))
        resp = client.post("/run-sweep")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["notified"] == 1
        assert body["stale"] == 0
        assert body["outcomes"][0]["state"] == "committed"
        assert transport.sent[0]["recipient"] == "a@x.com"
        assert "Hi John," in transport.sent[0]["html"]
        assert "March 13, 2026" in transport.sent[0]["subject"]
        assert store.get("student:a@x.com")["reminderSent"] is True

    def test_sweep_twice_single_email(self, transport):
        client.post("/add-client", json=_member())
        client.post("/run-sweep")
        second = client.post("/run-sweep").json()
        assert second["candidates"] == 0
        assert len(transport.sent) == 1

    def test_far_and_expired_members_ignored(self, transport):
        client.post("/add-client", json=_member(email="far@x.com",
                                                endDate=(TODAY + timedelta(days=10)).isoformat()))
        client.post("/add-client", json=_member(email="old@x.com",
                                                endDate=(TODAY - timedelta(days=1)).isoformat()))
        body = client.post("/run-sweep").json()
        assert body["scanned"] == 2
        assert body["candidates"] == 0
        assert transport.sent == []

    def test_store_down_returns_503(self):
        transport = _wire(DownStore())
        resp = client.post("/run-sweep")
        assert resp.status_code == 503
        body = resp.json()
        assert body["status"] == "failed"
        assert body["error"]
        assert transport.sent == []


# ══════════════════════════════════════════════════════════════════════════
# GLOBAL ERROR HANDLER
# ══════════════════════════════════════════════════════════════════════════
class TestGlobalErrorHandler:
    def test_unexpected_exception(self):
        broken = MagicMock()
        broken.list_members.side_effect = RuntimeError("kaboom")
        app.dependency_overrides[get_member_service] = lambda: broken
        resp = client.get("/", headers={"X-Request-ID": "req-err"})
        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "internal_server_error"
        assert body["request_id"] == "req-err"
