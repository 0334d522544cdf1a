"""
FastAPI endpoint tests for the Title Ledger API.

Uses httpx + FastAPI TestClient — no real server needed.
"""

from __future__ import annotations

import api
import pytest
from api import app
from fastapi.testclient import TestClient

from conftest import ADMIN, OWNER_X, OWNER_Y, OWNER_Z
from title_ledger.events import EventLog
from title_ledger.registry import RegistryService

client = TestClient(app)


@pytest.fixture(autouse=True)
def _fresh_registry() -> None:
    """Deploy a fresh registry for every test (bypasses lifespan)."""
    api._events = EventLog()
    api._registry = RegistryService(ADMIN, sink=api._events)
    yield  # type: ignore[misc]
    api._registry = None
    api._events = None


LAND_1 = {
    "land_id": 1,
    "owner": OWNER_X,
    "size_sq_ft": 1000,
    "location": "10,20",
    "title_number": "T-1",
}


def _as(caller: str) -> dict[str, str]:
    return {"X-Caller": caller}


def _register(land: dict = LAND_1):
    return client.post("/lands", json=land, headers=_as(ADMIN))


class TestHealthEndpoint:
    def test_health_returns_200(self) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200

    def test_health_response_shape(self) -> None:
        _register()
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["lands_registered"] == 1
        assert data["verification_policy"] == "reset"

    def test_not_deployed_returns_503(self) -> None:
        api._registry = None
        assert client.get("/health").status_code == 503


class TestRegisterEndpoint:
    def test_register_returns_land(self) -> None:
        resp = _register()
        assert resp.status_code == 201
        data = resp.json()
        assert data["land_id"] == 1
        assert data["owner"] == OWNER_X
        assert data["verified"] is False

    def test_duplicate_is_409(self) -> None:
        _register()
        resp = _register()
        assert resp.status_code == 409
        body = resp.json()
        assert body["code"] == "STATE_CONFLICT"
        assert body["details"]["operation"] == "register_land"
        assert body["details"]["land_id"] == 1

    def test_non_admin_is_403(self) -> None:
        resp = client.post("/lands", json=LAND_1, headers=_as(OWNER_X))
        assert resp.status_code == 403
        assert resp.json()["code"] == "UNAUTHORIZED"
        assert client.get("/lands/count").json()["count"] == 0

    def test_null_owner_is_422(self) -> None:
        resp = _register({**LAND_1, "owner": "0x0000000000000000000000000000000000000000"})
        assert resp.status_code == 422
        assert resp.json()["code"] == "INVALID_ARGUMENT"

    def test_missing_caller_header_is_422(self) -> None:
        resp = client.post("/lands", json=LAND_1)
        assert resp.status_code == 422

    def test_missing_fields_is_422(self) -> None:
        resp = client.post("/lands", json={"land_id": 1}, headers=_as(ADMIN))
        assert resp.status_code == 422


class TestVerifyAndTransferEndpoints:
    def test_verify(self) -> None:
        _register()
        resp = client.post("/lands/1/verify", headers=_as(ADMIN))
        assert resp.status_code == 200
        assert resp.json()["verified"] is True

    def test_verify_unknown_is_404(self) -> None:
        resp = client.post("/lands/9/verify", headers=_as(ADMIN))
        assert resp.status_code == 404
        assert resp.json()["code"] == "LAND_NOT_FOUND"

    def test_transfer_unverified_is_409(self) -> None:
        _register()
        resp = client.post(
            "/lands/1/transfer", json={"new_owner": OWNER_Y}, headers=_as(OWNER_X)
        )
        assert resp.status_code == 409
        assert resp.json()["details"]["reason"] == "not_verified"

    def test_transfer_flow(self) -> None:
        _register()
        client.post("/lands/1/verify", headers=_as(ADMIN))
        resp = client.post(
            "/lands/1/transfer", json={"new_owner": OWNER_Y}, headers=_as(OWNER_X)
        )
        assert resp.status_code == 200
        assert resp.json()["owner"] == OWNER_Y
        assert resp.json()["verified"] is False

        assert client.get(f"/owners/{OWNER_Y}/lands").json() == [1]
        assert client.get(f"/owners/{OWNER_X}/lands").json() == []

        history = client.get("/lands/1/history").json()
        assert [r["owner"] for r in history] == [OWNER_X, OWNER_Y]
        assert [r["verified_at_time"] for r in history] == [True, False]

    def test_transfer_by_stranger_is_403(self) -> None:
        _register()
        client.post("/lands/1/verify", headers=_as(ADMIN))
        resp = client.post(
            "/lands/1/transfer", json={"new_owner": OWNER_Z}, headers=_as(OWNER_Z)
        )
        assert resp.status_code == 403


class TestReadEndpoints:
    def test_land_details(self) -> None:
        _register()
        data = client.get("/lands/1").json()
        assert data["title_number"] == "T-1"
        assert data["size_sq_ft"] == 1000

    def test_land_details_unknown_is_404(self) -> None:
        assert client.get("/lands/5").status_code == 404

    def test_history_unknown_is_404(self) -> None:
        assert client.get("/lands/5/history").status_code == 404

    def test_ids_and_count(self) -> None:
        _register()
        _register({**LAND_1, "land_id": 7})
        assert client.get("/lands").json() == [1, 7]
        assert client.get("/lands/count").json() == {"count": 2}

    def test_is_owner(self) -> None:
        _register()
        yes = client.get(f"/lands/1/owner/{OWNER_X}").json()
        no = client.get(f"/lands/1/owner/{OWNER_Y}").json()
        assert yes["is_owner"] is True
        assert no["is_owner"] is False

    def test_events(self) -> None:
        _register()
        client.post("/lands/1/verify", headers=_as(ADMIN))
        events = client.get("/events").json()
        assert [e["event"] for e in events] == ["LandRegistered", "LandVerified"]
        assert client.get("/events", params={"land_id": 2}).json() == []


class TestAdminEndpoints:
    def test_get_admin(self) -> None:
        assert client.get("/admin").json() == {"admin": ADMIN}

    def test_transfer_admin(self) -> None:
        resp = client.post(
            "/admin/transfer", json={"new_admin": OWNER_Z}, headers=_as(ADMIN)
        )
        assert resp.status_code == 200
        assert client.get("/admin").json() == {"admin": OWNER_Z}
        assert client.post("/lands", json=LAND_1, headers=_as(ADMIN)).status_code == 403

    def test_transfer_admin_by_non_admin_is_403(self) -> None:
        resp = client.post(
            "/admin/transfer", json={"new_admin": OWNER_Z}, headers=_as(OWNER_X)
        )
        assert resp.status_code == 403
