"""Tests for the health router."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from coordinator.api.app import create_app
from coordinator.api.health import create_health_router
from coordinator.core.settings import CoordinatorSettings


def _app_with(checks) -> TestClient:
    app = FastAPI()
    app.include_router(create_health_router("svc", "1.0", checks=checks))
    return TestClient(app)


def _boom() -> dict:
    raise RuntimeError("db down")


class TestHealthRouter:
    def test_healthy(self):
        client = _app_with({"store": lambda: {"backend": "sqlite"}})
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["service"] == "svc"
        assert body["checks"]["store"]["details"] == {"backend": "sqlite"}

    def test_failed_check_is_unhealthy(self):
        client = _app_with({"store": _boom})
        resp = client.get("/health")
        assert resp.status_code == 503
        assert resp.json()["status"] == "unhealthy"
        assert resp.json()["checks"]["store"]["error"] == "db down"


class TestAppHealth:
    def test_store_check(self, db_path):
        app = create_app(settings=CoordinatorSettings(database_url=f"sqlite:///{db_path}"))
        with TestClient(app) as client:
            body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["service"] == "coordinator"
        assert body["checks"]["store"]["details"]["backend"] == "sqlite"
        assert body["checks"]["store"]["details"]["pool"]["closed"] is False
