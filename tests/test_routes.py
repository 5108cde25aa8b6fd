# ============================================================================
# API ROUTE TESTS
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Tests - REST endpoints
# PURPOSE: Verify status codes, envelopes and auth of the /api routes
# CREATED: 14 OCT 2026
# ============================================================================
"""
API Route Tests

Covers:
1. POST /api/wake: 200 all live, 207 partial, 400 missing target, 422 cycle
2. Pass-through auth: 401 without a bearer token when required
3. GET /api/status and /api/health payloads
4. GET /api/registry and POST /api/reload (including a failed reload)
5. /livez, /readyz, /health on the process health router
6. create_app() startup against a registry file

Uses FastAPI TestClient and httpx.MockTransport, no network access.

Run with:
    pytest tests/test_routes.py -v
"""

import httpx
import pytest
import yaml
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import register_exception_handlers, router, set_services
from core.config import ProbeDefaults, ServerConfig
from core.contracts import ServiceState
from health import default_checks, health_router, set_health_context
from orchestrator import HealthProber, Orchestrator
from registry import ServiceRegistry, load_registry


# ============================================================================
# FIXTURES
# ============================================================================

FAST = ProbeDefaults(wake_poll_interval_seconds=0.0)

REGISTRY = {
    "services": {
        "dev": {
            "auth": {"url": "http://auth.dev", "healthPath": "/health"},
            "payment": {"url": "http://payment.dev", "healthPath": "/health", "dependsOn": ["auth"]},
            "consumer": {"url": "http://consumer.dev", "healthPath": "/health", "dependsOn": ["payment"]},
        },
        "staging": {
            "auth": {"url": "http://auth.staging", "healthPath": "/health"},
        },
    },
    "groups": {"backend": ["auth", "payment"]},
}

CYCLIC = {
    "services": {
        "dev": {
            "a": {"url": "http://a.dev", "healthPath": "/health", "dependsOn": ["b"]},
            "b": {"url": "http://b.dev", "healthPath": "/health", "dependsOn": ["a"]},
        }
    }
}


def _handler(unhealthy=()):
    def handler(request):
        if request.url.host.split(".")[0] in unhealthy:
            return httpx.Response(503)
        return httpx.Response(200, json={"status": "ok"})
    return handler


def _make_test_app(registry, unhealthy=(), require_auth=False):
    """Create a test app with the API router and process health router."""
    prober = HealthProber(FAST, transport=httpx.MockTransport(_handler(unhealthy)))
    orchestrator = Orchestrator(registry, prober=prober, defaults=FAST)

    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(router, prefix="/api")
    set_services(registry, orchestrator, default_environment="dev", require_auth=require_auth)
    set_health_context(default_checks(registry, orchestrator), registry)
    return app, orchestrator


@pytest.fixture
def client():
    app, _ = _make_test_app(load_registry(REGISTRY))
    return TestClient(app)


@pytest.fixture
def registry_file(tmp_path):
    path = tmp_path / "services.yaml"
    path.write_text(yaml.safe_dump(REGISTRY, sort_keys=False))
    return path


# ============================================================================
# WAKE
# ============================================================================

class TestWakeEndpoint:

    def test_all_live_returns_200(self, client):
        resp = client.post("/api/wake", json={"target": "all"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert [s["name"] for s in body["services"]] == ["auth", "payment", "consumer"]
        assert body["summary"]["live"] == 3
        assert "timestamp" in body

    def test_partial_failure_returns_207(self):
        app, _ = _make_test_app(load_registry(REGISTRY), unhealthy=("payment",))
        client = TestClient(app)

        resp = client.post("/api/wake", json={"target": "all", "wait": False})

        assert resp.status_code == 207
        body = resp.json()
        assert body["success"] is False
        statuses = {s["name"]: s["status"] for s in body["services"]}
        assert statuses == {"auth": "live", "payment": "waking", "consumer": "live"}

    def test_missing_target_returns_400(self, client):
        resp = client.post("/api/wake", json={"environment": "dev"})

        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Missing required field: target"}

    def test_cycle_returns_422(self):
        app, _ = _make_test_app(load_registry(CYCLIC))
        client = TestClient(app)

        resp = client.post("/api/wake", json={"target": "a"})

        assert resp.status_code == 422
        body = resp.json()
        assert body["success"] is False
        assert "Circular dependency" in body["error"]

    def test_list_target_and_environment(self, client):
        resp = client.post("/api/wake", json={"target": ["auth"], "environment": "staging"})

        assert resp.status_code == 200
        assert resp.json()["environment"] == "staging"
        assert resp.json()["services"][0]["url"] == "http://auth.staging"

    def test_group_target(self, client):
        resp = client.post("/api/wake", json={"target": "backend"})
        assert [s["name"] for s in resp.json()["services"]] == ["auth", "payment"]

    def test_invalid_timeout_uses_error_envelope(self, client):
        resp = client.post("/api/wake", json={"target": "all", "timeout": 0})

        assert resp.status_code == 422
        assert resp.json()["success"] is False
        assert "timeout" in resp.json()["error"]


# ============================================================================
# AUTH
# ============================================================================

class TestAuth:

    @pytest.fixture
    def secured(self):
        app, _ = _make_test_app(load_registry(REGISTRY), require_auth=True)
        return TestClient(app)

    def test_missing_token_returns_401(self, secured):
        resp = secured.get("/api/status")

        assert resp.status_code == 401
        assert resp.json()["success"] is False

    def test_any_bearer_token_accepted(self, secured):
        resp = secured.get("/api/status", headers={"Authorization": "Bearer dev-token"})
        assert resp.status_code == 200

    def test_bearer_without_token_returns_401(self, secured):
        resp = secured.get("/api/status", headers={"Authorization": "Bearer"})
        assert resp.status_code == 401

    def test_non_bearer_scheme_returns_401(self, secured):
        resp = secured.get("/api/status", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert resp.status_code == 401

    def test_auth_optional_by_default(self, client):
        assert client.get("/api/status").status_code == 200


# ============================================================================
# STATUS & HEALTH
# ============================================================================

class TestStatusEndpoints:

    def test_status_all(self, client):
        body = client.get("/api/status").json()

        assert body["success"] is True
        assert body["environment"] == "dev"
        assert {s["status"] for s in body["services"]} == {"live"}
        assert body["summary"]["live"] == 3

    def test_status_single_service(self, client):
        body = client.get("/api/status", params={"service": "payment"}).json()
        assert [s["name"] for s in body["services"]] == ["payment"]

    def test_health_reports_raw_state(self):
        app, orchestrator = _make_test_app(load_registry(REGISTRY), unhealthy=("auth",))
        client = TestClient(app)

        body = client.get("/api/health", params={"service": "auth"}).json()

        row = body["services"][0]
        assert row["status"] == "failed"
        assert row["status_code"] == 503
        assert orchestrator.states() == {}

    def test_health_unknown_environment(self, client):
        body = client.get("/api/health", params={"environment": "prod"}).json()
        assert body["services"] == []


# ============================================================================
# REGISTRY
# ============================================================================

class TestRegistryEndpoints:

    def test_registry_all_environments(self, client):
        body = client.get("/api/registry").json()

        assert body["success"] is True
        assert body["stats"]["total_services"] == 4
        assert set(body["services"]) == {"dev", "staging"}
        assert body["groups"] == {"backend": ["auth", "payment"]}

    def test_registry_single_environment(self, client):
        body = client.get("/api/registry", params={"environment": "dev"}).json()

        assert [s["name"] for s in body["services"]] == ["auth", "payment", "consumer"]
        assert body["services"][1]["depends_on"] == ["auth"]

    def test_unloaded_registry_returns_503(self):
        app, _ = _make_test_app(ServiceRegistry())
        resp = TestClient(app).get("/api/registry")

        assert resp.status_code == 503
        assert resp.json() == {"success": False, "error": "Registry not loaded"}

    def test_reload(self, registry_file):
        registry = load_registry(registry_file)
        app, orchestrator = _make_test_app(registry)
        client = TestClient(app)
        client.post("/api/wake", json={"target": "auth"})

        doc = dict(REGISTRY)
        doc["services"] = {"dev": dict(REGISTRY["services"]["dev"])}
        registry_file.write_text(yaml.safe_dump(doc, sort_keys=False))

        resp = client.post("/api/reload")

        assert resp.status_code == 200
        assert resp.json()["stats"]["total_services"] == 3
        assert orchestrator.get_state("auth") == ServiceState.LIVE

    def test_failed_reload_keeps_registry(self, registry_file):
        registry = load_registry(registry_file)
        app, _ = _make_test_app(registry)
        client = TestClient(app)

        registry_file.write_text("services:\n  dev:\n    auth:\n      url: http://auth.dev\n")
        resp = client.post("/api/reload")

        assert resp.status_code == 500
        assert "healthPath" in resp.json()["error"]
        assert client.get("/api/registry").json()["stats"]["total_services"] == 4


# ============================================================================
# PROCESS HEALTH
# ============================================================================

class TestProcessHealth:

    def test_livez(self, client):
        assert client.get("/livez").json()["status"] == "alive"

    def test_readyz_with_registry(self, client):
        assert client.get("/readyz").status_code == 200

    def test_readyz_without_registry(self):
        app, _ = _make_test_app(ServiceRegistry())
        resp = TestClient(app).get("/readyz")

        assert resp.status_code == 503
        assert "registry" in resp.json()["checks"]

    def test_full_health(self, client):
        resp = client.get("/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["registry"]["total_services"] == 4
        assert body["uptime_seconds"] >= 0
        assert set(body["checks"]) == {"process", "registry", "service_states"}

    def test_failed_service_degrades_health(self):
        app, orchestrator = _make_test_app(load_registry(REGISTRY))
        client = TestClient(app)
        orchestrator._store.set_state("auth", "dev", ServiceState.FAILED)

        assert client.get("/health").status_code == 206
        assert client.get("/readyz").status_code == 200

    def test_unknown_single_check(self, client):
        assert client.get("/health/nope").status_code == 404


# ============================================================================
# APPLICATION STARTUP
# ============================================================================

class TestCreateApp:

    def test_startup_loads_registry(self, registry_file):
        from main import create_app

        app = create_app(ServerConfig(registry_file=str(registry_file)))

        with TestClient(app) as client:
            assert client.get("/").json()["service"] == "Wake Orchestrator"
            assert client.get("/api/registry").json()["stats"]["total_services"] == 4
            assert app.state.orchestrator.registry is app.state.registry

    def test_startup_fails_without_registry(self, tmp_path):
        from core.errors import RegistryLoadError
        from main import create_app

        app = create_app(ServerConfig(registry_file=str(tmp_path / "missing.yaml")))

        with pytest.raises(RegistryLoadError):
            with TestClient(app):
                pass
