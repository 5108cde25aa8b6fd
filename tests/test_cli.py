# ============================================================================
# CLI TESTS
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Tests - wakeorch command-line interface
# PURPOSE: Verify the HTTP client, configuration layering and local commands
# CREATED: 14 OCT 2026
# ============================================================================
"""
CLI Tests

Covers:
1. OrchestratorClient: (status, body) tuples, 502/504 mapping, auth header
2. get_status_snapshot() raises on non-200
3. CliConfig: file, environment overrides, save
4. Local commands: validate, order, status and wake against a registry file
5. Output formatting helpers and per-poll monitor tables

Run with:
    pytest tests/test_cli.py -v
"""

import asyncio
import io
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from cli.client import OrchestratorClient, OrchestratorClientError
from cli.config import CliConfig, CliConfigError
from cli.main import main, parse_target
from cli.render import Console, ConsoleMonitorRenderer, format_duration
from core.contracts import ServiceState
from core.models import ProbeResult, ServiceStatus, StatusSnapshot
from orchestrator.monitor import StateTransition


# ============================================================================
# FIXTURES
# ============================================================================

REGISTRY_YAML = """
services:
  dev:
    auth:
      url: http://auth.dev
      healthPath: /health
    payment:
      url: http://payment.dev
      healthPath: /health
      dependsOn: [auth]
    consumer:
      url: http://consumer.dev
      healthPath: /health
      dependsOn: [payment]
"""

STATUS_BODY = {
    "success": True,
    "environment": "dev",
    "services": [
        {"name": "auth", "status": "live", "url": "http://auth.dev", "last_wake_time": None},
    ],
    "summary": {"live": 1},
    "timestamp": "2026-10-14T12:00:00+00:00",
}


@pytest.fixture
def registry_file(tmp_path):
    path = tmp_path / "services.yaml"
    path.write_text(REGISTRY_YAML)
    return str(path)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the CLI at an empty config file and clear WAKEORCH_* variables."""
    for name in ("WAKEORCH_URL", "WAKEORCH_TOKEN", "WAKEORCH_ENV", "WAKEORCH_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    return str(tmp_path / "config.json")


def _client(handler, token=None):
    return OrchestratorClient(
        "http://orchestrator.local/",
        token=token,
        transport=httpx.MockTransport(handler),
    )


# ============================================================================
# HTTP CLIENT
# ============================================================================

class TestOrchestratorClient:

    def test_status_returns_code_and_body(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=STATUS_BODY)

        code, body = asyncio.run(_client(handler).status("dev"))

        assert code == 200
        assert body["environment"] == "dev"
        assert seen[0].url.path == "/api/status"
        assert seen[0].url.params.get("environment") == "dev"
        assert "service" not in seen[0].url.params

    def test_token_sent_as_bearer(self):
        seen = []

        def handler(request):
            seen.append(request.headers.get("Authorization"))
            return httpx.Response(200, json=STATUS_BODY)

        asyncio.run(_client(handler, token="dev-token").status())

        assert seen == ["Bearer dev-token"]

    def test_wake_sends_body(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(207, json={"success": False, "services": []})

        code, body = asyncio.run(_client(handler).wake(["auth", "payment"], "staging", wait=False))

        assert code == 207
        assert seen == [{
            "target": ["auth", "payment"],
            "environment": "staging",
            "wait": False,
            "timeout": 300,
        }]

    def test_waiting_wake_has_no_read_timeout(self):
        seen = []

        def handler(request):
            seen.append(request.extensions["timeout"])
            return httpx.Response(200, json={"success": True, "services": []})

        asyncio.run(_client(handler).wake(["auth", "payment", "consumer"], wait=True, timeout=1))

        # Three services may each spend the full one-second budget
        assert seen[0]["read"] is None
        assert seen[0]["connect"] == 10.0

    def test_non_waiting_wake_uses_default_timeout(self):
        seen = []

        def handler(request):
            seen.append(request.extensions["timeout"])
            return httpx.Response(200, json={"success": True, "services": []})

        asyncio.run(_client(handler).wake("auth", wait=False))

        assert seen[0]["read"] == 30.0

    def test_connect_error_maps_to_502(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        code, body = asyncio.run(_client(handler).status())

        assert code == 502
        assert body["success"] is False
        assert "Is it running?" in body["error"]

    def test_timeout_maps_to_504(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        code, body = asyncio.run(_client(handler).registry())

        assert code == 504
        assert body["success"] is False

    def test_non_json_body_wrapped(self):
        code, body = asyncio.run(
            _client(lambda request: httpx.Response(500, text="Internal Server Error")).reload()
        )

        assert code == 500
        assert body == {"success": False, "error": "Internal Server Error"}

    def test_ping(self):
        assert asyncio.run(_client(lambda r: httpx.Response(200, json={"status": "alive"})).ping())

    def test_status_snapshot(self):
        snapshot = asyncio.run(
            _client(lambda r: httpx.Response(200, json=STATUS_BODY)).get_status_snapshot("dev")
        )

        assert snapshot.environment == "dev"
        assert snapshot.states() == {"auth": ServiceState.LIVE}

    def test_status_snapshot_raises_on_error(self):
        def handler(request):
            return httpx.Response(401, json={"success": False, "error": "Missing token"})

        with pytest.raises(OrchestratorClientError) as exc:
            asyncio.run(_client(handler).get_status_snapshot())

        assert exc.value.status_code == 401
        assert "Missing token" in str(exc.value)


# ============================================================================
# CONFIGURATION
# ============================================================================

class TestCliConfig:

    def test_defaults_when_file_missing(self, isolated_config):
        config = CliConfig.load(isolated_config)

        assert config.orchestrator_url == "http://localhost:3000"
        assert config.environment == "dev"
        assert config.auto_wait is True

    def test_file_then_environment(self, isolated_config, monkeypatch):
        CliConfig(orchestrator_url="http://saved:3000", token="saved", environment="staging").save(
            isolated_config
        )
        monkeypatch.setenv("WAKEORCH_TOKEN", "from-env")

        config = CliConfig.load(isolated_config)

        assert config.orchestrator_url == "http://saved:3000"
        assert config.environment == "staging"
        assert config.token == "from-env"

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"environment": "prod", "colour": "blue"}))

        assert CliConfig.from_file(path).environment == "prod"

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(CliConfigError):
            CliConfig.from_file(path)


# ============================================================================
# COMMANDS
# ============================================================================

class TestParseTarget:

    @pytest.mark.parametrize("value, expected", [
        (None, "all"),
        ("", "all"),
        ("auth", "auth"),
        ("auth,payment", ["auth", "payment"]),
        ("auth, ,payment,", ["auth", "payment"]),
    ])
    def test_parse_target(self, value, expected):
        assert parse_target(value) == expected


class TestLocalCommands:

    def test_validate_ok(self, registry_file, isolated_config, capsys):
        code = main(["validate", registry_file, "--config", isolated_config])

        assert code == 0
        out = capsys.readouterr().out
        assert "Registry valid" in out
        assert "Total services: 3" in out

    def test_validate_invalid(self, tmp_path, isolated_config, capsys):
        path = tmp_path / "broken.yaml"
        path.write_text("services:\n  dev:\n    auth:\n      url: http://auth.dev\n")

        code = main(["validate", str(path), "--config", isolated_config])

        assert code == 1
        assert "healthPath" in capsys.readouterr().out

    def test_order(self, registry_file, isolated_config, capsys):
        code = main([
            "order", "consumer", "--registry", registry_file,
            "--config", isolated_config, "--format", "json",
        ])

        assert code == 0
        body = json.loads(capsys.readouterr().out)
        assert body["order"] == ["auth", "payment", "consumer"]

    def test_order_cycle(self, tmp_path, isolated_config, capsys):
        path = tmp_path / "cycle.yaml"
        path.write_text(
            "services:\n  dev:\n"
            "    a: {url: 'http://a', healthPath: /h, dependsOn: [b]}\n"
            "    b: {url: 'http://b', healthPath: /h, dependsOn: [a]}\n"
        )

        code = main(["order", "a", "--registry", str(path), "--config", isolated_config])

        assert code == 1
        assert "Circular dependency" in capsys.readouterr().out

    def test_local_wake(self, registry_file, isolated_config, capsys):
        probe = AsyncMock(return_value=ProbeResult(state=ServiceState.LIVE, status_code=200))

        with patch("orchestrator.probe.HealthProber.probe", probe):
            code = main([
                "wake", "payment", "--registry", registry_file,
                "--no-wait", "--config", isolated_config, "-f", "json",
            ])

        assert code == 0
        body = json.loads(capsys.readouterr().out)
        assert [s["name"] for s in body["services"]] == ["auth", "payment"]
        assert probe.await_count == 2

    def test_local_wake_partial_failure(self, registry_file, isolated_config, capsys):
        probe = AsyncMock(return_value=ProbeResult(state=ServiceState.DEAD, error="refused"))

        with patch("orchestrator.probe.HealthProber.probe", probe):
            code = main([
                "wake", "auth", "--registry", registry_file,
                "--no-wait", "--config", isolated_config,
            ])

        assert code == 1
        assert "Some services are not live" in capsys.readouterr().out

    def test_local_status(self, registry_file, isolated_config, capsys):
        probe = AsyncMock(return_value=ProbeResult(state=ServiceState.LIVE, status_code=200))

        with patch("orchestrator.probe.HealthProber.probe", probe):
            code = main(["status", "--registry", registry_file, "--config", isolated_config])

        assert code == 0
        out = capsys.readouterr().out
        assert "SERVICE" in out
        assert "live: 3" in out

    def test_remote_status_unreachable(self, isolated_config, capsys):
        with patch(
            "cli.client.OrchestratorClient.status",
            AsyncMock(return_value=(502, {"success": False, "error": "Could not connect"})),
        ):
            code = main(["status", "--config", isolated_config])

        assert code == 1
        assert "Could not connect" in capsys.readouterr().out


# ============================================================================
# RENDERING
# ============================================================================

class TestRendering:

    @pytest.mark.parametrize("ms, expected", [
        (None, "-"),
        (350, "350ms"),
        (4200, "4.2s"),
        (125000, "2m 5s"),
    ])
    def test_format_duration(self, ms, expected):
        assert format_duration(ms) == expected

    def test_error_as_json(self):
        out = io.StringIO()
        Console("json", out).error("boom")
        assert json.loads(out.getvalue()) == {"success": False, "error": "boom"}

    def test_wake_resolution_error(self):
        out = io.StringIO()
        Console("table", out).wake({
            "success": False,
            "target": "a",
            "environment": "dev",
            "error": "Circular dependency detected involving a (a -> b -> a)",
            "services": [],
        })
        assert "Circular dependency" in out.getvalue()


class TestMonitorRendering:

    def _snapshot(self, **states):
        return StatusSnapshot(
            services=[
                ServiceStatus(
                    name=name,
                    state=state,
                    url=f"http://{name}.dev",
                    response_time_ms=120.0,
                )
                for name, state in states.items()
            ],
            environment="dev",
        )

    def test_table_lists_every_service(self):
        out = io.StringIO()
        snapshot = self._snapshot(auth=ServiceState.LIVE, payment=ServiceState.WAKING)
        transition = StateTransition("payment", ServiceState.DEAD, ServiceState.WAKING)

        ConsoleMonitorRenderer(Console("table", out)).render_snapshot(
            snapshot, [transition], poll=1, final=False
        )

        text = out.getvalue()
        assert "poll 1" in text
        assert "auth" in text and "✓ live" in text
        assert "payment" in text and "⟳ waking" in text
        assert "http://payment.dev" in text
        assert "120ms" in text
        assert "payment: dead -> waking" in text
        assert "All services are live." not in text

    def test_all_live_noted(self):
        out = io.StringIO()
        snapshot = self._snapshot(auth=ServiceState.LIVE)

        ConsoleMonitorRenderer(Console("table", out)).render_snapshot(
            snapshot, [], poll=2, final=True
        )

        text = out.getvalue()
        assert "final" in text
        assert "All services are live." in text

    def test_json_line_per_poll(self):
        out = io.StringIO()
        snapshot = self._snapshot(auth=ServiceState.DEAD)

        ConsoleMonitorRenderer(Console("json", out)).render_snapshot(
            snapshot, [], poll=3, final=False
        )

        payload = json.loads(out.getvalue())
        assert payload["poll"] == 3
        assert payload["services"][0]["name"] == "auth"
