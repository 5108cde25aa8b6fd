# ============================================================================
# HEALTH PROBE TESTS
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Tests - HTTP probe classification
# PURPOSE: Verify raw and threshold classification of probe outcomes
# CREATED: 13 OCT 2026
# ============================================================================
"""
Health Probe Tests

Covers:
1. Raw classification: <500 LIVE, >=500 FAILED, no response DEAD
2. Threshold classification: 5xx and slow responses read as WAKING
3. Timeouts and connection failures are DEAD, never raised
4. Protocol errors raise ProbeError
5. Health URL joining and uptime extraction

Uses httpx.MockTransport, no network access.

Run with:
    pytest tests/test_probe.py -v
"""

import asyncio

import httpx
import pytest

from core.config import ProbeDefaults
from core.contracts import ServiceState
from core.errors import ProbeError
from core.models import ProbeResult, ServiceDefinition
from orchestrator.probe import (
    HealthProber,
    classify_for_wake,
    classify_response,
    health_url,
)


# ============================================================================
# FIXTURES
# ============================================================================

def _service(url="http://auth.local", health_path="/health", name="auth"):
    return ServiceDefinition(name=name, url=url, health_path=health_path)


def _prober(handler):
    return HealthProber(ProbeDefaults(), transport=httpx.MockTransport(handler))


def _probe(handler, service=None, timeout=None):
    return asyncio.run(_prober(handler).probe(service or _service(), timeout))


# ============================================================================
# RAW CLASSIFICATION
# ============================================================================

class TestClassifyResponse:

    @pytest.mark.parametrize("code", [200, 204, 301, 401, 404, 499])
    def test_below_500_is_live(self, code):
        assert classify_response(code) == ServiceState.LIVE

    @pytest.mark.parametrize("code", [500, 502, 503, 504])
    def test_5xx_is_failed(self, code):
        assert classify_response(code) == ServiceState.FAILED

    def test_no_response_is_dead(self):
        assert classify_response(None) == ServiceState.DEAD


class TestClassifyForWake:

    def test_5xx_reads_as_waking(self):
        probe = ProbeResult(state=ServiceState.FAILED, status_code=503, response_time_ms=20)
        assert classify_for_wake(probe, 5000) == ServiceState.WAKING

    def test_slow_live_reads_as_waking(self):
        probe = ProbeResult(state=ServiceState.LIVE, status_code=200, response_time_ms=6000)
        assert classify_for_wake(probe, 5000) == ServiceState.WAKING

    def test_fast_live_stays_live(self):
        probe = ProbeResult(state=ServiceState.LIVE, status_code=200, response_time_ms=40)
        assert classify_for_wake(probe, 5000) == ServiceState.LIVE

    def test_404_is_live(self):
        probe = ProbeResult(state=ServiceState.LIVE, status_code=404, response_time_ms=40)
        assert classify_for_wake(probe, 5000) == ServiceState.LIVE

    def test_dead_stays_dead(self):
        probe = ProbeResult(state=ServiceState.DEAD, response_time_ms=10000, error="Timeout")
        assert classify_for_wake(probe, 5000) == ServiceState.DEAD


# ============================================================================
# PROBER
# ============================================================================

class TestHealthProber:

    def test_200_is_live(self):
        result = _probe(lambda request: httpx.Response(200, json={"status": "ok"}))

        assert result.state == ServiceState.LIVE
        assert result.status_code == 200
        assert result.error is None
        assert result.response_time_ms >= 0

    def test_404_is_live(self):
        result = _probe(lambda request: httpx.Response(404))
        assert result.state == ServiceState.LIVE

    def test_503_is_failed_on_raw_probe(self):
        result = _probe(lambda request: httpx.Response(503))

        assert result.state == ServiceState.FAILED
        assert result.status_code == 503
        assert result.error == "HTTP 503"

    def test_redirect_not_followed(self):
        calls = []

        def handler(request):
            calls.append(request.url)
            return httpx.Response(302, headers={"Location": "http://elsewhere/"})

        result = _probe(handler)

        assert result.state == ServiceState.LIVE
        assert len(calls) == 1

    def test_connect_error_is_dead(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        result = _probe(handler)

        assert result.state == ServiceState.DEAD
        assert result.status_code is None
        assert "Connection refused" in result.error

    def test_timeout_is_dead(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        result = _probe(handler, timeout=2.5)

        assert result.state == ServiceState.DEAD
        assert result.error == "Timeout after 2.5s"
        assert not result.responded

    def test_protocol_error_raises(self):
        def handler(request):
            raise httpx.RemoteProtocolError("malformed status line", request=request)

        with pytest.raises(ProbeError) as exc:
            _probe(handler)
        assert exc.value.service == "auth"

    def test_unsupported_protocol_raises(self):
        def handler(request):
            raise httpx.UnsupportedProtocol("ftp not supported", request=request)

        with pytest.raises(ProbeError, match="UnsupportedProtocol"):
            _probe(handler, _service(url="ftp://auth.local"))

    def test_requests_joined_health_url(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200)

        _probe(handler, _service(url="http://svc.local/base/", health_path="health"))

        assert seen == ["http://svc.local/base/health"]

    def test_uptime_extracted(self):
        result = _probe(lambda request: httpx.Response(200, json={"uptime": 12.5}))
        assert result.uptime == 12.5

    @pytest.mark.parametrize("payload", [{"uptime": "long"}, {"uptime": True}, [1, 2]])
    def test_uptime_ignored_when_not_numeric(self, payload):
        result = _probe(lambda request: httpx.Response(200, json=payload))
        assert result.uptime is None

    def test_uptime_ignored_for_plain_text(self):
        result = _probe(lambda request: httpx.Response(200, text="OK"))
        assert result.uptime is None


class TestHealthUrl:

    def test_absolute_path_replaces_base_path(self):
        url = health_url(_service(url="http://svc.local/base", health_path="/health"))
        assert str(url) == "http://svc.local/health"

    def test_trailing_slash_keeps_base_path(self):
        url = health_url(_service(url="http://svc.local/api/", health_path="status"))
        assert str(url) == "http://svc.local/api/status"
