# ============================================================================
# HEALTH PROBE
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - HTTP liveness probes
# PURPOSE: Probe a service health endpoint and classify the response
# CREATED: 04 OCT 2026
# ============================================================================
"""
Health Probe

One bounded-timeout GET against <url> joined with <health_path>.

Base probe outcomes:
    HTTP status < 500          -> LIVE
    HTTP status >= 500         -> FAILED
    timeout / network failure  -> DEAD (no HTTP response)
    bad URL / protocol error   -> ProbeError

Two classifications sit on top of the base probe and are deliberately
kept apart:

    classify_response   raw, used for diagnostics (get_health)
    classify_for_wake   threshold, used by wake and get_status:
                        5xx -> WAKING, slow LIVE -> WAKING
"""

import time
from typing import Optional

import httpx

from core.config import ProbeDefaults
from core.contracts import ServiceState
from core.errors import ProbeError
from core.logging import ComponentType, get_logger
from core.models import ProbeResult, ServiceDefinition, utc_now

logger = get_logger(__name__, ComponentType.ORCHESTRATOR)


# ============================================================================
# CLASSIFICATION
# ============================================================================

def classify_response(status_code: Optional[int]) -> ServiceState:
    """Raw classification: <500 LIVE, >=500 FAILED, no response DEAD."""
    if status_code is None:
        return ServiceState.DEAD
    if status_code >= 500:
        return ServiceState.FAILED
    return ServiceState.LIVE


def classify_for_wake(probe: ProbeResult, slow_threshold_ms: float) -> ServiceState:
    """
    Threshold classification for the wake/status path.

    5xx and LIVE responses slower than slow_threshold_ms both read as WAKING.
    """
    if probe.responded and probe.status_code >= 500:
        return ServiceState.WAKING
    if probe.state == ServiceState.LIVE and probe.response_time_ms > slow_threshold_ms:
        return ServiceState.WAKING
    return probe.state


def health_url(service: ServiceDefinition) -> httpx.URL:
    """Join health_path onto the service url (RFC 3986)."""
    try:
        return httpx.URL(service.url).join(service.health_path)
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise ProbeError(service.name, f"invalid health URL: {e}") from e


def _read_uptime(response: httpx.Response) -> Optional[float]:
    """Pull a numeric uptime out of a JSON object payload, if there is one."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    uptime = payload.get("uptime")
    if isinstance(uptime, (int, float)) and not isinstance(uptime, bool):
        return float(uptime)
    return None


# ============================================================================
# PROBER
# ============================================================================

class HealthProber:
    """
    Issues health probes with httpx.

    Args:
        defaults: Probe timing defaults
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        defaults: Optional[ProbeDefaults] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.defaults = defaults or ProbeDefaults()
        self._transport = transport

    async def probe(
        self,
        service: ServiceDefinition,
        timeout: Optional[float] = None,
    ) -> ProbeResult:
        """
        Probe one service.

        Args:
            service: Service to probe
            timeout: Request timeout in seconds (defaults to the socket timeout)

        Returns:
            ProbeResult with the raw state

        Raises:
            ProbeError: URL malformed, scheme unsupported, or protocol violated
        """
        timeout = timeout if timeout is not None else self.defaults.socket_timeout_seconds
        url = health_url(service)

        logger.debug(f"[{utc_now().isoformat()}] GET {url} (service={service.name}, timeout={timeout}s)")

        started = time.monotonic()
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=httpx.Timeout(timeout),
                follow_redirects=False,
            ) as client:
                response = await client.get(url)
        except (
            httpx.UnsupportedProtocol,
            httpx.InvalidURL,
            httpx.ProtocolError,
            httpx.DecodingError,
        ) as e:
            raise ProbeError(service.name, f"{type(e).__name__}: {e}") from e
        except httpx.TimeoutException as e:
            elapsed_ms = (time.monotonic() - started) * 1000
            logger.info(f"{service.name}: timed out after {elapsed_ms:.0f}ms")
            return ProbeResult(
                state=ServiceState.DEAD,
                response_time_ms=elapsed_ms,
                error=f"Timeout after {timeout}s",
            )
        except httpx.TransportError as e:
            elapsed_ms = (time.monotonic() - started) * 1000
            logger.info(f"{service.name}: unreachable ({type(e).__name__}: {e})")
            return ProbeResult(
                state=ServiceState.DEAD,
                response_time_ms=elapsed_ms,
                error=str(e) or type(e).__name__,
            )

        elapsed_ms = (time.monotonic() - started) * 1000
        state = classify_response(response.status_code)

        logger.info(
            f"{service.name}: HTTP {response.status_code} in {elapsed_ms:.0f}ms -> {state.value}"
        )

        return ProbeResult(
            state=state,
            status_code=response.status_code,
            response_time_ms=elapsed_ms,
            error=f"HTTP {response.status_code}" if state == ServiceState.FAILED else None,
            uptime=_read_uptime(response),
        )


__all__ = [
    "HealthProber",
    "classify_response",
    "classify_for_wake",
    "health_url",
]
