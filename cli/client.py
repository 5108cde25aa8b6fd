# ============================================================================
# ORCHESTRATOR HTTP CLIENT
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: CLI - Async HTTP client for the wake API
# PURPOSE: Talk to a running orchestrator from the CLI
# CREATED: 09 OCT 2026
# ============================================================================
"""
Orchestrator HTTP Client

Async httpx client for the /api endpoints. Request methods return
(status_code, response_dict) tuples and leave formatting to the caller;
transport failures are mapped to 502 (unreachable) and 504 (timeout).

get_status_snapshot() is the exception: it raises on failure so it can be
used directly as a MonitorLoop status source.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

from core.models import StatusSnapshot

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(connect=10.0, read=30.0, write=10.0, pool=10.0)
# A waiting wake spends its timeout once per service in the resolved order;
# the server bounds the request, so the read is unbounded here
WAIT_TIMEOUT = httpx.Timeout(10.0, read=None)

Target = Union[str, List[str]]


class OrchestratorClientError(Exception):
    """Request to the orchestrator failed."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code


class OrchestratorClient:
    """Async HTTP client for the wake orchestrator API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: Optional[httpx.Timeout] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout or DEFAULT_TIMEOUT
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> Dict[str, str]:
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        timeout: Optional[httpx.Timeout] = None,
    ) -> Tuple[int, Dict[str, Any]]:
        """
        Make a request to the orchestrator API.

        Returns (status_code, response_body_dict).
        On connection failure, returns (502, error_dict).
        """
        url = f"{self._base_url}{path}"
        params = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            async with httpx.AsyncClient(
                timeout=timeout or self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.request(
                    method, url, json=json_body, params=params, headers=self._headers()
                )

            try:
                body = resp.json()
            except ValueError:
                body = {"success": False, "error": resp.text or f"HTTP {resp.status_code}"}

            if not isinstance(body, dict):
                body = {"success": resp.is_success, "data": body}

            if resp.status_code >= 500:
                logger.error(f"Orchestrator error {resp.status_code}: {path} -> {body}")

            return resp.status_code, body

        except httpx.ConnectError as e:
            logger.debug(f"Cannot reach orchestrator at {url}: {e}")
            return 502, {
                "success": False,
                "error": f"Could not connect to orchestrator at {self._base_url}. Is it running?",
            }
        except httpx.TimeoutException as e:
            logger.debug(f"Orchestrator timeout: {url}: {e}")
            return 504, {"success": False, "error": f"Orchestrator timeout: {e}"}
        except httpx.HTTPError as e:
            logger.debug(f"HTTP error talking to orchestrator: {e}")
            return 502, {"success": False, "error": f"Request failed: {e}"}

    # ------------------------------------------------------------------
    # SERVICES
    # ------------------------------------------------------------------

    async def status(
        self, environment: Optional[str] = None, service: Optional[str] = None
    ) -> Tuple[int, Dict[str, Any]]:
        """GET /api/status"""
        return await self._request(
            "GET", "/api/status", params={"environment": environment, "service": service}
        )

    async def health(
        self, environment: Optional[str] = None, service: Optional[str] = None
    ) -> Tuple[int, Dict[str, Any]]:
        """GET /api/health"""
        return await self._request(
            "GET", "/api/health", params={"environment": environment, "service": service}
        )

    async def wake(
        self,
        target: Target = "all",
        environment: Optional[str] = None,
        wait: bool = True,
        timeout: int = 300,
    ) -> Tuple[int, Dict[str, Any]]:
        """POST /api/wake (no read timeout while waiting)."""
        return await self._request(
            "POST",
            "/api/wake",
            json_body={
                "target": target,
                "environment": environment,
                "wait": wait,
                "timeout": timeout,
            },
            timeout=WAIT_TIMEOUT if wait else None,
        )

    # ------------------------------------------------------------------
    # REGISTRY
    # ------------------------------------------------------------------

    async def registry(self, environment: Optional[str] = None) -> Tuple[int, Dict[str, Any]]:
        """GET /api/registry"""
        return await self._request("GET", "/api/registry", params={"environment": environment})

    async def reload(self) -> Tuple[int, Dict[str, Any]]:
        """POST /api/reload"""
        return await self._request("POST", "/api/reload")

    async def ping(self) -> bool:
        """True if the orchestrator answers /livez."""
        code, _ = await self._request("GET", "/livez")
        return code == 200

    # ------------------------------------------------------------------
    # MONITOR SOURCE
    # ------------------------------------------------------------------

    async def get_status_snapshot(
        self, environment: Optional[str] = None, service: Optional[str] = None
    ) -> StatusSnapshot:
        """
        Status as a StatusSnapshot.

        Raises:
            OrchestratorClientError: Non-200 response or transport failure
        """
        code, body = await self.status(environment, service)
        if code != 200:
            raise OrchestratorClientError(code, body.get("error", "status request failed"))
        return StatusSnapshot.from_dict(body)


__all__ = ["OrchestratorClient", "OrchestratorClientError"]
