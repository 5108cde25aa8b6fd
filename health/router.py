# ============================================================================
# HEALTH CHECK ROUTER
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Infrastructure - FastAPI health check endpoints
# PURPOSE: Liveness, readiness and health of the orchestrator process
# CREATED: 06 OCT 2026
# ============================================================================
"""
Health Check Router

Endpoints:
    GET /livez   - Liveness probe (is the process alive?)
                   Always 200 while the process can answer.

    GET /readyz  - Readiness probe (can we accept wake requests?)
                   200 if all required checks pass, 503 otherwise.

    GET /health  - Full health status: uptime, registry statistics and
                   every check result.

    GET /health/{check_name} - Single check status

Response Codes:
    200 - Healthy
    206 - Degraded (partial content)
    503 - Unhealthy (service unavailable)
"""

import logging
import time
from typing import List, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from health.core import HealthCheck, HealthStatus
from health.executor import HealthCheckExecutor
from __version__ import __version__, BUILD_DATE

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["Health"])

# Set during app startup
_checks: List[HealthCheck] = []
_registry = None
_started_at: float = time.monotonic()


def set_health_context(checks: List[HealthCheck], registry=None) -> None:
    """Set checks and registry for health endpoints (called from main.py)."""
    global _checks, _registry, _started_at
    _checks = list(checks)
    _registry = registry
    _started_at = time.monotonic()


def uptime_seconds() -> float:
    return round(time.monotonic() - _started_at, 3)


# ============================================================================
# LIVENESS PROBE
# ============================================================================

@health_router.get("/livez")
async def liveness_probe():
    """Returns 200 if the process is alive. No checks are run."""
    return {"status": "alive", "version": __version__, "build_date": BUILD_DATE}


# ============================================================================
# READINESS PROBE
# ============================================================================

@health_router.get("/readyz")
async def readiness_probe():
    """Returns 200 once required checks (registry loaded) pass."""
    if not _checks:
        return {"status": "ready", "message": "No checks registered"}

    executor = HealthCheckExecutor(_checks, overall_timeout=5.0)
    result = await executor.execute_required()

    if result.status == HealthStatus.UNHEALTHY:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "checks": {
                    name: check.to_dict()
                    for name, check in result.checks.items()
                    if check.status == HealthStatus.UNHEALTHY
                },
                "total_duration_ms": round(result.total_duration_ms, 2),
            },
        )

    return {
        "status": "ready",
        "checks_passed": len(result.checks),
        "total_duration_ms": round(result.total_duration_ms, 2),
    }


# ============================================================================
# FULL HEALTH CHECK
# ============================================================================

@health_router.get("/health")
async def full_health_check():
    """
    Orchestrator health.

    Returns:
        200: All checks healthy
        206: Some checks degraded
        503: Critical checks failing
    """
    executor = HealthCheckExecutor(_checks, overall_timeout=30.0)
    result = await executor.execute_all()

    response_body = result.to_dict()
    response_body["version"] = __version__
    response_body["build_date"] = BUILD_DATE
    response_body["uptime_seconds"] = uptime_seconds()
    response_body["registry"] = _registry.get_stats().to_dict() if _registry else None

    return JSONResponse(status_code=result.status.http_code, content=response_body)


# ============================================================================
# SINGLE CHECK
# ============================================================================

@health_router.get("/health/{check_name}")
async def single_health_check(check_name: str):
    """Run a single health check by name."""
    executor = HealthCheckExecutor(_checks)
    result = await executor.execute_single(check_name)

    if result is None:
        return JSONResponse(
            status_code=404,
            content={"error": f"Health check not found: {check_name}"},
        )

    return JSONResponse(status_code=result.status.http_code, content=result.to_dict())


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "health_router",
    "set_health_context",
    "uptime_seconds",
]
