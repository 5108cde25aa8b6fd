# ============================================================================
# API ROUTES
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - FastAPI route definitions
# PURPOSE: HTTP endpoints for status, health, wake and registry management
# CREATED: 07 OCT 2026
# ============================================================================
"""
API Routes

Mounted under /api by main.py:

    GET  /api/status     - Threshold-classified status (re-probes)
    GET  /api/health     - Raw diagnostics (read-only)
    POST /api/wake       - Wake services in dependency order
    GET  /api/registry   - Registry statistics and definitions
    POST /api/reload     - Reload the registry file

Every error response uses the envelope {"success": false, "error": ...}.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.errors import RegistryError
from core.logging import log_context
from core.models import utc_now
from .schemas import (
    ErrorResponse,
    RegistryResponse,
    ReloadResponse,
    WakeRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================
# These will be set by the main app at startup

_registry = None
_orchestrator = None
_default_environment = "dev"
_require_auth = False


def set_services(registry, orchestrator, default_environment: str = "dev", require_auth: bool = False):
    """Set service instances for dependency injection."""
    global _registry, _orchestrator, _default_environment, _require_auth
    _registry = registry
    _orchestrator = orchestrator
    _default_environment = default_environment
    _require_auth = require_auth


def get_registry():
    if _registry is None or not _registry.is_loaded:
        raise HTTPException(503, "Registry not loaded")
    return _registry


def get_orchestrator():
    if _orchestrator is None:
        raise HTTPException(503, "Orchestrator not initialized")
    return _orchestrator


def validate_token(authorization: Optional[str] = Header(None)) -> str:
    """
    Pass-through auth boundary.

    With REQUIRE_AUTH set, a bearer token must be present; it is not
    verified. Returns the caller id (the token, or "anonymous").
    """
    token = None
    if authorization:
        scheme, _, credential = authorization.strip().partition(" ")
        if scheme.lower() == "bearer":
            token = credential.strip() or None

    if _require_auth and not token:
        raise HTTPException(401, "Missing or invalid authentication token")

    return token or "anonymous"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render HTTP and validation errors with the error envelope."""

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        return _error(422, f"Invalid request: {location} {first.get('msg', '')}".strip())


# ============================================================================
# STATUS & HEALTH
# ============================================================================

@router.get("/status", tags=["Services"], responses={503: {"model": ErrorResponse}})
async def get_status(
    environment: Optional[str] = Query(None, description="Environment name"),
    service: Optional[str] = Query(None, description="Service or group name"),
    caller: str = Depends(validate_token),
):
    """
    Current status of services.

    Re-probes every selected service; 5xx and slow responses read as waking.
    """
    orchestrator = get_orchestrator()
    get_registry()
    environment = environment or _default_environment

    with log_context(caller=caller):
        snapshot = await orchestrator.get_status(service, environment)

    return {"success": True, **snapshot.to_dict()}


@router.get("/health", tags=["Services"], responses={503: {"model": ErrorResponse}})
async def get_health(
    environment: Optional[str] = Query(None, description="Environment name"),
    service: Optional[str] = Query(None, description="Service or group name"),
    caller: str = Depends(validate_token),
):
    """Detailed health diagnostics; does not change stored states."""
    orchestrator = get_orchestrator()
    get_registry()
    environment = environment or _default_environment

    with log_context(caller=caller):
        snapshot = await orchestrator.get_health(service, environment)

    return {"success": True, **snapshot.to_dict()}


# ============================================================================
# WAKE
# ============================================================================

@router.post(
    "/wake",
    tags=["Services"],
    responses={
        200: {"description": "All services live"},
        207: {"description": "Some services not live"},
        400: {"model": ErrorResponse, "description": "Missing target"},
        422: {"model": ErrorResponse, "description": "Wake order could not be resolved"},
    },
)
async def wake_services(request: WakeRequest, caller: str = Depends(validate_token)):
    """
    Wake services on demand.

    Returns 200 when every service ended live, 207 when some did not, and
    422 when the wake order could not be resolved (e.g. a dependency cycle).
    """
    if not request.target:
        return _error(400, "Missing required field: target")

    orchestrator = get_orchestrator()
    get_registry()
    environment = request.environment or _default_environment

    with log_context(caller=caller):
        outcome = await orchestrator.wake(
            request.target,
            environment,
            wait=request.wait,
            timeout_seconds=request.timeout,
        )

    if outcome.success:
        status_code = 200
    elif outcome.error and not outcome.services:
        status_code = 422
    else:
        status_code = 207

    body = outcome.to_dict()
    body["timestamp"] = utc_now().isoformat()
    return JSONResponse(status_code=status_code, content=body)


# ============================================================================
# REGISTRY
# ============================================================================

@router.get("/registry", response_model=RegistryResponse, tags=["Registry"])
async def get_registry_view(
    environment: Optional[str] = Query(None, description="Optional environment filter"),
    caller: str = Depends(validate_token),
):
    """Registry statistics and service definitions (read-only)."""
    registry = get_registry()

    if environment:
        services = [s.to_dict() for s in registry.get_services(environment)]
    else:
        services = {
            env: [s.to_dict() for s in registry.get_services(env)]
            for env in registry.list_environments()
        }

    return RegistryResponse(
        stats=registry.get_stats().to_dict(),
        services=services,
        groups={name: registry.get_group(name, environment) for name in registry.list_groups(environment)},
        timestamp=utc_now().isoformat(),
    )


@router.post(
    "/reload",
    response_model=ReloadResponse,
    tags=["Registry"],
    responses={500: {"model": ErrorResponse}},
)
async def reload_registry(caller: str = Depends(validate_token)):
    """
    Reload the registry file.

    On failure the previous registry stays active and service states are kept.
    """
    if _registry is None:
        raise HTTPException(503, "Registry not initialized")

    logger.info(f"Registry reload requested by {caller}")
    try:
        _registry.reload()
    except RegistryError as e:
        logger.error(f"Registry reload failed: {e}")
        return _error(500, str(e))

    stats = _registry.get_stats()
    logger.info(f"Registry reloaded: {stats.total_services} services")
    return ReloadResponse(message="Registry reloaded successfully", stats=stats.to_dict())


__all__ = [
    "router",
    "set_services",
    "validate_token",
    "register_exception_handlers",
]
