# ============================================================================
# WAKE ORCHESTRATOR - MAIN APPLICATION
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - FastAPI application entry point
# PURPOSE: Compose registry and orchestrator and serve them over REST
# CREATED: 08 OCT 2026
# ============================================================================
"""
Wake Orchestrator Main Application

FastAPI application that:
1. Loads the service registry from REGISTRY_FILE
2. Builds one Orchestrator over it
3. Exposes status, health, wake and registry endpoints under /api
4. Exposes its own /livez, /readyz and /health

Usage:
    uvicorn main:app --host 0.0.0.0 --port 3000
    wakeorch serve
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from __version__ import __version__, BUILD_DATE, EPOCH
from api.routes import register_exception_handlers, router, set_services
from core.config import ServerConfig, get_defaults
from core.logging import ComponentType, configure_logging, get_logger
from health import default_checks, health_router, set_health_context
from orchestrator import HealthProber, Orchestrator
from registry import ServiceRegistry

_server_defaults = get_defaults().server
configure_logging(
    level=_server_defaults.log_level,
    json_output=_server_defaults.json_logs,
)
logger = get_logger(__name__, ComponentType.API)


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Server configuration (read from the environment if omitted)
    """
    config = config or get_defaults().server

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Startup fails if the registry cannot be loaded.
        """
        logger.info(f"Starting Wake Orchestrator v{__version__} (Epoch {EPOCH}, Build {BUILD_DATE})")
        logger.info(f"Loading service registry from: {config.registry_file}")

        registry = ServiceRegistry()
        registry.load_file(config.registry_file)

        probe_defaults = get_defaults().probe
        orchestrator = Orchestrator(
            registry,
            prober=HealthProber(probe_defaults),
            defaults=probe_defaults,
            default_environment=config.default_environment,
        )

        set_services(
            registry=registry,
            orchestrator=orchestrator,
            default_environment=config.default_environment,
            require_auth=config.require_auth,
        )
        set_health_context(default_checks(registry, orchestrator), registry)

        app.state.registry = registry
        app.state.orchestrator = orchestrator

        stats = registry.get_stats()
        logger.info(
            f"Orchestrator ready: {stats.total_services} services, "
            f"default environment '{config.default_environment}', "
            f"auth {'required' if config.require_auth else 'pass-through'}"
        )

        yield

        logger.info("Wake Orchestrator stopped")

    app = FastAPI(
        title="Wake Orchestrator",
        description=f"Epoch {EPOCH} dependency-ordered service waking",
        version=__version__,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - started) * 1000
        logger.info(
            f"{response.status_code} {request.method} {request.url.path} ({duration_ms:.0f}ms)"
        )
        return response

    register_exception_handlers(app)

    # Include health check routes (no prefix - /livez, /readyz, /health)
    app.include_router(health_router)

    # Include API routes
    app.include_router(router, prefix="/api")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": "Wake Orchestrator",
            "version": __version__,
            "epoch": EPOCH,
            "build_date": BUILD_DATE,
            "status": "running",
            "docs": "/docs",
        }

    return app


def serve(config: Optional[ServerConfig] = None) -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    config = config or get_defaults().server
    uvicorn.run(create_app(config), host=config.host, port=config.port, log_config=None)


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

app = create_app()

if __name__ == "__main__":
    serve()
