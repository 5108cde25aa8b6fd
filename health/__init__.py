# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Infrastructure - Process health checks
# PURPOSE: Liveness, readiness and health of the orchestrator process
# CREATED: 06 OCT 2026
# ============================================================================
"""
Health Check Module

Health of the orchestrator itself:
- /livez: Process alive (instant)
- /readyz: Ready to accept wake requests (registry loaded)
- /health: Uptime, registry statistics and all check results

Usage:
    from health import health_router, set_health_context, default_checks

    set_health_context(default_checks(registry, orchestrator), registry)
    app.include_router(health_router)
"""

from health.core import (
    HealthStatus,
    HealthCheckResult,
    AggregatedHealthResult,
    HealthCheck,
)
from health.checks import ProcessCheck, RegistryCheck, ServiceStateCheck, default_checks
from health.executor import HealthCheckExecutor
from health.router import health_router, set_health_context

__all__ = [
    # Core types
    "HealthStatus",
    "HealthCheckResult",
    "AggregatedHealthResult",
    "HealthCheck",
    # Checks
    "ProcessCheck",
    "RegistryCheck",
    "ServiceStateCheck",
    "default_checks",
    # Executor
    "HealthCheckExecutor",
    # Router
    "health_router",
    "set_health_context",
]
