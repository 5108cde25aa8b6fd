# ============================================================================
# PROCESS HEALTH CHECKS
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Infrastructure - Built-in health checks
# PURPOSE: Process, registry and service-state checks for /health
# CREATED: 06 OCT 2026
# ============================================================================
"""
Built-in Health Checks

- ProcessCheck: always healthy if it runs
- RegistryCheck: unhealthy until a registry is loaded (required for ready)
- ServiceStateCheck: degraded when a known service is FAILED; reads
  stored states only, never probes
"""

import logging
import os
import platform
import sys
from typing import List

import psutil

from core.contracts import ServiceState
from core.models import count_states
from health.core import HealthCheck, HealthCheckResult

logger = logging.getLogger(__name__)


class ProcessCheck(HealthCheck):
    """Basic process health check."""

    name = "process"
    timeout_seconds = 1.0

    async def check(self) -> HealthCheckResult:
        process = psutil.Process()
        memory = psutil.virtual_memory()
        return HealthCheckResult.healthy(
            message="Process running",
            python_version=sys.version.split()[0],
            platform=platform.platform(),
            pid=os.getpid(),
            rss_mb=round(process.memory_info().rss / (1024 * 1024), 1),
            system_memory_percent=memory.percent,
            # Non-blocking: usage since the previous call
            cpu_percent=psutil.cpu_percent(interval=None),
        )


class RegistryCheck(HealthCheck):
    """A registry must be loaded before the API can wake anything."""

    name = "registry"
    timeout_seconds = 1.0

    def __init__(self, registry):
        self.registry = registry

    async def check(self) -> HealthCheckResult:
        if not self.registry.is_loaded:
            return HealthCheckResult.unhealthy("No registry loaded")

        stats = self.registry.get_stats()
        if stats.total_services == 0:
            return HealthCheckResult.degraded(
                "Registry loaded but contains no services",
                **stats.to_dict(),
            )

        return HealthCheckResult.healthy(
            f"{stats.total_services} services registered",
            **stats.to_dict(),
        )


class ServiceStateCheck(HealthCheck):
    """Summarises stored service states in the default environment."""

    name = "service_states"
    timeout_seconds = 1.0
    required_for_ready = False

    def __init__(self, orchestrator):
        self.orchestrator = orchestrator

    async def check(self) -> HealthCheckResult:
        environment = self.orchestrator.default_environment
        states = self.orchestrator.states(environment)
        failed: List[str] = [
            name for name, state in states.items() if state == ServiceState.FAILED
        ]
        counts = count_states(list(states.values()))

        if failed:
            return HealthCheckResult.degraded(
                f"{len(failed)} service(s) failed in {environment}",
                environment=environment,
                failed=failed,
                counts=counts,
            )

        return HealthCheckResult.healthy(
            f"{len(states)} service(s) tracked in {environment}",
            environment=environment,
            counts=counts,
        )


def default_checks(registry, orchestrator) -> List[HealthCheck]:
    """Checks mounted by the API server."""
    return [
        ProcessCheck(),
        RegistryCheck(registry),
        ServiceStateCheck(orchestrator),
    ]


__all__ = [
    "ProcessCheck",
    "RegistryCheck",
    "ServiceStateCheck",
    "default_checks",
]
