# ============================================================================
# HEALTH CHECK EXECUTOR
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Infrastructure - Parallel health check execution
# PURPOSE: Execute health checks with timeouts and aggregation
# CREATED: 06 OCT 2026
# ============================================================================
"""
Health Check Executor

Executes health checks with:
- Parallel execution
- Per-check timeouts
- Overall execution timeout
- Result aggregation with 'worst wins' semantics
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional, Sequence

from health.core import (
    AggregatedHealthResult,
    HealthCheck,
    HealthCheckResult,
    HealthStatus,
)

logger = logging.getLogger(__name__)


class HealthCheckExecutor:
    """Runs a fixed set of health checks in parallel."""

    def __init__(
        self,
        checks: Sequence[HealthCheck],
        overall_timeout: float = 30.0,
    ):
        """
        Initialize executor.

        Args:
            checks: Checks to run
            overall_timeout: Max total execution time
        """
        self.checks = list(checks)
        self.overall_timeout = overall_timeout

    async def execute_all(self) -> AggregatedHealthResult:
        """Execute every check."""
        return await self._execute(self.checks)

    async def execute_required(self) -> AggregatedHealthResult:
        """Execute only checks required for /readyz."""
        return await self._execute([c for c in self.checks if c.required_for_ready])

    async def execute_single(self, name: str) -> Optional[HealthCheckResult]:
        """Execute a single check by name."""
        for check in self.checks:
            if check.name == name:
                return await self._execute_check(check)
        return None

    async def _execute(self, checks: List[HealthCheck]) -> AggregatedHealthResult:
        start_time = time.monotonic()
        results: Dict[str, HealthCheckResult] = {}

        if checks:
            tasks = {
                check.name: asyncio.create_task(self._execute_check(check))
                for check in checks
            }
            done, pending = await asyncio.wait(
                tasks.values(),
                timeout=self.overall_timeout,
            )
            for task in pending:
                task.cancel()

            for name, task in tasks.items():
                if task in done:
                    results[name] = task.result()
                else:
                    results[name] = HealthCheckResult.unhealthy(
                        f"Skipped: overall timeout ({self.overall_timeout}s) exceeded"
                    )

        total_duration_ms = (time.monotonic() - start_time) * 1000
        return AggregatedHealthResult(
            status=HealthStatus.aggregate([r.status for r in results.values()]),
            checks=results,
            total_duration_ms=total_duration_ms,
        )

    async def _execute_check(self, check: HealthCheck) -> HealthCheckResult:
        """Execute a single check with timeout."""
        start_time = time.monotonic()

        try:
            result = await asyncio.wait_for(check.check(), timeout=check.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                f"Health check {check.name} timed out after {check.timeout_seconds}s"
            )
            result = HealthCheckResult.unhealthy(f"Timeout after {check.timeout_seconds}s")
        except Exception as e:
            logger.error(f"Health check {check.name} failed: {e}")
            result = HealthCheckResult.from_exception(e)

        result.duration_ms = (time.monotonic() - start_time) * 1000
        logger.debug(
            f"Health check {check.name}: {result.status.value} "
            f"({result.duration_ms:.1f}ms)"
        )
        return result


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "HealthCheckExecutor",
]
