# ============================================================================
# HEALTH CHECK CORE TYPES
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Infrastructure - Base classes for process health checks
# PURPOSE: Check interface and result types for /livez, /readyz, /health
# CREATED: 06 OCT 2026
# ============================================================================
"""
Health Check Core Types

These describe the health of the orchestrator process itself, not of the
services it wakes (those use ServiceState).

Status Hierarchy (worst wins):
- healthy: All systems operational
- degraded: Operational with warnings (e.g. a woken service FAILED)
- unhealthy: Cannot serve requests (e.g. no registry loaded)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    """Health check status values."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    def __lt__(self, other: "HealthStatus") -> bool:
        return self.severity < other.severity

    @property
    def severity(self) -> int:
        """Rank for 'worst wins' aggregation."""
        return {
            HealthStatus.HEALTHY: 0,
            HealthStatus.DEGRADED: 1,
            HealthStatus.UNHEALTHY: 2,
        }[self]

    @classmethod
    def aggregate(cls, statuses: List["HealthStatus"]) -> "HealthStatus":
        """Aggregate multiple statuses (worst wins)."""
        if not statuses:
            return cls.HEALTHY
        # str ordering would rank "healthy" above "degraded"
        return max(statuses, key=lambda status: status.severity)

    @property
    def http_code(self) -> int:
        return {
            HealthStatus.HEALTHY: 200,
            HealthStatus.DEGRADED: 206,
            HealthStatus.UNHEALTHY: 503,
        }[self]


@dataclass
class HealthCheckResult:
    """Result from a single health check."""
    status: HealthStatus
    message: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0.0
    checked_at: datetime = field(default_factory=_utc_now)

    @classmethod
    def healthy(cls, message: str = None, **details) -> "HealthCheckResult":
        return cls(status=HealthStatus.HEALTHY, message=message, details=details)

    @classmethod
    def degraded(cls, message: str, **details) -> "HealthCheckResult":
        return cls(status=HealthStatus.DEGRADED, message=message, details=details)

    @classmethod
    def unhealthy(cls, message: str, **details) -> "HealthCheckResult":
        return cls(status=HealthStatus.UNHEALTHY, message=message, details=details)

    @classmethod
    def from_exception(cls, e: Exception) -> "HealthCheckResult":
        return cls(
            status=HealthStatus.UNHEALTHY,
            message=str(e),
            details={"exception_type": type(e).__name__},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result = {
            "status": self.status.value,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class AggregatedHealthResult:
    """Aggregated result from multiple health checks."""
    status: HealthStatus
    checks: Dict[str, HealthCheckResult]
    total_duration_ms: float
    checked_at: datetime = field(default_factory=_utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "checks": {
                name: result.to_dict()
                for name, result in self.checks.items()
            },
            "total_duration_ms": round(self.total_duration_ms, 2),
            "checked_at": self.checked_at.isoformat(),
        }


class HealthCheck(ABC):
    """
    Base class for process health checks.

    Attributes:
        name: Unique identifier for the check
        timeout_seconds: Max execution time before timeout
        required_for_ready: If True, an unhealthy result fails /readyz

    Example:
        class RegistryCheck(HealthCheck):
            name = "registry"

            async def check(self) -> HealthCheckResult:
                if not self.registry.is_loaded:
                    return HealthCheckResult.unhealthy("No registry loaded")
                return HealthCheckResult.healthy()
    """

    name: str = "unnamed"
    timeout_seconds: float = 5.0
    required_for_ready: bool = True

    @abstractmethod
    async def check(self) -> HealthCheckResult:
        """Execute health check."""
        pass


__all__ = [
    "HealthStatus",
    "HealthCheckResult",
    "AggregatedHealthResult",
    "HealthCheck",
]
