# ============================================================================
# PROBE & WAKE RESULT TYPES
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core model - Runtime outcomes
# PURPOSE: Result types produced by probes, wakes and status queries
# CREATED: 03 OCT 2026
# EXPORTS: ProbeResult, WakeResult, WakeOutcome, ServiceStatus,
#          StatusSnapshot, ServiceHealth, HealthSnapshot, RegistryStats
# ============================================================================
"""
Result Types

Ephemeral values returned to callers. None of these are retained by the
orchestrator beyond the per-service state they update.

Durations are wall-clock milliseconds; timestamps are timezone-aware UTC.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.contracts import ServiceState


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def count_states(states: List[ServiceState]) -> Dict[str, int]:
    """Count states, always including every concrete state."""
    counts = Counter(s.value for s in states)
    return {
        state.value: counts.get(state.value, 0)
        for state in ServiceState
    }


# ============================================================================
# PROBE
# ============================================================================

@dataclass
class ProbeResult:
    """Raw outcome of one HTTP health probe."""
    state: ServiceState
    status_code: Optional[int] = None
    response_time_ms: float = 0.0
    error: Optional[str] = None
    uptime: Optional[float] = None
    checked_at: datetime = field(default_factory=utc_now)

    @property
    def responded(self) -> bool:
        """True when an HTTP response (of any status) was received."""
        return self.status_code is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "status_code": self.status_code,
            "response_time_ms": round(self.response_time_ms, 2),
            "error": self.error,
            "uptime": self.uptime,
            "checked_at": _iso(self.checked_at),
        }


# ============================================================================
# WAKE
# ============================================================================

@dataclass
class WakeResult:
    """Outcome of waking a single service."""
    name: str
    state: ServiceState
    url: str
    duration_ms: float
    last_wake_time: Optional[datetime] = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    attempts: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.state.value,
            "url": self.url,
            "duration_ms": round(self.duration_ms, 2),
            "error": self.error,
            "status_code": self.status_code,
            "attempts": self.attempts,
            "last_wake_time": _iso(self.last_wake_time),
        }


@dataclass
class WakeOutcome:
    """
    Aggregate result of a wake operation.

    success is True only when every participating service ended LIVE.
    Partial failure is reported here, never raised.
    """
    success: bool
    services: List[WakeResult] = field(default_factory=list)
    total_duration_ms: float = 0.0
    error: Optional[str] = None
    target: Any = None
    environment: Optional[str] = None

    @classmethod
    def failed(
        cls,
        error: str,
        target: Any = None,
        environment: Optional[str] = None,
    ) -> "WakeOutcome":
        """Outcome for a wake that never reached the probe stage."""
        return cls(success=False, error=error, target=target, environment=environment)

    def counts(self) -> Dict[str, int]:
        return count_states([s.state for s in self.services])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "error": self.error,
            "target": self.target,
            "environment": self.environment,
            "services": [s.to_dict() for s in self.services],
            "total_duration_ms": round(self.total_duration_ms, 2),
            "summary": self.counts(),
        }


# ============================================================================
# STATUS
# ============================================================================

@dataclass
class ServiceStatus:
    """Current state of one service as of its latest status probe."""
    name: str
    state: ServiceState
    url: str
    last_wake_time: Optional[datetime] = None
    status_code: Optional[int] = None
    response_time_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.state.value,
            "url": self.url,
            "last_wake_time": _iso(self.last_wake_time),
            "status_code": self.status_code,
            "response_time_ms": (
                round(self.response_time_ms, 2)
                if self.response_time_ms is not None else None
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceStatus":
        return cls(
            name=data["name"],
            state=ServiceState(data.get("status", ServiceState.UNKNOWN.value)),
            url=data.get("url", ""),
            last_wake_time=_parse_iso(data.get("last_wake_time")),
            status_code=data.get("status_code"),
            response_time_ms=data.get("response_time_ms"),
        )


@dataclass
class StatusSnapshot:
    """Status of a set of services at one point in time."""
    services: List[ServiceStatus] = field(default_factory=list)
    environment: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)

    def counts(self) -> Dict[str, int]:
        return count_states([s.state for s in self.services])

    def states(self) -> Dict[str, ServiceState]:
        return {s.name: s.state for s in self.services}

    @property
    def all_live(self) -> bool:
        return bool(self.services) and all(s.state.is_ready() for s in self.services)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment,
            "services": [s.to_dict() for s in self.services],
            "summary": self.counts(),
            "timestamp": _iso(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatusSnapshot":
        """Rebuild a snapshot from a GET /api/status payload."""
        return cls(
            services=[ServiceStatus.from_dict(s) for s in data.get("services", [])],
            environment=data.get("environment"),
            timestamp=_parse_iso(data.get("timestamp")) or utc_now(),
        )


# ============================================================================
# HEALTH (DIAGNOSTICS)
# ============================================================================

@dataclass
class ServiceHealth:
    """Diagnostic detail from a raw (non-threshold) probe."""
    name: str
    state: ServiceState
    url: str
    status_code: Optional[int]
    response_time_ms: float
    last_checked: datetime
    dependencies: List[str] = field(default_factory=list)
    last_wake_time: Optional[datetime] = None
    uptime: Optional[float] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.state.value,
            "url": self.url,
            "status_code": self.status_code,
            "response_time_ms": round(self.response_time_ms, 2),
            "uptime": self.uptime,
            "last_checked": _iso(self.last_checked),
            "last_wake_time": _iso(self.last_wake_time),
            "error": self.error,
            "dependencies": list(self.dependencies),
        }


@dataclass
class HealthSnapshot:
    """Diagnostic health of a set of services."""
    services: List[ServiceHealth] = field(default_factory=list)
    environment: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)

    def counts(self) -> Dict[str, int]:
        return count_states([s.state for s in self.services])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment,
            "services": [s.to_dict() for s in self.services],
            "summary": self.counts(),
            "timestamp": _iso(self.timestamp),
        }


# ============================================================================
# REGISTRY STATISTICS
# ============================================================================

@dataclass
class EnvironmentStats:
    name: str
    service_count: int


@dataclass
class RegistryStats:
    """Derived registry statistics, recomputed on demand."""
    total_services: int = 0
    environments: List[EnvironmentStats] = field(default_factory=list)
    last_load_time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_services": self.total_services,
            "environments": [
                {"name": e.name, "service_count": e.service_count}
                for e in self.environments
            ],
            "last_load_time": _iso(self.last_load_time),
        }


__all__ = [
    "utc_now",
    "count_states",
    "ProbeResult",
    "WakeResult",
    "WakeOutcome",
    "ServiceStatus",
    "StatusSnapshot",
    "ServiceHealth",
    "HealthSnapshot",
    "EnvironmentStats",
    "RegistryStats",
]
