# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for probes, monitoring and the API server
# CREATED: 02 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for probe timing, the monitor loop, and the server.
These can be overridden via environment variables or per-call arguments.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ProbeDefaults:
    """
    Defaults for health probes.

    socket_timeout_seconds bounds a single HTTP request. slow_threshold_seconds
    is the round-trip time above which a responsive service is reported as
    WAKING on the wake/status path.
    """
    socket_timeout_seconds: float = 10.0
    slow_threshold_seconds: float = 5.0
    status_timeout_seconds: float = 5.0

    # Per-service readiness budget used by wake(wait=True)
    wake_timeout_seconds: int = 300
    wake_poll_interval_seconds: float = 2.0

    @property
    def slow_threshold_ms(self) -> float:
        return self.slow_threshold_seconds * 1000

    @classmethod
    def from_env(cls) -> "ProbeDefaults":
        """Create from environment variables."""
        return cls(
            socket_timeout_seconds=float(os.getenv("PROBE_TIMEOUT_SEC", 10.0)),
            slow_threshold_seconds=float(os.getenv("SLOW_THRESHOLD_SEC", 5.0)),
            status_timeout_seconds=float(os.getenv("STATUS_TIMEOUT_SEC", 5.0)),
            wake_timeout_seconds=int(os.getenv("WAKE_TIMEOUT_SEC", 300)),
            wake_poll_interval_seconds=float(os.getenv("WAKE_POLL_INTERVAL_SEC", 2.0)),
        )


@dataclass(frozen=True)
class MonitorDefaults:
    """Defaults for the monitor loop."""
    interval_seconds: float = 10.0
    duration_seconds: float = 300.0  # 5 minutes

    @classmethod
    def from_env(cls) -> "MonitorDefaults":
        """Create from environment variables."""
        return cls(
            interval_seconds=float(os.getenv("MONITOR_INTERVAL_SEC", 10.0)),
            duration_seconds=float(os.getenv("MONITOR_DURATION_SEC", 300.0)),
        )


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the REST server.

    The registry file is loaded once at startup and again on POST /api/reload.
    """
    registry_file: str = "config/services.yaml"
    host: str = "0.0.0.0"
    port: int = 3000
    default_environment: str = "dev"
    require_auth: bool = False
    log_level: str = "INFO"
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create from environment variables."""
        return cls(
            registry_file=os.getenv("REGISTRY_FILE", "config/services.yaml"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", 3000)),
            default_environment=os.getenv("DEFAULT_ENVIRONMENT", "dev"),
            require_auth=_env_flag("REQUIRE_AUTH"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            json_logs=os.getenv("LOG_FORMAT", "").lower() == "json",
        )


@dataclass
class Defaults:
    """Container for all default configurations."""
    probe: ProbeDefaults = field(default_factory=ProbeDefaults)
    monitor: MonitorDefaults = field(default_factory=MonitorDefaults)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            probe=ProbeDefaults.from_env(),
            monitor=MonitorDefaults.from_env(),
            server=ServerConfig.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get the process-wide defaults, read from the environment once."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ProbeDefaults",
    "MonitorDefaults",
    "ServerConfig",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
