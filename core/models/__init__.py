# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Model exports
# PURPOSE: Central export point for definition and result models
# CREATED: 02 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Definitions (pydantic, immutable):
    ServiceDefinition, RegistrySnapshot

Runtime results (dataclasses, ephemeral):
    ProbeResult, WakeResult, WakeOutcome, StatusSnapshot, HealthSnapshot, ...
"""

from core.models.service import ServiceDefinition, RegistrySnapshot
from core.models.results import (
    utc_now,
    count_states,
    ProbeResult,
    WakeResult,
    WakeOutcome,
    ServiceStatus,
    StatusSnapshot,
    ServiceHealth,
    HealthSnapshot,
    EnvironmentStats,
    RegistryStats,
)

__all__ = [
    # Definitions
    "ServiceDefinition",
    "RegistrySnapshot",
    # Results
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
