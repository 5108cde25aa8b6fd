# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core module initialization
# PURPOSE: Export core contracts, errors and models
# CREATED: 02 OCT 2026
# ============================================================================

from core.contracts import ServiceState
from core.errors import (
    RegistryError,
    ValidationError,
    RegistryLoadError,
    CircularDependencyError,
    ProbeError,
)
from core.models import (
    ServiceDefinition,
    RegistrySnapshot,
    ProbeResult,
    WakeResult,
    WakeOutcome,
    StatusSnapshot,
    HealthSnapshot,
    RegistryStats,
)

__all__ = [
    # Enums
    "ServiceState",
    # Errors
    "RegistryError",
    "ValidationError",
    "RegistryLoadError",
    "CircularDependencyError",
    "ProbeError",
    # Models
    "ServiceDefinition",
    "RegistrySnapshot",
    "ProbeResult",
    "WakeResult",
    "WakeOutcome",
    "StatusSnapshot",
    "HealthSnapshot",
    "RegistryStats",
]
