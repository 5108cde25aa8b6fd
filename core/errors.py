# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Foundation - Exception hierarchy
# PURPOSE: Separate fatal registry errors from recoverable probe errors
# CREATED: 02 OCT 2026
# ============================================================================
"""
Error taxonomy.

Fatal (propagated to the caller):
- ValidationError: malformed registry input
- RegistryLoadError: registry file unreadable or unparsable
- CircularDependencyError: cycle found while resolving wake order

Recoverable (converted into a ServiceState by the orchestrator):
- ProbeError: the probe could not be attempted or the peer broke protocol
"""

from typing import List, Optional


class RegistryError(Exception):
    """Base exception for registry operations."""
    pass


class ValidationError(RegistryError):
    """Registry document failed structural validation."""

    def __init__(
        self,
        message: str,
        environment: Optional[str] = None,
        service: Optional[str] = None,
        field: Optional[str] = None,
    ):
        super().__init__(message)
        self.environment = environment
        self.service = service
        self.field = field


class RegistryLoadError(RegistryError):
    """Registry source could not be read or parsed."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class CircularDependencyError(RegistryError):
    """Dependency cycle detected during wake order resolution."""

    def __init__(self, node: str, cycle: Optional[List[str]] = None):
        self.node = node
        self.cycle = list(cycle or [node])
        super().__init__(
            f"Circular dependency detected involving {node} "
            f"({' -> '.join(self.cycle)})"
        )


class ProbeError(Exception):
    """Health probe could not be performed against a service."""

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service


__all__ = [
    "RegistryError",
    "ValidationError",
    "RegistryLoadError",
    "CircularDependencyError",
    "ProbeError",
]
