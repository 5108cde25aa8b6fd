# ============================================================================
# REGISTRY MODULE
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - Registry exports
# PURPOSE: Service registry, validation and wake order resolution
# CREATED: 03 OCT 2026
# ============================================================================

from registry.loader import load_registry_file, parse_registry_text
from registry.resolver import (
    ALL_TARGET,
    WakeOrderResolver,
    expand_target,
    resolve_wake_order,
)
from registry.service_registry import ServiceRegistry, load_registry
from registry.validation import validate_registry

__all__ = [
    "ALL_TARGET",
    "ServiceRegistry",
    "WakeOrderResolver",
    "expand_target",
    "load_registry",
    "load_registry_file",
    "parse_registry_text",
    "resolve_wake_order",
    "validate_registry",
]
