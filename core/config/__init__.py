# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 02 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the wake orchestrator.
"""

from core.config.defaults import (
    ProbeDefaults,
    MonitorDefaults,
    ServerConfig,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "ProbeDefaults",
    "MonitorDefaults",
    "ServerConfig",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
