# ============================================================================
# API MODULE
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - FastAPI routes
# PURPOSE: HTTP API for waking and inspecting services
# CREATED: 07 OCT 2026
# ============================================================================
"""
API Module

FastAPI routes for the wake orchestrator.
"""

from .routes import router, set_services, register_exception_handlers
from .schemas import (
    WakeRequest,
    ErrorResponse,
    ReloadResponse,
    RegistryResponse,
)

__all__ = [
    "router",
    "set_services",
    "register_exception_handlers",
    "WakeRequest",
    "ErrorResponse",
    "ReloadResponse",
    "RegistryResponse",
]
