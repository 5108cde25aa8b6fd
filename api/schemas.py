# ============================================================================
# API SCHEMAS
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - Request/Response schemas
# PURPOSE: Pydantic models for API validation
# CREATED: 07 OCT 2026
# ============================================================================
"""
API Schemas

Request and response models for the wake API. Result payloads come from
the core result types' to_dict(); only envelopes are modelled here.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class WakeRequest(BaseModel):
    """
    Request to wake services.

    target is optional at the schema level so a missing target can be
    answered with 400 rather than a validation error.
    """
    target: Optional[Union[str, List[str]]] = Field(
        None,
        description='"all", a service or group name, or a list of names',
    )
    environment: Optional[str] = Field(None, max_length=64)
    wait: bool = Field(True, description="Poll until each service is ready")
    timeout: int = Field(300, gt=0, le=3600, description="Per-service readiness budget in seconds")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"target": "all", "environment": "dev", "wait": True, "timeout": 300},
                {"target": "payment", "environment": "staging", "wait": False},
            ]
        }
    }


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class ErrorResponse(BaseModel):
    """Error envelope."""
    success: bool = False
    error: str


class ReloadResponse(BaseModel):
    """Response for POST /api/reload."""
    success: bool = True
    message: str
    stats: Dict[str, Any]


class RegistryResponse(BaseModel):
    """Response for GET /api/registry."""
    success: bool = True
    stats: Dict[str, Any]
    services: Union[List[Dict[str, Any]], Dict[str, List[Dict[str, Any]]]]
    groups: Dict[str, List[str]] = Field(default_factory=dict)
    timestamp: str


__all__ = [
    "WakeRequest",
    "ErrorResponse",
    "ReloadResponse",
    "RegistryResponse",
]
