# ============================================================================
# SERVICE DEFINITION MODEL
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core model - Service blueprint loaded from the registry
# PURPOSE: Typed representation of services, environments and groups
# CREATED: 02 OCT 2026
# EXPORTS: ServiceDefinition, RegistrySnapshot
# DEPENDENCIES: pydantic
# ============================================================================
"""
Service Definition Models

A ServiceDefinition is the typed form of one entry in the registry file:

    services:
      dev:
        auth:
          url: https://auth.example.com
          health: /health
          dependsOn: []

Definitions are built once by registry validation and never mutated.
A RegistrySnapshot groups every environment of one successful load;
reloading builds a new snapshot rather than editing the old one.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ServiceDefinition(BaseModel):
    """
    Definition of a single service in one environment.

    Registry files use camelCase keys (healthPath, dependsOn); the original
    short forms (health, wake) are accepted as well.
    """
    name: str = Field(..., min_length=1, max_length=128)
    url: str = Field(..., min_length=1, description="Base address of the service")
    health_path: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("health_path", "healthPath", "health"),
        description="Path joined onto url for probing",
    )
    wake_path: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("wake_path", "wakePath", "wake"),
        description="Legacy wake endpoint, not used by health-only waking",
    )
    depends_on: Tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("depends_on", "dependsOn"),
        description="Names of services that must be woken first",
    )
    description: Optional[str] = None
    group: Optional[str] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("depends_on", mode="before")
    @classmethod
    def handle_missing_dependencies(cls, v):
        """Treat an explicit null as no dependencies."""
        if v is None:
            return ()
        return v

    def to_dict(self) -> Dict[str, object]:
        """Convert to dictionary for JSON response."""
        return {
            "name": self.name,
            "url": self.url,
            "health_path": self.health_path,
            "wake_path": self.wake_path,
            "depends_on": list(self.depends_on),
            "description": self.description,
            "group": self.group,
        }


@dataclass(frozen=True)
class RegistrySnapshot:
    """
    One validated, immutable load of the registry.

    environments preserves the order of the source document, both for
    environment names and for service names within an environment.
    """
    environments: Mapping[str, Mapping[str, ServiceDefinition]]
    groups: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: Optional[str] = None

    @classmethod
    def build(
        cls,
        environments: Dict[str, Dict[str, ServiceDefinition]],
        groups: Optional[Dict[str, Tuple[str, ...]]] = None,
        loaded_at: Optional[datetime] = None,
        source: Optional[str] = None,
    ) -> "RegistrySnapshot":
        """Wrap plain dicts in read-only views."""
        return cls(
            environments=MappingProxyType({
                env: MappingProxyType(dict(services))
                for env, services in environments.items()
            }),
            groups=MappingProxyType(dict(groups or {})),
            loaded_at=loaded_at or datetime.now(timezone.utc),
            source=source,
        )

    def services_in(self, environment: str) -> Mapping[str, ServiceDefinition]:
        """Services for an environment (empty for unknown environments)."""
        return self.environments.get(environment, MappingProxyType({}))

    @property
    def total_services(self) -> int:
        return sum(len(services) for services in self.environments.values())

    def environment_names(self) -> List[str]:
        return list(self.environments.keys())
