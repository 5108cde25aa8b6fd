# ============================================================================
# SERVICE REGISTRY
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - Service registry
# PURPOSE: Hold the current registry snapshot and answer lookups against it
# CREATED: 03 OCT 2026
# EXPORTS: ServiceRegistry, load_registry
# ============================================================================
"""
Service Registry

Thin handle around an immutable RegistrySnapshot. Every successful load
builds a complete new snapshot and swaps it in with a single assignment,
so readers always see either the old registry or the new one. A failed
load raises and leaves the previous snapshot untouched.

Usage:
    registry = ServiceRegistry()
    registry.load("config/services.yaml")

    order = registry.resolve_wake_order("consumer", "dev")
    # [auth, payment, consumer]
"""

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from core.errors import RegistryError
from core.models import (
    EnvironmentStats,
    RegistrySnapshot,
    RegistryStats,
    ServiceDefinition,
)
from registry.loader import load_registry_file, parse_registry_text
from registry.resolver import Target, expand_target, resolve_wake_order
from registry.validation import validate_registry

logger = logging.getLogger(__name__)

RegistrySource = Union[str, Path, Mapping[str, Any]]


class ServiceRegistry:
    """
    Registry of service definitions across environments.

    Constructed by the composing layer (server lifespan or CLI command)
    and passed by reference; there is no module-level instance.
    """

    def __init__(self, snapshot: Optional[RegistrySnapshot] = None):
        self._snapshot = snapshot
        self._file_path: Optional[Path] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, source: RegistrySource) -> RegistrySnapshot:
        """Load from a file path or an already-parsed mapping."""
        if isinstance(source, (str, Path)):
            return self.load_file(source)
        return self.load_mapping(source)

    def load_file(self, path: Union[str, Path]) -> RegistrySnapshot:
        """
        Load and validate a YAML/JSON registry file.

        The path is remembered for reload().

        Raises:
            RegistryLoadError: File unreadable or unparsable
            ValidationError: Document structurally invalid
        """
        path = Path(path)
        document = load_registry_file(path)
        snapshot = self._swap(validate_registry(document, source=str(path)))
        self._file_path = path
        return snapshot

    def load_string(self, content: str, fmt: str = "yaml") -> RegistrySnapshot:
        """Load from raw YAML or JSON text."""
        document = parse_registry_text(content, fmt)
        return self._swap(validate_registry(document, source="<string>"))

    def load_mapping(self, document: Mapping[str, Any]) -> RegistrySnapshot:
        """Load from an already-parsed tree."""
        return self._swap(validate_registry(document, source="<mapping>"))

    def reload(self) -> RegistrySnapshot:
        """
        Re-read the file the registry was last loaded from.

        Raises:
            RegistryError: No file source known, or the reload failed
        """
        if self._file_path is None:
            raise RegistryError("Registry was not loaded from a file; nothing to reload")
        logger.info(f"Reloading registry from {self._file_path}")
        return self.load_file(self._file_path)

    def _swap(self, snapshot: RegistrySnapshot) -> RegistrySnapshot:
        self._snapshot = snapshot
        logger.info(
            f"Registry loaded from {snapshot.source}: "
            f"{snapshot.total_services} services, "
            f"environments={snapshot.environment_names()}"
        )
        return snapshot

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> Optional[RegistrySnapshot]:
        return self._snapshot

    @property
    def file_path(self) -> Optional[Path]:
        return self._file_path

    def _services(self, environment: str) -> Mapping[str, ServiceDefinition]:
        if self._snapshot is None:
            return {}
        return self._snapshot.services_in(environment)

    def get_services(self, environment: str) -> List[ServiceDefinition]:
        """All services of an environment in source order (empty if unknown)."""
        return list(self._services(environment).values())

    def get_service(self, name: str, environment: str) -> Optional[ServiceDefinition]:
        return self._services(environment).get(name)

    def get_dependencies(self, name: str, environment: str) -> List[str]:
        service = self.get_service(name, environment)
        return list(service.depends_on) if service else []

    def list_environments(self) -> List[str]:
        if self._snapshot is None:
            return []
        return self._snapshot.environment_names()

    def list_groups(self, environment: Optional[str] = None) -> List[str]:
        """Names from the groups block plus any service group labels."""
        if self._snapshot is None:
            return []

        names = list(self._snapshot.groups.keys())
        for service in self._iter_services(environment):
            if service.group and service.group not in names:
                names.append(service.group)
        return names

    def get_group(self, name: str, environment: Optional[str] = None) -> List[str]:
        """
        Members of a group.

        Explicit members from the groups block come first, then services
        labelled with the group, without duplicates.
        """
        if self._snapshot is None:
            return []

        members = list(self._snapshot.groups.get(name, ()))
        for service in self._iter_services(environment):
            if service.group == name and service.name not in members:
                members.append(service.name)
        return members

    def _iter_services(self, environment: Optional[str]):
        if environment is not None:
            yield from self._services(environment).values()
            return
        for env_services in self._snapshot.environments.values():
            yield from env_services.values()

    def _groups_for(self, environment: str) -> Mapping[str, List[str]]:
        return {name: self.get_group(name, environment) for name in self.list_groups(environment)}

    def select_services(self, target: Target, environment: str) -> List[ServiceDefinition]:
        """
        Services named by target, without their dependencies.

        Same target forms as resolve_wake_order; used by status and
        health queries, which do not need a wake order.
        """
        services = self._services(environment)
        roots = expand_target(target, services, self._groups_for(environment))
        return [services[name] for name in roots]

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_wake_order(self, target: Target, environment: str) -> List[ServiceDefinition]:
        """
        Dependency-first wake order for target in one environment.

        Args:
            target: "all"/None, a service or group name, or a list of names
            environment: Environment name

        Returns:
            Services to wake, dependencies before dependents, each once.
            Empty for unknown environments or targets.

        Raises:
            CircularDependencyError: A cycle is reachable from the target
        """
        services = self._services(environment)
        if not services:
            logger.debug(f"No services registered for environment '{environment}'")
            return []

        order = resolve_wake_order(target, services, self._groups_for(environment))
        logger.debug(
            f"Wake order for {target!r} in {environment}: "
            f"{[s.name for s in order]}"
        )
        return order

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_stats(self) -> RegistryStats:
        if self._snapshot is None:
            return RegistryStats()

        return RegistryStats(
            total_services=self._snapshot.total_services,
            environments=[
                EnvironmentStats(name=env, service_count=len(services))
                for env, services in self._snapshot.environments.items()
            ],
            last_load_time=self._snapshot.loaded_at,
        )


def load_registry(source: RegistrySource) -> ServiceRegistry:
    """
    Build a new registry from a file path or parsed mapping.

    Raises:
        ValidationError: Document structurally invalid
        RegistryLoadError: File unreadable or unparsable
    """
    registry = ServiceRegistry()
    registry.load(source)
    return registry


__all__ = ["ServiceRegistry", "RegistrySource", "load_registry"]
