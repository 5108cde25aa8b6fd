# ============================================================================
# WAKE ORDER RESOLVER
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - Dependency resolution
# PURPOSE: Turn a target into a dependency-first, cycle-checked wake order
# CREATED: 03 OCT 2026
# ============================================================================
"""
Wake Order Resolver

Depth-first search with three colors:

    WHITE  not visited yet
    GRAY   on the current DFS path
    BLACK  finished, already emitted

Dependencies are visited in declaration order and a node is emitted after
all of them (post-order), so every dependency appears before its
dependents. Meeting a GRAY node means a cycle; the whole resolution fails
and no partial order is returned.

Dependency names that do not exist in the environment are skipped.

The resolver is stateless: it works on a read-only view of one
environment's services and is rebuilt per call.
"""

import logging
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from core.errors import CircularDependencyError
from core.models import ServiceDefinition

logger = logging.getLogger(__name__)

ALL_TARGET = "all"

Target = Union[None, str, Sequence[str]]


class _Color(Enum):
    WHITE = 0
    GRAY = 1
    BLACK = 2


def expand_target(
    target: Target,
    services: Mapping[str, ServiceDefinition],
    groups: Optional[Mapping[str, Sequence[str]]] = None,
) -> List[str]:
    """
    Expand a target into root service names.

    None / "all" -> every service in source order.
    A service name -> [name].
    A group name (not shadowed by a service) -> its members.
    A list -> each element expanded the same way, duplicates dropped.
    Unknown names are skipped.
    """
    if target is None or target == ALL_TARGET:
        return list(services.keys())

    names = [target] if isinstance(target, str) else list(target)
    groups = groups or {}

    roots: List[str] = []
    for name in names:
        if name in services:
            candidates: Iterable[str] = [name]
        elif name in groups:
            candidates = groups[name]
        else:
            logger.debug(f"Target '{name}' is not a service or group, skipping")
            continue

        for candidate in candidates:
            if candidate in services and candidate not in roots:
                roots.append(candidate)

    return roots


class WakeOrderResolver:
    """Resolves wake order for services of a single environment."""

    def __init__(self, services: Mapping[str, ServiceDefinition]):
        self._services = services

    def resolve(self, roots: Sequence[str]) -> List[ServiceDefinition]:
        """
        Resolve the wake order for the given root services.

        Args:
            roots: Service names to start from, in priority order

        Returns:
            Services in dependency-first order, each exactly once

        Raises:
            CircularDependencyError: If a cycle is reachable from any root
        """
        colors: Dict[str, _Color] = {}
        order: List[ServiceDefinition] = []

        for root in roots:
            if root not in self._services:
                logger.debug(f"Root '{root}' not in environment, skipping")
                continue
            if colors.get(root, _Color.WHITE) is _Color.WHITE:
                self._visit(root, colors, [], order)

        return order

    def _visit(
        self,
        name: str,
        colors: Dict[str, _Color],
        path: List[str],
        order: List[ServiceDefinition],
    ) -> None:
        """Iterative DFS from one root; path mirrors the GRAY nodes."""
        # Each frame is (name, iterator over remaining dependencies)
        colors[name] = _Color.GRAY
        path.append(name)
        stack = [(name, iter(self._services[name].depends_on))]

        while stack:
            current, deps = stack[-1]
            advanced = False

            for dep in deps:
                if dep not in self._services:
                    logger.debug(
                        f"Dependency '{dep}' of '{current}' not found, skipping"
                    )
                    continue

                color = colors.get(dep, _Color.WHITE)
                if color is _Color.GRAY:
                    cycle = path[path.index(dep):] + [dep]
                    raise CircularDependencyError(dep, cycle)
                if color is _Color.BLACK:
                    continue

                colors[dep] = _Color.GRAY
                path.append(dep)
                stack.append((dep, iter(self._services[dep].depends_on)))
                advanced = True
                break

            if not advanced:
                stack.pop()
                path.pop()
                colors[current] = _Color.BLACK
                order.append(self._services[current])


def resolve_wake_order(
    target: Target,
    services: Mapping[str, ServiceDefinition],
    groups: Optional[Mapping[str, Sequence[str]]] = None,
) -> List[ServiceDefinition]:
    """Expand target and resolve its wake order in one call."""
    roots = expand_target(target, services, groups)
    return WakeOrderResolver(services).resolve(roots)


__all__ = [
    "ALL_TARGET",
    "Target",
    "expand_target",
    "WakeOrderResolver",
    "resolve_wake_order",
]
