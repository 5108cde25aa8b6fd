# ============================================================================
# WAKE ORDER RESOLVER TESTS
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Tests - Dependency resolution
# PURPOSE: Verify dependency-first ordering and cycle detection
# CREATED: 12 OCT 2026
# ============================================================================
"""
Wake Order Resolver Tests

Covers:
1. Chain and diamond ordering (dependencies before dependents)
2. Each service emitted once, "all" is idempotent
3. Cycle detection fails the whole resolution with no partial order
4. Missing dependency names are skipped
5. Target expansion: service, list, group, unknown names
6. Randomized acyclic graphs keep the dependency-first property

Run with:
    pytest tests/test_resolver.py -v
"""

import random

import pytest

from core.errors import CircularDependencyError
from core.models import ServiceDefinition
from registry.resolver import (
    WakeOrderResolver,
    expand_target,
    resolve_wake_order,
)


# ============================================================================
# FIXTURES
# ============================================================================

def _svc(name, *depends_on, group=None):
    return ServiceDefinition(
        name=name,
        url=f"http://{name}.local",
        health_path="/health",
        depends_on=depends_on,
        group=group,
    )


def _services(*definitions):
    return {d.name: d for d in definitions}


def _names(order):
    return [s.name for s in order]


@pytest.fixture
def chain():
    """consumer -> payment -> auth"""
    return _services(
        _svc("auth"),
        _svc("payment", "auth"),
        _svc("consumer", "payment"),
    )


@pytest.fixture
def diamond():
    """app depends on api and worker, both of which depend on db"""
    return _services(
        _svc("app", "api", "worker"),
        _svc("api", "db"),
        _svc("worker", "db"),
        _svc("db"),
    )


# ============================================================================
# ORDERING
# ============================================================================

class TestOrdering:

    def test_chain_single_target(self, chain):
        assert _names(resolve_wake_order("consumer", chain)) == ["auth", "payment", "consumer"]

    def test_leaf_target_has_no_extras(self, chain):
        assert _names(resolve_wake_order("auth", chain)) == ["auth"]

    def test_all_targets(self, chain):
        assert _names(resolve_wake_order("all", chain)) == ["auth", "payment", "consumer"]

    def test_none_means_all(self, chain):
        assert _names(resolve_wake_order(None, chain)) == ["auth", "payment", "consumer"]

    def test_diamond_emits_shared_dependency_once(self, diamond):
        order = _names(resolve_wake_order("app", diamond))

        assert order == ["db", "api", "worker", "app"]
        assert len(order) == len(set(order))

    def test_all_is_idempotent(self, diamond):
        first = _names(resolve_wake_order("all", diamond))
        second = _names(resolve_wake_order("all", diamond))
        assert first == second

    def test_dependencies_visited_in_declaration_order(self):
        services = _services(_svc("app", "b", "a"), _svc("a"), _svc("b"))
        assert _names(resolve_wake_order("app", services)) == ["b", "a", "app"]

    def test_empty_environment(self):
        assert resolve_wake_order("all", {}) == []


# ============================================================================
# CYCLES
# ============================================================================

class TestCycles:

    def test_two_node_cycle(self):
        services = _services(_svc("a", "b"), _svc("b", "a"))

        with pytest.raises(CircularDependencyError) as exc:
            resolve_wake_order("a", services)

        assert exc.value.node == "a"
        assert exc.value.cycle == ["a", "b", "a"]
        assert "Circular dependency" in str(exc.value)

    def test_self_dependency(self):
        services = _services(_svc("a", "a"))
        with pytest.raises(CircularDependencyError):
            resolve_wake_order("a", services)

    def test_cycle_anywhere_fails_all(self):
        services = _services(
            _svc("ok"),
            _svc("x", "y"),
            _svc("y", "z"),
            _svc("z", "x"),
        )
        with pytest.raises(CircularDependencyError) as exc:
            resolve_wake_order("all", services)
        assert exc.value.cycle[0] == exc.value.cycle[-1]

    def test_unreachable_cycle_does_not_affect_target(self):
        services = _services(_svc("ok"), _svc("x", "y"), _svc("y", "x"))
        assert _names(resolve_wake_order("ok", services)) == ["ok"]

    def test_no_partial_order_returned(self):
        services = _services(_svc("auth"), _svc("a", "auth", "b"), _svc("b", "a"))
        resolver = WakeOrderResolver(services)

        with pytest.raises(CircularDependencyError):
            result = resolver.resolve(["a"])
            pytest.fail(f"unexpected order {result}")


# ============================================================================
# MISSING DEPENDENCIES
# ============================================================================

class TestMissingDependencies:

    def test_missing_dependency_skipped(self):
        services = _services(_svc("auth"), _svc("payment", "auth", "ghost"))
        assert _names(resolve_wake_order("payment", services)) == ["auth", "payment"]

    def test_only_missing_dependencies(self):
        services = _services(_svc("lonely", "ghost", "phantom"))
        assert _names(resolve_wake_order("lonely", services)) == ["lonely"]


# ============================================================================
# TARGET EXPANSION
# ============================================================================

class TestTargetExpansion:

    def test_list_target_deduplicates(self, chain):
        order = resolve_wake_order(["consumer", "payment", "auth"], chain)
        assert _names(order) == ["auth", "payment", "consumer"]

    def test_list_target_respects_priority(self, diamond):
        order = resolve_wake_order(["worker", "api"], diamond)
        assert _names(order) == ["db", "worker", "api"]

    def test_unknown_target_skipped(self, chain):
        assert resolve_wake_order("ghost", chain) == []
        assert _names(resolve_wake_order(["ghost", "auth"], chain)) == ["auth"]

    def test_group_target(self, chain):
        groups = {"backend": ("payment",)}
        assert _names(resolve_wake_order("backend", chain, groups)) == ["auth", "payment"]

    def test_group_with_unknown_member(self, chain):
        assert expand_target("edge", chain, {"edge": ["ghost", "consumer"]}) == ["consumer"]

    def test_service_name_wins_over_group(self, chain):
        assert expand_target("auth", chain, {"auth": ["consumer"]}) == ["auth"]


# ============================================================================
# PROPERTY: DEPENDENCIES FIRST
# ============================================================================

class TestDependencyFirstProperty:
    """Random acyclic graphs: every dependency precedes its dependent."""

    @pytest.mark.parametrize("seed", range(20))
    def test_random_acyclic_graph(self, seed):
        rng = random.Random(seed)
        names = [f"svc{i}" for i in range(rng.randint(1, 15))]

        # Edges only point to earlier names, so the graph is acyclic
        definitions = []
        for index, name in enumerate(names):
            earlier = names[:index]
            deps = rng.sample(earlier, k=rng.randint(0, min(3, len(earlier))))
            definitions.append(_svc(name, *deps))
        rng.shuffle(definitions)
        services = _services(*definitions)

        order = resolve_wake_order("all", services)
        position = {s.name: i for i, s in enumerate(order)}

        assert sorted(position) == sorted(names)
        for service in order:
            for dep in service.depends_on:
                assert position[dep] < position[service.name]
