# ============================================================================
# WAKE ORCHESTRATOR
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - Wake and health state machine
# PURPOSE: Wake services in dependency order and track their state
# CREATED: 04 OCT 2026
# UPDATED: 11 OCT 2026 - wait/timeout polling for wake
# ============================================================================
"""
Wake Orchestrator

Drives the per-service state machine:

    UNKNOWN --wake--> DEAD --probe--> LIVE | WAKING | FAILED | DEAD

Every probe fully re-evaluates the state; there is no terminal state and
wake may be called again at any time.

wake():
1. Resolve wake order (cycle or registry errors become a failed outcome)
2. For each service, strictly in order:
   a. mark DEAD and record a new last-wake time
   b. probe, threshold-classify, store the state
   c. with wait=True, keep probing while DEAD/WAKING until the budget ends
3. success only if every service ended LIVE

get_status() re-probes with threshold classification and updates states.
get_health() is a read-only raw probe with full diagnostics.
"""

import asyncio
import time
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from core.config import ProbeDefaults, get_defaults
from core.contracts import ServiceState
from core.errors import ProbeError, RegistryError
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models import (
    HealthSnapshot,
    ProbeResult,
    ServiceDefinition,
    ServiceHealth,
    ServiceStatus,
    StatusSnapshot,
    WakeOutcome,
    WakeResult,
    utc_now,
)
from orchestrator.probe import HealthProber, classify_for_wake
from orchestrator.state import ServiceStateStore
from registry import ServiceRegistry
from registry.resolver import ALL_TARGET, Target

logger = get_logger(__name__, ComponentType.ORCHESTRATOR)

# Floor for a probe issued when the wait budget is nearly spent
MIN_PROBE_TIMEOUT_SEC = 0.5


def describe_target(target: Target) -> str:
    if target is None:
        return ALL_TARGET
    if isinstance(target, str):
        return target
    return ",".join(target)


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000


class Orchestrator:
    """
    Wake/health state machine over a ServiceRegistry.

    Holds only per-service state and last wake times; the registry may be
    reloaded underneath it without losing either.
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        prober: Optional[HealthProber] = None,
        defaults: Optional[ProbeDefaults] = None,
        default_environment: str = "dev",
        state_store: Optional[ServiceStateStore] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            registry: Registry to resolve services against
            prober: Health prober (built from defaults if omitted)
            defaults: Probe timing defaults
            default_environment: Environment used when a call passes none
            state_store: Optional pre-built state store
        """
        self.registry = registry
        self.defaults = defaults or (prober.defaults if prober else get_defaults().probe)
        self.prober = prober or HealthProber(self.defaults)
        self.default_environment = default_environment
        self._store = state_store or ServiceStateStore()

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    def get_state(self, name: str, environment: Optional[str] = None) -> ServiceState:
        return self._store.get_state(name, environment or self.default_environment)

    def get_last_wake_time(self, name: str, environment: Optional[str] = None) -> Optional[datetime]:
        return self._store.get_last_wake_time(name, environment or self.default_environment)

    def states(self, environment: Optional[str] = None) -> Dict[str, ServiceState]:
        return self._store.states(environment or self.default_environment)

    def clear_states(self) -> None:
        """Forget every state and wake time (for testing)."""
        self._store.clear()

    # ------------------------------------------------------------------
    # Probing
    # ------------------------------------------------------------------

    async def _threshold_probe(
        self,
        service: ServiceDefinition,
        timeout: float,
    ) -> Tuple[ProbeResult, ServiceState]:
        """Probe and classify for the wake/status path; ProbeError -> FAILED."""
        try:
            probe = await self.prober.probe(service, timeout)
        except ProbeError as e:
            logger.warning(f"Probe error for {service.name}: {e}")
            return ProbeResult(state=ServiceState.FAILED, error=str(e)), ServiceState.FAILED

        return probe, classify_for_wake(probe, self.defaults.slow_threshold_ms)

    # ------------------------------------------------------------------
    # Wake
    # ------------------------------------------------------------------

    async def wake(
        self,
        target: Target = ALL_TARGET,
        environment: Optional[str] = None,
        wait: bool = False,
        timeout_seconds: Optional[float] = None,
    ) -> WakeOutcome:
        """
        Wake target and its dependencies in dependency order.

        Args:
            target: "all", a service or group name, or a list of names
            environment: Environment name (defaults to default_environment)
            wait: Keep probing each service until it leaves DEAD/WAKING
            timeout_seconds: Per-service readiness budget

        Returns:
            WakeOutcome; failures are reported in it, never raised
        """
        environment = environment or self.default_environment
        if timeout_seconds is None:
            timeout_seconds = self.defaults.wake_timeout_seconds
        started = time.monotonic()

        with log_context(
            environment=environment,
            target=describe_target(target),
            operation="wake",
        ):
            try:
                order = self.registry.resolve_wake_order(target, environment)
            except RegistryError as e:
                logger.error(f"Cannot resolve wake order: {e}")
                outcome = WakeOutcome.failed(str(e), target=target, environment=environment)
                outcome.total_duration_ms = _elapsed_ms(started)
                return outcome

            log_checkpoint("wake_started", {
                "order": [s.name for s in order],
                "wait": wait,
                "timeout_seconds": timeout_seconds,
            })

            results: List[WakeResult] = []
            for service in order:
                results.append(
                    await self._wake_service(service, environment, wait, timeout_seconds)
                )

            outcome = WakeOutcome(
                success=all(r.state.is_ready() for r in results),
                services=results,
                total_duration_ms=_elapsed_ms(started),
                target=target,
                environment=environment,
            )

            log_checkpoint("wake_completed", {
                "success": outcome.success,
                "summary": outcome.counts(),
                "total_duration_ms": round(outcome.total_duration_ms, 2),
            })
            return outcome

    async def _wake_service(
        self,
        service: ServiceDefinition,
        environment: str,
        wait: bool,
        timeout_seconds: float,
    ) -> WakeResult:
        """Wake one service; never raises."""
        with log_context(service=service.name):
            self._store.set_state(service.name, environment, ServiceState.DEAD)
            wake_time = self._store.mark_wake(service.name, environment)

            started = time.monotonic()
            deadline = started + timeout_seconds
            attempts = 0

            try:
                while True:
                    attempts += 1
                    remaining = max(deadline - time.monotonic(), MIN_PROBE_TIMEOUT_SEC)
                    probe, state = await self._threshold_probe(
                        service,
                        min(self.defaults.socket_timeout_seconds, remaining),
                    )
                    self._store.set_state(service.name, environment, state)

                    if not wait or not state.is_pending():
                        break

                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        logger.warning(
                            f"{service.name} still {state.value} after "
                            f"{timeout_seconds}s ({attempts} attempts)"
                        )
                        break

                    logger.debug(f"{service.name} is {state.value}, retrying")
                    await asyncio.sleep(min(self.defaults.wake_poll_interval_seconds, remaining))

            except Exception as e:
                logger.exception(f"Unexpected error waking {service.name}: {e}")
                self._store.set_state(service.name, environment, ServiceState.FAILED)
                return WakeResult(
                    name=service.name,
                    state=ServiceState.FAILED,
                    url=service.url,
                    duration_ms=_elapsed_ms(started),
                    last_wake_time=wake_time,
                    error=str(e) or type(e).__name__,
                    attempts=attempts,
                )

            logger.info(f"{service.name} -> {state.value} after {attempts} attempt(s)")
            return WakeResult(
                name=service.name,
                state=state,
                url=service.url,
                duration_ms=_elapsed_ms(started),
                last_wake_time=wake_time,
                error=None if state.is_ready() else probe.error,
                status_code=probe.status_code,
                attempts=attempts,
            )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    async def get_status(
        self,
        target: Target = None,
        environment: Optional[str] = None,
    ) -> StatusSnapshot:
        """
        Re-probe target services and store their threshold-classified state.

        Never touches last wake times; works without a prior wake.
        """
        environment = environment or self.default_environment

        with log_context(environment=environment, operation="status"):
            services = self.registry.select_services(target, environment)
            rows = await asyncio.gather(
                *(self._status_row(s, environment) for s in services)
            )
            return StatusSnapshot(services=list(rows), environment=environment)

    async def _status_row(self, service: ServiceDefinition, environment: str) -> ServiceStatus:
        probe, state = await self._threshold_probe(
            service, self.defaults.status_timeout_seconds
        )
        self._store.set_state(service.name, environment, state)

        return ServiceStatus(
            name=service.name,
            state=state,
            url=service.url,
            last_wake_time=self._store.get_last_wake_time(service.name, environment),
            status_code=probe.status_code,
            response_time_ms=probe.response_time_ms,
        )

    # ------------------------------------------------------------------
    # Health (diagnostics)
    # ------------------------------------------------------------------

    async def get_health(
        self,
        target: Target = None,
        environment: Optional[str] = None,
    ) -> HealthSnapshot:
        """Raw-classified diagnostics; writes no state."""
        environment = environment or self.default_environment

        with log_context(environment=environment, operation="health"):
            services = self.registry.select_services(target, environment)
            rows = await asyncio.gather(
                *(self._health_row(s, environment) for s in services)
            )
            return HealthSnapshot(services=list(rows), environment=environment)

    async def _health_row(self, service: ServiceDefinition, environment: str) -> ServiceHealth:
        try:
            probe = await self.prober.probe(service, self.defaults.socket_timeout_seconds)
        except ProbeError as e:
            probe = ProbeResult(state=ServiceState.FAILED, error=str(e))

        return ServiceHealth(
            name=service.name,
            state=probe.state,
            url=service.url,
            status_code=probe.status_code,
            response_time_ms=probe.response_time_ms,
            last_checked=probe.checked_at or utc_now(),
            dependencies=list(service.depends_on),
            last_wake_time=self._store.get_last_wake_time(service.name, environment),
            uptime=probe.uptime,
            error=probe.error,
        )


__all__ = ["Orchestrator", "describe_target"]
