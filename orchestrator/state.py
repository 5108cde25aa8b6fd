# ============================================================================
# SERVICE STATE STORE
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - In-memory state
# PURPOSE: Latest known state and last wake time per (environment, service)
# CREATED: 04 OCT 2026
# ============================================================================
"""
Service State Store

Process-lifetime, in-memory only. Keys are (environment, service name) so
identically named services in different environments never collide.

All access happens on one event loop; each write replaces a single dict
entry, so concurrent wakes interleave with last-writer-wins semantics.
"""

from datetime import datetime
from typing import Dict, Optional, Tuple

from core.contracts import ServiceState
from core.models import utc_now

StateKey = Tuple[str, str]


class ServiceStateStore:
    """Latest state and wake timestamp for every probed service."""

    def __init__(self):
        self._states: Dict[StateKey, ServiceState] = {}
        self._wake_times: Dict[StateKey, datetime] = {}

    def get_state(self, name: str, environment: str) -> ServiceState:
        """State of a service; UNKNOWN if it was never probed."""
        return self._states.get((environment, name), ServiceState.UNKNOWN)

    def set_state(self, name: str, environment: str, state: ServiceState) -> None:
        if not state.is_concrete():
            raise ValueError(f"{name}: a probe cannot leave a service {state.value}")
        self._states[(environment, name)] = state

    def get_last_wake_time(self, name: str, environment: str) -> Optional[datetime]:
        return self._wake_times.get((environment, name))

    def mark_wake(self, name: str, environment: str) -> datetime:
        """Record a new wake attempt; returns its timestamp."""
        now = utc_now()
        self._wake_times[(environment, name)] = now
        return now

    def states(self, environment: str) -> Dict[str, ServiceState]:
        """Snapshot of known states for one environment."""
        return {
            name: state
            for (env, name), state in self._states.items()
            if env == environment
        }

    def clear(self) -> None:
        self._states.clear()
        self._wake_times.clear()

    def __len__(self) -> int:
        return len(self._states)


__all__ = ["ServiceStateStore", "StateKey"]
