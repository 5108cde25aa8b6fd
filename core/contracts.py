# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Foundation - Service lifecycle enum
# PURPOSE: Define the states a probed service can be in
# CREATED: 02 OCT 2026
# ============================================================================
"""
Base contracts for the wake orchestrator.

ServiceState crosses every boundary in the system:
- Orchestrator state store (in-memory)
- REST responses (serialized as the lowercase value)
- CLI rendering and the monitor loop
"""

from enum import Enum


class ServiceState(str, Enum):
    """
    Service lifecycle states.

    Every probe re-evaluates the state from scratch:
        UNKNOWN -> DEAD | WAKING | LIVE | FAILED
        any concrete state -> any concrete state

    There is no terminal state; services are re-probed indefinitely.
    """
    DEAD = "dead"            # Last probe got no HTTP response (initial wake state)
    WAKING = "waking"        # Responded slowly, or signaled transient 5xx
    LIVE = "live"            # Responded promptly with a non-5xx status
    FAILED = "failed"        # 5xx on a raw probe, or protocol/URL error
    UNKNOWN = "unknown"      # Never probed

    def is_ready(self) -> bool:
        """Check if the service can be depended upon."""
        return self is ServiceState.LIVE

    def is_concrete(self) -> bool:
        """Check if a probe has determined this state."""
        return self is not ServiceState.UNKNOWN

    def is_pending(self) -> bool:
        """Check if a waiting caller should probe again."""
        return self in (ServiceState.DEAD, ServiceState.WAKING)


__all__ = ["ServiceState"]
