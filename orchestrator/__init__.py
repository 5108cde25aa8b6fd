# ============================================================================
# ORCHESTRATOR MODULE
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - Wake orchestration
# PURPOSE: Probe, wake and monitor registered services
# CREATED: 04 OCT 2026
# ============================================================================
"""
Orchestrator Module

Usage:
    from orchestrator import Orchestrator, MonitorLoop

    orchestrator = Orchestrator(registry)
    outcome = await orchestrator.wake("consumer", "dev", wait=True)

    report = await MonitorLoop(orchestrator.get_status, interval_seconds=10).run()
"""

from orchestrator.probe import HealthProber, classify_response, classify_for_wake
from orchestrator.state import ServiceStateStore
from orchestrator.wake import Orchestrator
from orchestrator.monitor import (
    LogRenderer,
    MonitorLoop,
    MonitorRenderer,
    MonitorReport,
    StateTransition,
)

__all__ = [
    "HealthProber",
    "classify_response",
    "classify_for_wake",
    "ServiceStateStore",
    "Orchestrator",
    "MonitorLoop",
    "MonitorReport",
    "MonitorRenderer",
    "LogRenderer",
    "StateTransition",
]
