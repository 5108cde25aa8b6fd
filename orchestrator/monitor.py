# ============================================================================
# MONITOR LOOP
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Core - Bounded status polling
# PURPOSE: Watch service states over a fixed window and surface transitions
# CREATED: 05 OCT 2026
# ============================================================================
"""
Monitor Loop

Polls a status source immediately, then every interval_seconds until
duration_seconds have elapsed, then once more (the final poll). After each
poll the renderer receives the snapshot, its per-state counts and the
state transitions since the previous poll.

The loop is observational: it only calls the status source. A failing
poll is logged and counted and the loop keeps going. stop() or
SIGINT/SIGTERM (after install_signal_handlers) ends it early without a
final poll.

Usage:
    monitor = MonitorLoop(orchestrator.get_status, interval_seconds=10)
    report = await monitor.run()
"""

import asyncio
import signal
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from core.config import get_defaults
from core.contracts import ServiceState
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models import StatusSnapshot, utc_now

logger = get_logger(__name__, ComponentType.MONITOR)

StatusSource = Callable[[], Awaitable[StatusSnapshot]]


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass
class StateTransition:
    """A service changed state between two consecutive polls."""
    name: str
    previous: ServiceState
    current: ServiceState
    at: datetime = field(default_factory=utc_now)

    def __str__(self) -> str:
        return f"{self.name}: {self.previous.value} -> {self.current.value}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "previous": self.previous.value,
            "current": self.current.value,
            "at": self.at.isoformat(),
        }


@dataclass
class MonitorReport:
    """Summary of one monitor run."""
    polls: int = 0
    failures: int = 0
    transitions: List[StateTransition] = field(default_factory=list)
    last_snapshot: Optional[StatusSnapshot] = None
    interrupted: bool = False
    started_at: datetime = field(default_factory=utc_now)
    finished_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "polls": self.polls,
            "failures": self.failures,
            "transitions": [t.to_dict() for t in self.transitions],
            "last_summary": self.last_snapshot.counts() if self.last_snapshot else None,
            "interrupted": self.interrupted,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


def diff_states(
    previous: Dict[str, ServiceState],
    current: Dict[str, ServiceState],
) -> List[StateTransition]:
    """Transitions for services present in both polls whose state changed."""
    return [
        StateTransition(name=name, previous=previous[name], current=state)
        for name, state in current.items()
        if name in previous and previous[name] != state
    ]


# ============================================================================
# RENDERERS
# ============================================================================

class MonitorRenderer:
    """Receives monitor output. Subclasses override what they display."""

    def render_snapshot(
        self,
        snapshot: StatusSnapshot,
        transitions: List[StateTransition],
        poll: int,
        final: bool,
    ) -> None:
        pass

    def render_error(self, error: BaseException, poll: int) -> None:
        pass

    def render_report(self, report: MonitorReport) -> None:
        pass


class LogRenderer(MonitorRenderer):
    """Writes monitor output to the log."""

    def render_snapshot(self, snapshot, transitions, poll, final):
        counts = snapshot.counts()
        label = "final" if final else f"poll {poll}"
        summary = ", ".join(f"{state}={n}" for state, n in counts.items() if n)
        logger.info(f"[{label}] {len(snapshot.services)} services: {summary or 'none'}")

        for row in snapshot.services:
            logger.info(f"  {row.name}: {row.state.value}")
        for transition in transitions:
            logger.info(f"  transition {transition}")

    def render_error(self, error, poll):
        logger.warning(f"[poll {poll}] status check failed: {error}")

    def render_report(self, report):
        logger.info(
            f"Monitor finished: {report.polls} polls, {report.failures} failures, "
            f"{len(report.transitions)} transitions"
            + (" (interrupted)" if report.interrupted else "")
        )


# ============================================================================
# LOOP
# ============================================================================

class MonitorLoop:
    """
    Bounded-duration status poller.

    Args:
        status_source: Async callable returning a StatusSnapshot
        interval_seconds: Delay between polls
        duration_seconds: Total monitoring window
        renderer: Output sink (LogRenderer if omitted)
    """

    def __init__(
        self,
        status_source: StatusSource,
        interval_seconds: Optional[float] = None,
        duration_seconds: Optional[float] = None,
        renderer: Optional[MonitorRenderer] = None,
    ):
        defaults = get_defaults().monitor
        self.status_source = status_source
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None else defaults.interval_seconds
        )
        self.duration_seconds = (
            duration_seconds if duration_seconds is not None else defaults.duration_seconds
        )
        self.renderer = renderer or LogRenderer()

        self._stop_event = asyncio.Event()
        self._previous: Dict[str, ServiceState] = {}
        self._signals_installed: List[int] = []

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def stop(self) -> None:
        """Request the loop to end after the current poll."""
        if not self._stop_event.is_set():
            logger.info("Monitor stop requested")
            self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def install_signal_handlers(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Route SIGINT/SIGTERM to stop()."""
        loop = loop or asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
                self._signals_installed.append(sig)
            except (NotImplementedError, RuntimeError):
                # Not supported on this platform or outside the main thread
                logger.debug(f"Could not install handler for {sig!r}")

    def remove_signal_handlers(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        loop = loop or asyncio.get_running_loop()
        for sig in self._signals_installed:
            loop.remove_signal_handler(sig)
        self._signals_installed.clear()

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> MonitorReport:
        """Poll until the window closes or stop() is called."""
        report = MonitorReport()
        deadline = time.monotonic() + self.duration_seconds

        with log_context(operation="monitor"):
            logger.info(
                f"Monitoring every {self.interval_seconds}s for {self.duration_seconds}s"
            )

            while not self.stopped:
                await self._poll(report, final=False)

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                if await self._wait(min(self.interval_seconds, remaining)):
                    break
                if time.monotonic() >= deadline:
                    break

            report.interrupted = self.stopped
            if not report.interrupted:
                await self._poll(report, final=True)

            report.finished_at = utc_now()
            self.renderer.render_report(report)
            log_checkpoint("monitor_finished", report.to_dict())
            return report

    async def _wait(self, seconds: float) -> bool:
        """Sleep up to seconds; True if stop() was called meanwhile."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def _poll(self, report: MonitorReport, final: bool) -> None:
        report.polls += 1
        try:
            snapshot = await self.status_source()
        except Exception as e:
            report.failures += 1
            logger.warning(f"Status poll {report.polls} failed: {e}")
            self.renderer.render_error(e, report.polls)
            return

        current = snapshot.states()
        transitions = diff_states(self._previous, current)
        self._previous = current

        report.transitions.extend(transitions)
        report.last_snapshot = snapshot
        self.renderer.render_snapshot(snapshot, transitions, report.polls, final)


__all__ = [
    "StatusSource",
    "StateTransition",
    "MonitorReport",
    "MonitorRenderer",
    "LogRenderer",
    "MonitorLoop",
    "diff_states",
]
