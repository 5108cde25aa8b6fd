# ============================================================================
# CLI OUTPUT RENDERING
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: CLI - Console output
# PURPOSE: Tables, wake timelines and monitor output for the terminal
# CREATED: 09 OCT 2026
# ============================================================================
"""
CLI Output Rendering

Works on the JSON payloads returned by the API (or the to_dict() of the
core result types for local commands), so remote and local commands share
one renderer.
"""

import json
import sys
from typing import Any, Dict, List, Optional, Sequence, TextIO

from core.models import StatusSnapshot
from orchestrator.monitor import MonitorRenderer

STATUS_SYMBOLS = {
    "live": "✓",
    "waking": "⟳",
    "dead": "✗",
    "failed": "✗",
    "unknown": "?",
}


def format_duration(ms: Optional[float]) -> str:
    """350ms, 4.2s, 2m 5s"""
    if ms is None:
        return "-"
    if ms < 1000:
        return f"{ms:.0f}ms"
    seconds = ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"


def _symbol(status: str) -> str:
    return STATUS_SYMBOLS.get(status, "?")


def _table(headers: Sequence[str], rows: List[Sequence[Any]]) -> str:
    cells = [[str(h) for h in headers]] + [["-" if c is None else str(c) for c in row] for row in rows]
    widths = [max(len(r[i]) for r in cells) for i in range(len(headers))]
    lines = []
    for index, row in enumerate(cells):
        lines.append("  ".join(c.ljust(widths[i]) for i, c in enumerate(row)).rstrip())
        if index == 0:
            lines.append("  ".join("-" * w for w in widths))
    return "\n".join(lines)


def _summary_line(summary: Dict[str, int]) -> str:
    parts = [f"{_symbol(state)} {state}: {count}" for state, count in summary.items() if count]
    return "  ".join(parts) if parts else "no services"


def _status_table(services: List[Dict[str, Any]]) -> str:
    return _table(
        ["SERVICE", "STATUS", "LAST WAKE", "RESPONSE", "URL"],
        [
            [
                s["name"],
                f"{_symbol(s.get('status'))} {s.get('status')}",
                s.get("last_wake_time"),
                format_duration(s.get("response_time_ms")),
                s.get("url"),
            ]
            for s in services
        ],
    )


class Console:
    """Writes either JSON or human-readable tables."""

    def __init__(self, output_format: str = "table", out: Optional[TextIO] = None):
        self.output_format = output_format
        self.out = out or sys.stdout

    @property
    def as_json(self) -> bool:
        return self.output_format == "json"

    def echo(self, text: str = "") -> None:
        print(text, file=self.out)

    def json(self, payload: Any) -> None:
        self.echo(json.dumps(payload, indent=2, default=str))

    def error(self, message: str) -> None:
        if self.as_json:
            self.json({"success": False, "error": message})
        else:
            self.echo(f"✗ {message}")

    # ------------------------------------------------------------------
    # Status / health
    # ------------------------------------------------------------------

    def status(self, body: Dict[str, Any]) -> None:
        if self.as_json:
            return self.json(body)

        services = body.get("services", [])
        self.echo(f"Service status ({body.get('environment')})")
        self.echo()
        if not services:
            self.echo("No services found.")
            return

        self.echo(_status_table(services))
        self.echo()
        self.echo(_summary_line(body.get("summary", {})))

    def health(self, body: Dict[str, Any]) -> None:
        if self.as_json:
            return self.json(body)

        services = body.get("services", [])
        self.echo(f"Service health ({body.get('environment')})")
        self.echo()
        if not services:
            self.echo("No services found.")
            return

        self.echo(_table(
            ["SERVICE", "STATUS", "HTTP", "RESPONSE", "UPTIME", "DEPENDS ON", "ERROR"],
            [
                [
                    s["name"],
                    f"{_symbol(s.get('status'))} {s.get('status')}",
                    s.get("status_code"),
                    format_duration(s.get("response_time_ms")),
                    s.get("uptime"),
                    ", ".join(s.get("dependencies") or []) or None,
                    s.get("error"),
                ]
                for s in services
            ],
        ))
        self.echo()
        self.echo(_summary_line(body.get("summary", {})))

    # ------------------------------------------------------------------
    # Wake
    # ------------------------------------------------------------------

    def wake(self, body: Dict[str, Any]) -> None:
        if self.as_json:
            return self.json(body)

        self.echo(f"Wake {body.get('target')} ({body.get('environment')})")
        self.echo()

        if body.get("error") and not body.get("services"):
            self.echo(f"✗ {body['error']}")
            return

        services = body.get("services", [])
        if not services:
            self.echo("No services to wake.")
            return

        self.echo("Timeline:")
        for index, service in enumerate(services):
            branch = "└" if index == len(services) - 1 else "│"
            status = service.get("status")
            self.echo(
                f"  {branch} {_symbol(status)} {service['name']} "
                f"{status} ({format_duration(service.get('duration_ms'))})"
            )
            if service.get("error"):
                self.echo(f"      Error: {service['error']}")

        summary = body.get("summary", {})
        self.echo()
        self.echo(f"  Live: {summary.get('live', 0)}  "
                  f"Waking: {summary.get('waking', 0)}  "
                  f"Dead: {summary.get('dead', 0)}  "
                  f"Failed: {summary.get('failed', 0)}")
        self.echo(f"  Total time: {format_duration(body.get('total_duration_ms'))}")
        self.echo()
        self.echo("All services are live!" if body.get("success")
                  else "Some services are not live. Check errors above.")

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def order(self, names: List[str], environment: str, target: str) -> None:
        if self.as_json:
            return self.json({"environment": environment, "target": target, "order": names})

        self.echo(f"Wake order for {target} ({environment})")
        if not names:
            self.echo("  (nothing to wake)")
        for index, name in enumerate(names, start=1):
            self.echo(f"  {index:>2}. {name}")

    def registry_stats(self, stats: Dict[str, Any], source: Optional[str] = None) -> None:
        if self.as_json:
            return self.json({"success": True, "source": source, "stats": stats})

        if source:
            self.echo(f"✓ Registry valid: {source}")
        self.echo(f"  Total services: {stats.get('total_services', 0)}")
        for env in stats.get("environments", []):
            self.echo(f"  {env['name']}: {env['service_count']} services")


class ConsoleMonitorRenderer(MonitorRenderer):
    """Monitor output for the terminal."""

    def __init__(self, console: Console):
        self.console = console

    def render_snapshot(self, snapshot: StatusSnapshot, transitions, poll, final):
        if self.console.as_json:
            payload = snapshot.to_dict()
            payload["poll"] = poll
            payload["final"] = final
            payload["transitions"] = [t.to_dict() for t in transitions]
            self.console.echo(json.dumps(payload, default=str))
            return

        label = "final" if final else f"poll {poll}"
        self.console.echo(f"[{snapshot.timestamp.strftime('%H:%M:%S')}] {label}")
        if snapshot.services:
            self.console.echo(_status_table([s.to_dict() for s in snapshot.services]))
        self.console.echo(_summary_line(snapshot.counts()))
        if snapshot.all_live:
            self.console.echo("All services are live.")
        for transition in transitions:
            self.console.echo(f"    {transition}")
        self.console.echo()

    def render_error(self, error, poll):
        self.console.echo(f"[poll {poll}] status check failed: {error}")

    def render_report(self, report):
        if self.console.as_json:
            self.console.echo(json.dumps(report.to_dict(), default=str))
            return
        self.console.echo()
        self.console.echo(
            f"Monitor finished: {report.polls} polls, {report.failures} failed, "
            f"{len(report.transitions)} transitions"
            + (" (interrupted)" if report.interrupted else "")
        )


__all__ = ["Console", "ConsoleMonitorRenderer", "format_duration"]
