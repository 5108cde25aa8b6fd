# ============================================================================
# WAKEORCH CLI
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: CLI - Command-line entry point
# PURPOSE: Wake, inspect and monitor services from the terminal
# CREATED: 10 OCT 2026
# ============================================================================
"""
wakeorch command-line interface.

Remote commands talk to a running orchestrator; pass --registry FILE to run
the same command in-process against a local registry file instead.

Usage:
    wakeorch init --url http://localhost:3000 --token dev-token
    wakeorch status [service] [-e dev]
    wakeorch health [service] [-e dev]
    wakeorch wake [target] [--no-wait] [--timeout 300] [--monitor]
    wakeorch monitor [target] [--interval 10] [--duration 300]
    wakeorch validate config/services.yaml
    wakeorch order consumer --registry config/services.yaml -e dev
    wakeorch serve --registry config/services.yaml --port 3000

Exit code 0 on success, 1 on failure.
"""

import argparse
import asyncio
import inspect
import sys
from dataclasses import replace
from functools import partial
from pathlib import Path
from typing import List, Optional, Union

from __version__ import __version__
from cli.client import OrchestratorClient
from cli.config import CONFIG_FILE, OUTPUT_FORMATS, CliConfig, CliConfigError
from cli.render import Console, ConsoleMonitorRenderer
from core.config import get_defaults
from core.errors import CircularDependencyError, RegistryError
from core.logging import ComponentType, configure_logging, get_logger
from orchestrator import MonitorLoop, Orchestrator
from registry import load_registry

logger = get_logger(__name__, ComponentType.CLI)


def parse_target(value: Optional[str]) -> Union[str, List[str]]:
    """Comma-separated names become a list; empty means all."""
    if not value:
        return "all"
    if "," in value:
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


def _local_orchestrator(registry_file: str, environment: str) -> Orchestrator:
    registry = load_registry(Path(registry_file))
    return Orchestrator(registry, default_environment=environment)


def _client(config: CliConfig) -> OrchestratorClient:
    return OrchestratorClient(config.orchestrator_url, token=config.token)


# ============================================================================
# COMMANDS
# ============================================================================

async def cmd_status(args, config: CliConfig, console: Console) -> int:
    env = args.env or config.environment
    if args.registry:
        snapshot = await _local_orchestrator(args.registry, env).get_status(args.service, env)
        code, body = 200, {"success": True, **snapshot.to_dict()}
    else:
        code, body = await _client(config).status(env, args.service)

    if code != 200:
        console.error(body.get("error", f"HTTP {code}"))
        return 1
    console.status(body)
    return 0


async def cmd_health(args, config: CliConfig, console: Console) -> int:
    env = args.env or config.environment
    if args.registry:
        snapshot = await _local_orchestrator(args.registry, env).get_health(args.service, env)
        code, body = 200, {"success": True, **snapshot.to_dict()}
    else:
        code, body = await _client(config).health(env, args.service)

    if code != 200:
        console.error(body.get("error", f"HTTP {code}"))
        return 1
    console.health(body)
    return 0


async def cmd_wake(args, config: CliConfig, console: Console) -> int:
    env = args.env or config.environment
    target = parse_target(args.target)
    wait = config.auto_wait and not args.no_wait
    timeout = args.timeout or config.timeout

    if args.registry:
        orchestrator = _local_orchestrator(args.registry, env)
        outcome = await orchestrator.wake(target, env, wait=wait, timeout_seconds=timeout)
        body = outcome.to_dict()
        status_source = partial(orchestrator.get_status, None, env)
    else:
        client = _client(config)
        code, body = await client.wake(target, env, wait=wait, timeout=timeout)
        if code not in (200, 207, 422):
            console.error(body.get("error", f"HTTP {code}"))
            return 1
        status_source = partial(client.get_status_snapshot, env)

    console.wake(body)

    if args.monitor:
        await _run_monitor(status_source, args, console)

    return 0 if body.get("success") else 1


async def cmd_monitor(args, config: CliConfig, console: Console) -> int:
    env = args.env or config.environment
    service = args.target if args.target and args.target != "all" else None

    if args.registry:
        orchestrator = _local_orchestrator(args.registry, env)
        status_source = partial(orchestrator.get_status, service, env)
    else:
        status_source = partial(_client(config).get_status_snapshot, env, service)

    report = await _run_monitor(status_source, args, console)
    return 1 if report.polls and report.failures == report.polls else 0


async def _run_monitor(status_source, args, console: Console):
    monitor = MonitorLoop(
        status_source,
        interval_seconds=args.interval,
        duration_seconds=args.duration,
        renderer=ConsoleMonitorRenderer(console),
    )
    monitor.install_signal_handlers()
    try:
        return await monitor.run()
    finally:
        monitor.remove_signal_handlers()


def cmd_validate(args, config: CliConfig, console: Console) -> int:
    try:
        registry = load_registry(Path(args.file))
    except RegistryError as e:
        console.error(f"Invalid registry {args.file}: {e}")
        return 1

    console.registry_stats(registry.get_stats().to_dict(), source=args.file)
    return 0


def cmd_order(args, config: CliConfig, console: Console) -> int:
    env = args.env or config.environment
    target = parse_target(args.target)

    try:
        registry = load_registry(Path(args.registry))
        order = registry.resolve_wake_order(target, env)
    except CircularDependencyError as e:
        console.error(str(e))
        return 1
    except RegistryError as e:
        console.error(f"Invalid registry {args.registry}: {e}")
        return 1

    console.order([s.name for s in order], env, args.target or "all")
    return 0


async def cmd_init(args, config: CliConfig, console: Console) -> int:
    path = Path(args.config) if args.config else CONFIG_FILE
    base = CliConfig() if args.force else config

    updated = replace(
        base,
        orchestrator_url=args.url or base.orchestrator_url,
        token=args.token or base.token,
        environment=args.env or base.environment,
        output_format=args.format or base.output_format,
    )

    if await _client(updated).ping():
        console.echo(f"✓ Orchestrator reachable at {updated.orchestrator_url}")
    else:
        console.echo(
            f"! Could not reach orchestrator at {updated.orchestrator_url}. "
            "Make sure it is running."
        )

    saved = updated.save(path)
    console.echo(f"✓ Configuration saved to {saved}")
    return 0


def cmd_serve(args, config: CliConfig, console: Console) -> int:
    import main as server

    server_config = get_defaults().server
    overrides = {}
    if args.registry:
        overrides["registry_file"] = args.registry
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if args.env:
        overrides["default_environment"] = args.env
    if args.require_auth:
        overrides["require_auth"] = True

    server.serve(replace(server_config, **overrides))
    return 0


# ============================================================================
# PARSER
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--url", "-u", help="Orchestrator base URL")
    common.add_argument("--token", "-t", help="API token")
    common.add_argument("--env", "-e", help="Environment (dev, staging, prod)")
    common.add_argument("--format", "-f", choices=OUTPUT_FORMATS, help="Output format")
    common.add_argument("--config", help=f"CLI config file (default: {CONFIG_FILE})")
    common.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    local = argparse.ArgumentParser(add_help=False)
    local.add_argument(
        "--registry", "-r",
        help="Run in-process against this registry file instead of a server",
    )

    monitor_opts = argparse.ArgumentParser(add_help=False)
    monitor_defaults = get_defaults().monitor
    monitor_opts.add_argument(
        "--interval", type=float, default=monitor_defaults.interval_seconds,
        help="Seconds between status polls",
    )
    monitor_opts.add_argument(
        "--duration", type=float, default=monitor_defaults.duration_seconds,
        help="Total monitoring window in seconds",
    )

    parser = argparse.ArgumentParser(
        prog="wakeorch",
        description="Wake interdependent services in dependency order and watch them come up",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", metavar="command")
    sub.required = True

    p = sub.add_parser("init", parents=[common], help="Write CLI configuration")
    p.add_argument("--force", action="store_true", help="Start from defaults instead of the existing file")
    p.set_defaults(handler=cmd_init)

    p = sub.add_parser("status", parents=[common, local], help="Show service status")
    p.add_argument("service", nargs="?", help="Service or group name")
    p.set_defaults(handler=cmd_status)

    p = sub.add_parser("health", parents=[common, local], help="Show detailed service health")
    p.add_argument("service", nargs="?", help="Service or group name")
    p.set_defaults(handler=cmd_health)

    p = sub.add_parser("wake", parents=[common, local, monitor_opts], help="Wake services")
    p.add_argument("target", nargs="?", help='"all" (default), a service, a group, or a,b,c')
    p.add_argument("--no-wait", action="store_true", help="Do not wait for services to be ready")
    p.add_argument("--timeout", type=int, help="Per-service readiness timeout in seconds")
    p.add_argument("--monitor", action="store_true", help="Monitor status after waking")
    p.set_defaults(handler=cmd_wake)

    p = sub.add_parser("monitor", parents=[common, local, monitor_opts], help="Watch service status")
    p.add_argument("target", nargs="?", help="Service or group name (default: all)")
    p.set_defaults(handler=cmd_monitor)

    p = sub.add_parser("validate", parents=[common], help="Validate a registry file")
    p.add_argument("file", help="Registry file (.yaml, .yml, .json)")
    p.set_defaults(handler=cmd_validate)

    p = sub.add_parser("order", parents=[common], help="Print the wake order for a target")
    p.add_argument("target", nargs="?", help='"all" (default), a service, a group, or a,b,c')
    p.add_argument("--registry", "-r", required=True, help="Registry file")
    p.set_defaults(handler=cmd_order)

    p = sub.add_parser("serve", parents=[common], help="Run the orchestrator API server")
    p.add_argument("--registry", "-r", help="Registry file (default: REGISTRY_FILE)")
    p.add_argument("--host", help="Bind address")
    p.add_argument("--port", "-p", type=int, help="Port")
    p.add_argument("--require-auth", action="store_true", help="Reject requests without a bearer token")
    p.set_defaults(handler=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command != "serve":
        configure_logging(level="DEBUG" if args.verbose else "WARNING", stream=sys.stderr)

    try:
        config = CliConfig.load(Path(args.config) if args.config else None)
    except CliConfigError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    overrides = {}
    if args.url:
        overrides["orchestrator_url"] = args.url
    if args.token:
        overrides["token"] = args.token
    if args.format:
        overrides["output_format"] = args.format
    if overrides and args.command != "init":
        config = replace(config, **overrides)

    console = Console(config.output_format)

    handler = args.handler
    try:
        if inspect.iscoroutinefunction(handler):
            return asyncio.run(handler(args, config, console))
        return handler(args, config, console)
    except RegistryError as e:
        console.error(str(e))
        return 1


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
