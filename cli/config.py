# ============================================================================
# CLI CONFIGURATION
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: CLI - User configuration
# PURPOSE: Orchestrator URL, token and preferences for the wakeorch CLI
# CREATED: 09 OCT 2026
# ============================================================================
"""
CLI Configuration

Resolution order (later wins):
1. Built-in defaults
2. ~/.wakeorch/config.json (written by `wakeorch init`)
3. WAKEORCH_* environment variables
4. Command-line flags (applied by cli.main)
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".wakeorch"
CONFIG_FILE = CONFIG_DIR / "config.json"

OUTPUT_FORMATS = ("table", "json")


class CliConfigError(Exception):
    """Config file unreadable or invalid."""
    pass


@dataclass(frozen=True)
class CliConfig:
    """Settings for talking to an orchestrator."""
    orchestrator_url: str = "http://localhost:3000"
    token: Optional[str] = None
    environment: str = "dev"
    output_format: str = "table"
    timeout: int = 300
    auto_wait: bool = True

    @classmethod
    def from_file(cls, path: Optional[Path] = None) -> "CliConfig":
        """Defaults overlaid with the config file, if it exists."""
        path = Path(path) if path else CONFIG_FILE
        if not path.exists():
            return cls()

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise CliConfigError(f"Failed to load configuration from {path}: {e}") from e

        if not isinstance(data, dict):
            raise CliConfigError(f"Configuration in {path} must be a JSON object")

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "CliConfig":
        """Defaults, then config file, then environment."""
        return cls.from_file(path).with_env()

    def with_env(self) -> "CliConfig":
        """Apply WAKEORCH_* environment overrides."""
        overrides: Dict[str, Any] = {}
        if os.getenv("WAKEORCH_URL"):
            overrides["orchestrator_url"] = os.environ["WAKEORCH_URL"]
        if os.getenv("WAKEORCH_TOKEN"):
            overrides["token"] = os.environ["WAKEORCH_TOKEN"]
        if os.getenv("WAKEORCH_ENV"):
            overrides["environment"] = os.environ["WAKEORCH_ENV"]
        if os.getenv("WAKEORCH_FORMAT"):
            overrides["output_format"] = os.environ["WAKEORCH_FORMAT"]
        return replace(self, **overrides) if overrides else self

    def save(self, path: Optional[Path] = None) -> Path:
        """Write to the config file, creating its directory."""
        path = Path(path) if path else CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        logger.debug(f"Saved CLI configuration to {path}")
        return path

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["CliConfig", "CliConfigError", "CONFIG_FILE", "OUTPUT_FORMATS"]
