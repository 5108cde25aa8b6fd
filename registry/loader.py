# ============================================================================
# REGISTRY FILE LOADER
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: Infrastructure - Registry file parsing
# PURPOSE: Read YAML/JSON registry files into a generic tree
# CREATED: 03 OCT 2026
# ============================================================================
"""
Registry File Loader

Only parses. Structural checks happen in registry.validation, which never
sees raw text.
"""

import json
import logging
from pathlib import Path
from typing import Any, Union

import yaml

from core.errors import RegistryLoadError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}
JSON_SUFFIXES = {".json"}


def detect_format(path: Union[str, Path]) -> str:
    """Return "yaml" or "json" from the file suffix."""
    suffix = Path(path).suffix.lower()
    if suffix in YAML_SUFFIXES:
        return "yaml"
    if suffix in JSON_SUFFIXES:
        return "json"
    raise RegistryLoadError(
        f"Unsupported registry format '{suffix or '(none)'}' "
        f"(expected .yaml, .yml or .json)",
        source=str(path),
    )


def parse_registry_text(content: str, fmt: str = "yaml", source: str = "<string>") -> Any:
    """
    Parse registry text.

    Args:
        content: Raw YAML or JSON text
        fmt: "yaml" or "json"
        source: Description used in error messages

    Raises:
        RegistryLoadError: Unknown format or parse failure
    """
    fmt = fmt.lower()
    try:
        if fmt in ("yaml", "yml"):
            return yaml.safe_load(content)
        if fmt == "json":
            return json.loads(content)
    except yaml.YAMLError as e:
        raise RegistryLoadError(f"Invalid YAML in {source}: {e}", source=source) from e
    except json.JSONDecodeError as e:
        raise RegistryLoadError(f"Invalid JSON in {source}: {e}", source=source) from e

    raise RegistryLoadError(f"Unsupported registry format '{fmt}'", source=source)


def load_registry_file(path: Union[str, Path]) -> Any:
    """Read and parse a registry file."""
    path = Path(path)
    fmt = detect_format(path)

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RegistryLoadError(
            f"Failed to read registry file {path}: {e}",
            source=str(path),
        ) from e

    logger.debug(f"Read registry file {path} ({len(content)} bytes, {fmt})")
    return parse_registry_text(content, fmt, source=str(path))


__all__ = ["detect_format", "parse_registry_text", "load_registry_file"]
