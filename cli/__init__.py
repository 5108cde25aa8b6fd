# ============================================================================
# CLI MODULE
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# STATUS: CLI - Command-line client
# PURPOSE: wakeorch console script
# CREATED: 09 OCT 2026
# ============================================================================

from cli.client import OrchestratorClient, OrchestratorClientError
from cli.config import CliConfig

__all__ = ["OrchestratorClient", "OrchestratorClientError", "CliConfig"]
