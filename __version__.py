# ============================================================================
# VERSION - WAKE ORCHESTRATOR
# ============================================================================
# EPOCH: 1 - WAKE ORCHESTRATION
# ============================================================================
"""
Version information for the Wake Orchestrator.

This is the single source of truth for the application version.
Updated manually for each release.
"""
# Version format: major.minor.patch.build
__version__ = "0.3.1.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-14"

EPOCH = 1
CODENAME = "Wake Orchestrator"
