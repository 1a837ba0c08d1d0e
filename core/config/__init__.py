# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for schema synchronization.
"""

from core.config.defaults import (
    SyncDefaults,
    DatabaseDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "SyncDefaults",
    "DatabaseDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
