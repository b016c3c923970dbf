"""
Runtime Configuration Module

Provides configuration loading and management for tree builds.
"""

from .runtime import (
    BuildConfig,
    LoggingConfig,
    RuntimeConfig,
    TreeConfig,
    get_default_config,
    get_default_config_template,
    set_default_config,
)

__all__ = [
    "BuildConfig",
    "LoggingConfig",
    "RuntimeConfig",
    "TreeConfig",
    "get_default_config",
    "get_default_config_template",
    "set_default_config",
]
