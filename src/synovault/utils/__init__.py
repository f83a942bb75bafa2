"""Shared utilities for the installer.

Modules:
    config: Immutable installer configuration and YAML loading
    logger: Rich component logger
"""

from . import config, logger

__all__ = ["config", "logger"]
