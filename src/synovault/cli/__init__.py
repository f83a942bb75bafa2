"""Command-line interface for SynoVault.

Commands:
    - install: Provision Vaultwarden (preflight, config, container, health)
    - verify: Poll the health endpoint of an existing installation
    - token: Generate an admin token

Architecture:
    Uses Click for command-line parsing with a group-based structure.
    Each command is implemented in its own module and lazy-loaded.
"""

from .main import cli, main

__all__ = ["cli", "main"]
