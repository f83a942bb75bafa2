"""Deployment and container management for SynoVault.

This module provides configuration generation, container lifecycle and
health verification for the Vaultwarden service.
"""

from .config_files import prepare_data_directory, write_compose_file, write_env_file
from .container_manager import pull_image, start_container
from .health import poll_until_healthy, verify_installation
from .installer import InstallOutcome, run_install
from .runtime_helper import RuntimeClient

__all__ = [
    "RuntimeClient",
    "prepare_data_directory",
    "write_env_file",
    "write_compose_file",
    "pull_image",
    "start_container",
    "poll_until_healthy",
    "verify_installation",
    "run_install",
    "InstallOutcome",
]
