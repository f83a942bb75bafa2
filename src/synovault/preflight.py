"""Preflight checks for the installer.

Confirms the process can actually perform an installation before any file is
written:

1. Root privileges (fatal when missing)
2. Synology platform detection (warnings only)
3. Docker CLI presence and daemon liveness (fatal when missing)
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from synovault.errors import PreflightError
from synovault.utils.logger import get_logger

if TYPE_CHECKING:
    from synovault.deployment.runtime_helper import RuntimeClient

logger = get_logger("preflight")

SYNOINFO_PATH = "/etc/synoinfo.conf"
DEFAULT_VOLUME = "/volume1"


@dataclass(frozen=True)
class PlatformInfo:
    """Best-effort description of the host."""

    is_synology: bool
    dsm_version: str | None
    has_default_volume: bool


def check_root() -> None:
    """Require an effective UID of 0.

    Raises:
        PreflightError: If not running as root
    """
    if os.geteuid() != 0:
        raise PreflightError("This installer must be run as root (use sudo)")
    logger.debug("Running with root privileges")


def _read_dsm_version(synoinfo: Path) -> str:
    try:
        content = synoinfo.read_text(errors="replace")
    except OSError:
        return "unknown"
    match = re.search(r'^majorversion="?([^"\n]*)"?', content, re.MULTILINE)
    return match.group(1) if match else "unknown"


def check_synology(
    synoinfo_path: str = SYNOINFO_PATH, volume_path: str = DEFAULT_VOLUME
) -> PlatformInfo:
    """Detect a Synology DSM host. Never fatal."""
    logger.key_info("Checking Synology NAS environment...")

    synoinfo = Path(synoinfo_path)
    dsm_version = None
    if synoinfo.is_file():
        dsm_version = _read_dsm_version(synoinfo)
        logger.success(f"Detected Synology DSM version: {dsm_version}")
    else:
        logger.warning("Not running on Synology NAS. Installation may still work on other systems.")

    has_volume = Path(volume_path).is_dir()
    if not has_volume:
        logger.warning(f"{volume_path} not found. Please ensure a volume is available.")

    return PlatformInfo(
        is_synology=dsm_version is not None,
        dsm_version=dsm_version,
        has_default_volume=has_volume,
    )


def check_docker(runtime: "RuntimeClient") -> None:
    """Require an installed and responsive Docker daemon.

    Args:
        runtime: Docker client used by the rest of the installation

    Raises:
        PreflightError: If the CLI is missing or ``docker info`` fails
    """
    logger.key_info("Checking Docker installation...")

    if not runtime.is_installed():
        raise PreflightError(
            "Docker is not installed.\n"
            "Please install Docker from Synology Package Center:\n"
            "  1. Open Package Center\n"
            "  2. Search for 'Docker' or 'Container Manager'\n"
            "  3. Click Install"
        )

    if not runtime.is_running():
        raise PreflightError(
            "Docker daemon is not running.\n"
            "Please ensure Docker/Container Manager is running in Package Center."
        )

    logger.success("Docker is installed and running")


def run_preflight(runtime: "RuntimeClient") -> PlatformInfo:
    """Run all preflight checks in order and return the platform description."""
    check_root()
    platform = check_synology()
    check_docker(runtime)
    return platform
