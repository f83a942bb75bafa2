"""Configuration file generation for the Vaultwarden deployment.

Materializes the two artifacts consumed at startup:

- ``.env`` - the environment record read by Vaultwarden (mode 0600)
- ``docker-compose.yml`` - the deployment descriptor read by compose (mode 0644)

Both are rendered from Jinja2 templates shipped with the package and are
regenerated from the current :class:`~synovault.utils.config.InstallConfig` on
every run. Existing files are only replaced after confirmation, and the prior
content is first copied to a timestamped backup.

.. seealso::
   :mod:`synovault.deployment.templates` : ``env.j2`` and ``docker-compose.yml.j2``
"""

import datetime
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml
from dotenv import dotenv_values
from jinja2 import Environment, PackageLoader

from synovault.errors import InstallCancelled
from synovault.utils.config import (
    CONTAINER_PORT,
    ENV_FILE_NAME,
    HEALTH_PATH,
    VOLUME_DIR_NAME,
    InstallConfig,
)
from synovault.utils.logger import get_logger

logger = get_logger("config")

ENV_TEMPLATE = "env.j2"
COMPOSE_TEMPLATE = "docker-compose.yml.j2"

ENV_FILE_MODE = 0o600
COMPOSE_FILE_MODE = 0o644
DATA_DIR_MODE = 0o755

# (key, message) -> answer
ConfirmCallback = Callable[[str, str], bool]


class FileAction(Enum):
    CREATED = "created"
    REPLACED = "replaced"
    KEPT = "kept"


@dataclass(frozen=True)
class FileOutcome:
    """What happened to one generated file."""

    path: Path
    action: FileAction
    backup: Path | None = None


def _template_environment() -> Environment:
    return Environment(
        loader=PackageLoader("synovault.deployment", "templates"),
        keep_trailing_newline=True,
    )


def _template_context(config: InstallConfig) -> dict:
    return {
        "generated_at": datetime.datetime.now().strftime("%a %b %d %H:%M:%S %Y"),
        "domain": config.domain,
        "admin_token": config.admin_token,
        "image": config.image,
        "container_name": config.container_name,
        "env_file_name": ENV_FILE_NAME,
        "volume_dir_name": VOLUME_DIR_NAME,
        "port_mapping": config.port_mapping,
        "timezone": config.timezone,
        "container_port": CONTAINER_PORT,
        "health_path": HEALTH_PATH,
    }


def render_template(template_name: str, config: InstallConfig) -> str:
    """Render one of the packaged templates with the installation values."""
    template = _template_environment().get_template(template_name)
    return template.render(_template_context(config))


def backup_path_for(path: Path, now: datetime.datetime | None = None) -> Path:
    """Return an unused ``<name>.backup.<YYYYmmdd_HHMMSS>`` path next to ``path``."""
    stamp = (now or datetime.datetime.now()).strftime("%Y%m%d_%H%M%S")
    candidate = path.with_name(f"{path.name}.backup.{stamp}")
    counter = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.name}.backup.{stamp}_{counter}")
        counter += 1
    return candidate


def backup_file(path: Path) -> Path:
    """Copy ``path`` to a fresh timestamped backup and return the backup path."""
    destination = backup_path_for(path)
    shutil.copy2(path, destination)
    logger.info(f"Backup created: {destination}")
    return destination


def prepare_data_directory(config: InstallConfig, confirm: ConfirmCallback) -> bool:
    """Create the data directory, or confirm reuse of an existing one.

    Args:
        config: Installation configuration
        confirm: Decision callback for the reuse prompt

    Returns:
        True if the directory was created, False if an existing one is reused

    Raises:
        InstallCancelled: If the operator declines to reuse an existing directory
    """
    data_dir = config.data_dir
    logger.key_info(f"Creating data directory: {data_dir}")

    created = False
    if data_dir.is_dir():
        logger.warning(f"Data directory already exists: {data_dir}")
        if not confirm("use_existing_dir", "Do you want to continue and use the existing directory?"):
            raise InstallCancelled("Installation cancelled")
        logger.info("Using existing directory")
    else:
        data_dir.mkdir(parents=True, exist_ok=True)
        created = True
        logger.success(f"Created data directory: {data_dir}")

    os.chmod(data_dir, DATA_DIR_MODE)
    return created


def _write_file(
    path: Path,
    content: str,
    mode: int,
    confirm: ConfirmCallback,
    confirm_key: str,
) -> FileOutcome:
    backup = None
    action = FileAction.CREATED

    if path.exists():
        logger.warning(f"File already exists: {path}")
        if not confirm(confirm_key, f"Do you want to overwrite {path.name}?"):
            logger.info(f"Keeping existing {path.name}")
            return FileOutcome(path, FileAction.KEPT)
        backup = backup_file(path)
        action = FileAction.REPLACED

    _write_with_mode(path, content, mode)
    return FileOutcome(path, action, backup)


def _write_with_mode(path: Path, content: str, mode: int) -> None:
    # Mode is set on the empty file, before any content is written
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "w") as f:
        os.fchmod(f.fileno(), mode)
        f.write(content)


def write_env_file(config: InstallConfig, confirm: ConfirmCallback) -> FileOutcome:
    """Write the environment record (``.env``)."""
    logger.key_info("Creating environment configuration...")
    outcome = _write_file(
        config.env_file,
        render_template(ENV_TEMPLATE, config),
        ENV_FILE_MODE,
        confirm,
        "overwrite_env",
    )
    if outcome.action is not FileAction.KEPT:
        logger.success(f"Created environment file: {config.env_file}")
    return outcome


def write_compose_file(config: InstallConfig, confirm: ConfirmCallback) -> FileOutcome:
    """Write the deployment descriptor (``docker-compose.yml``)."""
    logger.key_info("Creating Docker Compose configuration...")
    outcome = _write_file(
        config.compose_file,
        render_template(COMPOSE_TEMPLATE, config),
        COMPOSE_FILE_MODE,
        confirm,
        "overwrite_compose",
    )
    if outcome.action is not FileAction.KEPT:
        logger.success(f"Created Docker Compose file: {config.compose_file}")
    return outcome


def read_env_values(path: Path) -> dict[str, str]:
    """Read an existing environment record, skipping commented keys."""
    if not path.exists():
        return {}
    return {key: value for key, value in dotenv_values(path).items() if value is not None}


def _host_port(entry, container_port: int) -> int | None:
    # Short syntax "[ip:]host:container[/proto]" or long syntax mapping
    if isinstance(entry, dict):
        published, target = entry.get("published"), entry.get("target")
    else:
        parts = str(entry).split("/")[0].split(":")
        if len(parts) < 2:
            return None
        published, target = parts[-2], parts[-1]
    try:
        host, container = int(published), int(target)
    except (TypeError, ValueError):
        return None
    return host if container == container_port else None


def read_published_port(path: Path, service_name: str, container_port: int = CONTAINER_PORT) -> int | None:
    """Host port an existing descriptor publishes for ``container_port``.

    The service named ``service_name`` is searched first, then any other
    service. Returns None if the descriptor is missing, unreadable or has no
    such mapping.
    """
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        logger.debug(f"Cannot read ports from {path}: {e}")
        return None

    services = data.get("services") if isinstance(data, dict) else None
    if not isinstance(services, dict):
        return None

    ordered = sorted(services.items(), key=lambda item: item[0] != service_name)
    for _, service in ordered:
        if not isinstance(service, dict):
            continue
        for entry in service.get("ports") or []:
            port = _host_port(entry, container_port)
            if port is not None:
                return port
    return None
