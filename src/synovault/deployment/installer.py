"""End-to-end installation workflow.

Runs the provisioning steps strictly in order:

1. Preflight (root, platform, Docker)
2. Data directory
3. ``.env`` and ``docker-compose.yml``
4. Image pull
5. Container (re)creation
6. Startup grace period and health verification

No rollback is attempted: when a later step fails, files written by earlier
steps stay in place so the operator can inspect them or re-run.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from synovault.admin_token import resolve_admin_token
from synovault.deployment.config_files import (
    ConfirmCallback,
    FileAction,
    FileOutcome,
    prepare_data_directory,
    read_env_values,
    read_published_port,
    write_compose_file,
    write_env_file,
)
from synovault.deployment.container_manager import (
    ContainerAction,
    ContainerOutcome,
    Strategy,
    pull_image,
    start_container,
)
from synovault.deployment.health import HealthResult, verify_installation
from synovault.deployment.runtime_helper import RuntimeClient
from synovault.preflight import PlatformInfo, run_preflight
from synovault.utils.config import CONTAINER_PORT, InstallConfig
from synovault.utils.logger import get_logger

logger = get_logger("installer")


@dataclass(frozen=True)
class InstallOutcome:
    """Values actually in effect after the run, plus per-step outcomes."""

    domain: str
    port: int
    data_dir: Path
    admin_token: str
    env_file: FileOutcome
    compose_file: FileOutcome
    container: ContainerOutcome
    health: HealthResult
    platform: PlatformInfo | None = None


def _effective_values(config: InstallConfig, env_outcome: FileOutcome) -> tuple[str, str]:
    # A kept .env still carries the domain and token the service will use
    if env_outcome.action is not FileAction.KEPT:
        return config.domain, config.admin_token

    existing = read_env_values(config.env_file)
    return existing.get("DOMAIN", config.domain), existing.get("ADMIN_TOKEN", config.admin_token)


def _effective_port(
    config: InstallConfig,
    runtime: RuntimeClient,
    compose_outcome: FileOutcome,
    container_outcome: ContainerOutcome,
) -> int:
    """Host port the running service is actually published on."""
    if container_outcome.action is ContainerAction.KEPT:
        port = runtime.published_port(config.container_name, CONTAINER_PORT)
        if port is not None:
            return port

    # A container started with "docker run" uses the configured port directly
    if compose_outcome.action is FileAction.KEPT and container_outcome.strategy is not Strategy.DIRECT:
        port = read_published_port(config.compose_file, config.container_name)
        if port is not None:
            return port

    return config.port


def run_install(
    config: InstallConfig,
    runtime: RuntimeClient,
    confirm: ConfirmCallback,
    *,
    preflight: Callable[[RuntimeClient], PlatformInfo | None] = run_preflight,
    probe: Callable[[], bool] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> InstallOutcome:
    """Provision Vaultwarden according to ``config``.

    Args:
        config: Installation configuration; an empty admin token is generated
        runtime: Docker client
        confirm: Decision callback ``confirm(key, message) -> bool``
        preflight: Preflight step, called with ``runtime``; replaceable for tests
        probe: Health probe; defaults to an HTTP GET on the health URL
        sleep: Sleep function used for the grace period and polling

    Returns:
        InstallOutcome describing the installation

    Raises:
        InstallerError: Any fatal precondition or lifecycle failure
    """
    platform = preflight(runtime)

    config = config.replace(admin_token=resolve_admin_token(config.admin_token))

    prepare_data_directory(config, confirm)
    env_outcome = write_env_file(config, confirm)
    compose_outcome = write_compose_file(config, confirm)

    pull_image(config, runtime)
    container_outcome = start_container(config, runtime, confirm)

    port = _effective_port(config, runtime, compose_outcome, container_outcome)
    if port != config.port:
        logger.warning(f"Existing deployment publishes port {port}, not {config.port}; using {port}")

    if config.startup_delay > 0:
        sleep(config.startup_delay)
    health = verify_installation(config.replace(port=port), probe=probe, sleep=sleep)

    domain, admin_token = _effective_values(config, env_outcome)
    return InstallOutcome(
        domain=domain,
        port=port,
        data_dir=config.data_dir,
        admin_token=admin_token,
        env_file=env_outcome,
        compose_file=compose_outcome,
        container=container_outcome,
        health=health,
        platform=platform,
    )
