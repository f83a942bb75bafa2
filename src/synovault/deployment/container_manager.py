"""Container lifecycle management for the Vaultwarden service.

Ensures exactly one running instance of the named container:

1. An existing container with the same name is replaced only after
   confirmation (stop, then remove). Declining keeps it untouched.
2. The data volume directory referenced by the descriptor is created.
3. The container is started with the lifecycle strategy of this installation:

   - ``compose``: ``docker-compose up -d`` / ``docker compose up -d`` against
     the generated descriptor (preferred)
   - ``direct``: an equivalent single ``docker run -d`` (fallback when no
     compose front-end is available)

The chosen strategy is persisted in ``.synovault.yml`` next to the descriptor.
Later runs reuse it instead of re-detecting, so one installation is never
managed by both front-ends; if a persisted ``compose`` strategy can no longer
be honored the run fails rather than switching silently.
"""

import datetime
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml

from synovault.deployment.config_files import ConfirmCallback
from synovault.deployment.runtime_helper import RuntimeClient
from synovault.errors import ImagePullError, LifecycleError
from synovault.utils.config import CONTAINER_PORT, InstallConfig
from synovault.utils.logger import get_logger

logger = get_logger("deployment")


class Strategy(Enum):
    COMPOSE = "compose"
    DIRECT = "direct"


class ContainerAction(Enum):
    STARTED = "started"
    REPLACED = "replaced"
    KEPT = "kept"


@dataclass(frozen=True)
class LifecycleState:
    """Persisted lifecycle choice for one installation."""

    strategy: Strategy
    compose_command: list[str] | None = None


@dataclass(frozen=True)
class ContainerOutcome:
    action: ContainerAction
    strategy: Strategy | None = None


def load_state(state_file: Path) -> LifecycleState | None:
    """Read the persisted lifecycle state, or None if absent or unreadable."""
    if not state_file.exists():
        return None
    try:
        with open(state_file) as f:
            data = yaml.safe_load(f) or {}
        return LifecycleState(
            strategy=Strategy(data["strategy"]),
            compose_command=data.get("compose_command"),
        )
    except (yaml.YAMLError, KeyError, ValueError, TypeError) as e:
        logger.warning(f"Ignoring unreadable lifecycle state {state_file}: {e}")
        return None


def save_state(state_file: Path, state: LifecycleState) -> None:
    data = {
        "strategy": state.strategy.value,
        "compose_command": state.compose_command,
        "updated_at": datetime.datetime.now().isoformat(timespec="seconds"),
    }
    with open(state_file, "w") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    logger.debug(f"Saved lifecycle state to {state_file}")


def resolve_strategy(config: InstallConfig, runtime: RuntimeClient) -> LifecycleState:
    """Pick the lifecycle strategy for this installation.

    Raises:
        LifecycleError: If the persisted strategy is compose but no compose
            front-end is available any more
    """
    persisted = load_state(config.state_file)
    compose_cmd = runtime.compose_command()

    if persisted is not None:
        if persisted.strategy is Strategy.DIRECT:
            logger.debug("Reusing persisted 'direct' lifecycle strategy")
            return persisted
        if compose_cmd is None:
            raise LifecycleError(
                "This installation is managed with Docker Compose, but no compose "
                "command is available.\n"
                f"Reinstall Docker Compose, or delete {config.state_file} and remove "
                f"the '{config.container_name}' container to switch to docker run."
            )
        return LifecycleState(Strategy.COMPOSE, compose_cmd)

    if compose_cmd is not None:
        return LifecycleState(Strategy.COMPOSE, compose_cmd)

    logger.warning("Docker Compose not found, using docker run...")
    return LifecycleState(Strategy.DIRECT)


def pull_image(config: InstallConfig, runtime: RuntimeClient) -> None:
    """Pull the configured image.

    Raises:
        ImagePullError: If the pull fails
    """
    logger.key_info("Pulling Vaultwarden Docker image...")
    if not runtime.pull_image(config.image):
        raise ImagePullError(f"Failed to pull Docker image {config.image}")
    logger.success(f"Successfully pulled {config.image}")


def _remove_existing(config: InstallConfig, runtime: RuntimeClient) -> None:
    # Failures are tolerated: the container may already be stopped
    if not runtime.stop(config.container_name):
        logger.debug(f"'{config.container_name}' was not running")
    if not runtime.remove(config.container_name):
        logger.debug(f"Could not remove '{config.container_name}'")
    logger.info("Removed existing container")


def _start(config: InstallConfig, runtime: RuntimeClient, state: LifecycleState) -> bool:
    if state.strategy is Strategy.COMPOSE:
        return runtime.run_declarative(state.compose_command, config.compose_file)

    return runtime.run_direct(
        name=config.container_name,
        image=config.image,
        env_file=config.env_file,
        volumes=[f"{config.volume_dir}:/data"],
        ports=[f"{config.port}:{CONTAINER_PORT}"],
        environment=[f"TZ={config.timezone}"],
    )


def start_container(
    config: InstallConfig, runtime: RuntimeClient, confirm: ConfirmCallback
) -> ContainerOutcome:
    """Create (or replace) and start the Vaultwarden container.

    Args:
        config: Installation configuration
        runtime: Docker client
        confirm: Decision callback for the replacement prompt

    Returns:
        ContainerOutcome; ``KEPT`` when the operator declined replacement

    Raises:
        LifecycleError: If the container could not be started
    """
    logger.key_info("Starting Vaultwarden container...")

    action = ContainerAction.STARTED
    if runtime.container_exists(config.container_name):
        logger.warning(f"Container '{config.container_name}' already exists")
        if not confirm("replace_container", "Do you want to remove it and create a new one?"):
            logger.info("Keeping existing container")
            return ContainerOutcome(ContainerAction.KEPT)
        _remove_existing(config, runtime)
        action = ContainerAction.REPLACED

    config.volume_dir.mkdir(parents=True, exist_ok=True)

    state = resolve_strategy(config, runtime)
    if not _start(config, runtime, state):
        raise LifecycleError(
            f"Failed to start container '{config.container_name}' using {state.strategy.value}"
        )

    save_state(config.state_file, state)
    logger.success("Vaultwarden container started")
    return ContainerOutcome(action, state.strategy)
