"""
Installer Configuration

Immutable configuration for a single provisioning run. Every operation of the
installer receives an :class:`InstallConfig` explicitly; there is no
process-wide mutable state.

Values are layered with the following precedence:

1. Command-line flags
2. Optional YAML configuration file (``--config`` or ``SYNOVAULT_CONFIG``)
3. Built-in defaults

The YAML file supports environment references in string values:
``${VAR}``, ``${VAR:-default}`` and ``$VAR``.

Example config file::

    data_dir: /volume2/docker/vaultwarden
    domain: https://vault.${HOME_DOMAIN}
    port: 8080
"""

import dataclasses
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from synovault.errors import ConfigError

# Standard logging (not get_logger) to avoid circular imports with logger.py
logger = logging.getLogger("CONFIG")

DEFAULT_DATA_DIR = "/volume1/docker/vaultwarden"
DEFAULT_DOMAIN = "https://vw.example.com"
DEFAULT_PORT = 8000
DEFAULT_IMAGE = "vaultwarden/server:latest"
DEFAULT_CONTAINER_NAME = "vaultwarden"

ENV_FILE_NAME = ".env"
COMPOSE_FILE_NAME = "docker-compose.yml"
STATE_FILE_NAME = ".synovault.yml"
VOLUME_DIR_NAME = "data"

# Fixed container-side values
CONTAINER_PORT = 80
HEALTH_PATH = "/alive"

TIMEZONE_FILE = "/etc/timezone"

_ENV_VAR_PATTERN = r"\$\{([^}:]+)(?::-(.*?))?\}|\$([A-Za-z_][A-Za-z0-9_]*)"


def detect_timezone(timezone_file: str = TIMEZONE_FILE) -> str:
    """Return the host timezone name, or ``UTC`` when it cannot be read."""
    try:
        value = Path(timezone_file).read_text().strip()
    except OSError:
        return "UTC"
    return value or "UTC"


@dataclass(frozen=True)
class InstallConfig:
    """Parameters of one installation.

    Attributes:
        data_dir: Host directory holding .env, docker-compose.yml and data/
        domain: Public Vaultwarden URL, written verbatim (not validated)
        port: Host port mapped to container port 80
        admin_token: Admin panel token; empty means "generate one"
        image: Container image reference
        container_name: Name of the managed container
        timezone: Value for the container TZ variable
        health_interval: Seconds between health probes
        health_attempts: Maximum number of health probes
        startup_delay: Grace period before the first health probe
    """

    data_dir: Path = Path(DEFAULT_DATA_DIR)
    domain: str = DEFAULT_DOMAIN
    port: int = DEFAULT_PORT
    admin_token: str = ""
    image: str = DEFAULT_IMAGE
    container_name: str = DEFAULT_CONTAINER_NAME
    timezone: str = "UTC"
    health_interval: float = 2.0
    health_attempts: int = 30
    startup_delay: float = 3.0

    @property
    def env_file(self) -> Path:
        return self.data_dir / ENV_FILE_NAME

    @property
    def compose_file(self) -> Path:
        return self.data_dir / COMPOSE_FILE_NAME

    @property
    def state_file(self) -> Path:
        return self.data_dir / STATE_FILE_NAME

    @property
    def volume_dir(self) -> Path:
        return self.data_dir / VOLUME_DIR_NAME

    @property
    def port_mapping(self) -> str:
        return f"{self.port}:{CONTAINER_PORT}"

    @property
    def health_url(self) -> str:
        return f"http://localhost:{self.port}{HEALTH_PATH}"

    def replace(self, **changes: Any) -> "InstallConfig":
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)


def resolve_env_vars(data: Any) -> Any:
    """Recursively resolve environment variables in configuration data.

    Supports ``${VAR}``, ``${VAR:-default}`` and ``$VAR``. Unknown variables
    without a default are left untouched.
    """
    if isinstance(data, dict):
        return {key: resolve_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [resolve_env_vars(item) for item in data]
    elif isinstance(data, str):

        def replace_env_var(match):
            if match.group(1):
                var_name = match.group(1)
                default_value = match.group(2)
            else:
                var_name = match.group(3)
                default_value = None

            env_value = os.environ.get(var_name)
            if env_value is None:
                if default_value is not None:
                    return default_value
                logger.info(f"Environment variable '{var_name}' not found, keeping original value")
                return match.group(0)
            return env_value

        return re.sub(_ENV_VAR_PATTERN, replace_env_var, data)
    else:
        return data


def load_config_file(config_path: str | Path) -> dict[str, Any]:
    """Load and validate a YAML installer configuration file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Mapping of InstallConfig field names to values, environment-expanded

    Raises:
        ConfigError: If the file is missing, malformed, or has unknown keys
    """
    path = Path(config_path)
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML configuration: {e}") from e

    if raw is None:
        logger.warning(f"Configuration file is empty: {path}")
        return {}

    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {path}")

    known = {f.name for f in dataclasses.fields(InstallConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys in {path}: {', '.join(unknown)}")

    logger.debug(f"Loaded configuration from {path}")
    return resolve_env_vars(raw)


def build_install_config(
    config_path: str | Path | None = None,
    **overrides: Any,
) -> InstallConfig:
    """Build the immutable configuration for a run.

    Args:
        config_path: Optional YAML file; falls back to ``SYNOVAULT_CONFIG``
        **overrides: Values from the command line; ``None`` means "not given"

    Returns:
        InstallConfig with file values and overrides applied over defaults
    """
    if config_path is None:
        config_path = os.environ.get("SYNOVAULT_CONFIG")

    values: dict[str, Any] = {"timezone": detect_timezone()}
    if config_path:
        values.update(load_config_file(config_path))

    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        if "data_dir" in values:
            values["data_dir"] = Path(values["data_dir"]).expanduser()
        if "port" in values:
            values["port"] = int(values["port"])
        for key in ("health_interval", "startup_delay"):
            if key in values:
                values[key] = float(values[key])
        if "health_attempts" in values:
            values["health_attempts"] = int(values["health_attempts"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration value: {e}") from e

    for key in ("domain", "admin_token", "image", "container_name", "timezone"):
        if key in values:
            values[key] = str(values[key])

    return InstallConfig(**values)
