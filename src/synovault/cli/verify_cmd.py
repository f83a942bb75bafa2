"""Health verification command.

This module provides the 'synovault verify' command, which polls the
Vaultwarden liveness endpoint of an existing installation.
"""

import click
from rich.markup import escape

from synovault.cli.styles import Messages, console
from synovault.deployment.health import DEFAULT_INTERVAL, DEFAULT_MAX_ATTEMPTS, verify_installation
from synovault.errors import ConfigError
from synovault.utils.config import DEFAULT_CONTAINER_NAME, DEFAULT_PORT, build_install_config


@click.command()
@click.option(
    "--port",
    type=click.IntRange(1, 65535),
    help=f"Host port Vaultwarden is published on (default: {DEFAULT_PORT})",
)
@click.option(
    "--attempts",
    type=click.IntRange(min=1),
    help=f"Maximum number of probes (default: {DEFAULT_MAX_ATTEMPTS})",
)
@click.option(
    "--interval",
    type=click.FloatRange(min=0),
    help=f"Seconds between probes (default: {DEFAULT_INTERVAL:g})",
)
@click.option(
    "--container-name",
    help=f"Container name used in troubleshooting hints (default: {DEFAULT_CONTAINER_NAME})",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML file with installer settings (or SYNOVAULT_CONFIG)",
)
def verify(
    port: int | None,
    attempts: int | None,
    interval: float | None,
    container_name: str | None,
    config_file: str | None,
):
    """Check that Vaultwarden answers on http://localhost:PORT/alive.

    Options left unset fall back to the config file, then to the defaults.
    Exits with status 1 when the service does not become healthy.
    """
    try:
        config = build_install_config(
            config_file,
            port=port,
            health_attempts=attempts,
            health_interval=interval,
            container_name=container_name,
        )
    except ConfigError as e:
        console.print(Messages.error(escape(str(e))))
        raise click.Abort() from None

    result = verify_installation(config)
    if result.healthy:
        console.print(Messages.success(f"Healthy after {result.attempts} attempt(s)"))
    else:
        console.print(Messages.error(f"Not healthy after {result.attempts} attempts"))
        raise SystemExit(1)
