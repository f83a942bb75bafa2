"""Installation command.

This module provides the 'synovault install' command, a thin wrapper around
:func:`synovault.deployment.installer.run_install` that collects options,
answers confirmation prompts and maps failures to exit codes.
"""

import logging
import os
from pathlib import Path

import click
from rich.markup import escape

from synovault.cli.styles import Styles, console
from synovault.cli.summary import print_summary
from synovault.deployment.installer import run_install
from synovault.deployment.runtime_helper import RuntimeClient
from synovault.errors import InstallCancelled, InstallerError
from synovault.utils.config import DEFAULT_DATA_DIR, DEFAULT_DOMAIN, DEFAULT_PORT, build_install_config
from synovault.utils.logger import set_log_level


class HelpOnUnknownOptionCommand(click.Command):
    """Print the full help text, not just usage, when an unknown option is given."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.NoSuchOption as e:
            click.echo(f"Error: {e.format_message()}\n", err=True)
            click.echo(ctx.get_help(), err=True)
            ctx.exit(2)


def make_confirm(assume_yes: bool):
    """Build the confirmation callback used by the installer.

    Args:
        assume_yes: Answer every prompt with "yes" without asking

    Returns:
        Callable ``confirm(key, message) -> bool``
    """

    def confirm(key: str, message: str) -> bool:
        if assume_yes:
            console.print(f"{escape(message)} [dim](--yes)[/dim]")
            return True
        return click.confirm(message, default=False)

    return confirm


def _print_banner() -> None:
    console.print()
    console.print("==========================================")
    console.print("Vaultwarden Installer for Synology NAS", style=Styles.HEADER)
    console.print("==========================================")
    console.print()


@click.command(
    cls=HelpOnUnknownOptionCommand,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    help=f"Data directory path (default: {DEFAULT_DATA_DIR})",
)
@click.option(
    "--domain",
    help=f"Your Vaultwarden domain, e.g. https://vw.example.com (default: {DEFAULT_DOMAIN})",
)
@click.option(
    "--port",
    type=click.IntRange(1, 65535),
    help=f"Host port to expose (default: {DEFAULT_PORT})",
)
@click.option(
    "--admin-token",
    help="Admin panel token (optional, generates one if not provided)",
)
@click.option("--image", help="Container image (default: vaultwarden/server:latest)")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML file with installer settings (or SYNOVAULT_CONFIG)",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to all prompts")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
def install(
    data_dir: Path | None,
    domain: str | None,
    port: int | None,
    admin_token: str | None,
    image: str | None,
    config_file: str | None,
    assume_yes: bool,
    verbose: bool,
):
    """Install Vaultwarden on a Synology NAS using Docker.

    Creates the data directory, writes .env and docker-compose.yml,
    pulls the image, starts the container and waits for it to become healthy.

    Requirements:

    \b
      - Synology NAS with DSM 6.0 or higher
      - Docker package installed via Package Center
      - SSH access enabled (Control Panel > Terminal & SNMP)
      - Run as root (sudo)

    Example:

    \b
      $ sudo synovault install --domain https://vault.mydomain.com --port 8080

    For more information, visit:
    https://github.com/dani-garcia/vaultwarden/wiki
    """
    if verbose:
        set_log_level(logging.DEBUG)

    try:
        config = build_install_config(
            config_file,
            data_dir=data_dir,
            domain=domain,
            port=port,
            admin_token=admin_token,
            image=image,
        )

        _print_banner()
        outcome = run_install(config, RuntimeClient(), make_confirm(assume_yes))

    except KeyboardInterrupt:
        console.print("\n⚠️  Installation cancelled by user", style=Styles.WARNING)
        raise click.Abort() from None
    except InstallCancelled as e:
        console.print(f"❌ {escape(str(e))}", style=Styles.ERROR)
        raise click.Abort() from None
    except InstallerError as e:
        console.print(f"❌ Installation failed: {escape(str(e))}", style=Styles.ERROR)
        if os.environ.get("DEBUG"):
            import traceback

            console.print(traceback.format_exc(), style=Styles.DIM)
        raise click.Abort() from None

    print_summary(outcome, container_name=config.container_name, image=config.image)


if __name__ == "__main__":
    install()
