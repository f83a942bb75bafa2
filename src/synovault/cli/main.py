"""Main CLI entry point for SynoVault.

This module provides the main CLI group that organizes all synovault
commands under the `synovault` command namespace.

Commands are lazy-loaded so `synovault --help` does not import httpx or
jinja2.
"""

import importlib
import sys

import click

from synovault import __version__


class LazyGroup(click.Group):
    """Click group that lazily loads subcommands only when invoked."""

    commands_map = {
        "install": "synovault.cli.install_cmd",
        "verify": "synovault.cli.verify_cmd",
        "token": "synovault.cli.token_cmd",
    }

    def get_command(self, ctx, cmd_name):
        """Lazily import and return the command when it's invoked."""
        if cmd_name not in self.commands_map:
            return None

        mod = importlib.import_module(self.commands_map[cmd_name])
        # Convention: command function named after the command
        return getattr(mod, cmd_name)

    def list_commands(self, ctx):
        """Return list of available commands (for --help)."""
        return list(self.commands_map)


@click.group(cls=LazyGroup, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="synovault")
def cli():
    """SynoVault - Vaultwarden installer for Synology NAS.

    Installs a Vaultwarden password manager container using Docker:
    prerequisites, configuration files, container and health check.

    Use 'synovault COMMAND --help' for more information on a specific command.

    Examples:

    \b
      synovault install --domain https://vault.mydomain.com --port 8080
      synovault verify --port 8080
      synovault token
    """


def main():
    """Entry point for the synovault CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nInstallation interrupted", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
