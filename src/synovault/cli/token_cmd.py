"""Admin token command.

This module provides the 'synovault token' command, which prints a freshly
generated admin token for use with ``--admin-token`` or a manual .env edit.
"""

import click
from rich.markup import escape

from synovault.admin_token import generate_admin_token
from synovault.cli.styles import Messages, console
from synovault.errors import SecretGenerationError


@click.command()
def token():
    """Print a new random admin token (48 bytes, base64)."""
    try:
        value = generate_admin_token()
    except SecretGenerationError as e:
        console.print(Messages.error(escape(str(e))))
        raise click.Abort() from None
    click.echo(value)
