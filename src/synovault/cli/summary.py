"""Post-installation summary.

Prints access points, the admin token and operational next steps, using the
values actually in effect after the run.
"""

import subprocess

from rich.markup import escape

from synovault.cli.styles import Messages, Styles, console
from synovault.deployment.installer import InstallOutcome
from synovault.utils.config import DEFAULT_DOMAIN, DEFAULT_IMAGE

WIKI_URL = "https://github.com/dani-garcia/vaultwarden/wiki"


def get_local_ip() -> str:
    """First address reported by ``hostname -I``, or a placeholder."""
    try:
        result = subprocess.run(["hostname", "-I"], capture_output=True, text=True, timeout=5)
    except (subprocess.TimeoutExpired, FileNotFoundError):
        return "your-nas-ip"
    addresses = result.stdout.split() if result.returncode == 0 else []
    return addresses[0] if addresses else "your-nas-ip"


def print_summary(
    outcome: InstallOutcome, container_name: str = "vaultwarden", image: str = DEFAULT_IMAGE
) -> None:
    """Print the post-installation instructions."""
    port = outcome.port
    container_name = escape(container_name)
    image = escape(image)

    def line(text: str = "") -> None:
        console.print(text, soft_wrap=True, highlight=False)

    line()
    line("==========================================")
    line(Messages.header("Vaultwarden Installation Complete!"))
    line("==========================================")
    line()
    line("Access your Vaultwarden instance:")
    line(f"  Local:  http://{get_local_ip()}:{port}")
    if outcome.domain and outcome.domain != DEFAULT_DOMAIN:
        line(f"  Domain: {escape(outcome.domain)}")
    line()
    line("Admin Panel:")
    line(f"  URL:   http://localhost:{port}/admin")
    line(f"  Token: {escape(outcome.admin_token)}")
    line()
    line(f"Data directory: {Messages.path(escape(str(outcome.data_dir)))}")
    line()

    if not outcome.health.healthy:
        console.print(
            Messages.warning(
                f"Health check did not pass after {outcome.health.attempts} attempts; "
                "the container may still be starting."
            ),
            soft_wrap=True,
        )
        line()

    line("Important next steps:")
    line("  1. Set up a reverse proxy (HTTPS is required for web vault)")
    line("  2. Configure your domain DNS to point to your NAS")
    line("  3. Set SIGNUPS_ALLOWED=false after creating your account")
    line("  4. Configure email (SMTP) for password reset functionality")
    line()
    line("Useful commands:")
    console.print(f"  View logs:     docker logs -f {container_name}", style=Styles.COMMAND, soft_wrap=True)
    console.print(f"  Stop:          docker stop {container_name}", style=Styles.COMMAND, soft_wrap=True)
    console.print(f"  Start:         docker start {container_name}", style=Styles.COMMAND, soft_wrap=True)
    console.print(f"  Restart:       docker restart {container_name}", style=Styles.COMMAND, soft_wrap=True)
    console.print(
        f"  Update:        docker pull {image} && docker restart {container_name}",
        style=Styles.COMMAND,
        soft_wrap=True,
    )
    line()
    line("For more information, visit:")
    line(f"  {WIKI_URL}")
    line()
