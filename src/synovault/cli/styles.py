"""Console theme for the SynoVault CLI.

All command output goes through the shared :data:`console`, which knows the
semantic style names below; markup helpers wrap text in those names so command
modules never hard-code colors.
"""

from dataclasses import dataclass

from rich.console import Console
from rich.theme import Theme


@dataclass
class ColorTheme:
    """Installer palette, keyed by meaning rather than hue."""

    error: str = "#ff0000"
    warning: str = "#ffaa00"
    success: str = "#2E9E5B"
    primary: str = "#175DDC"  # Bitwarden blue
    command: str = "#9988A1"
    path: str = "#A2AE9D"
    dim: str = "#666666"


def _build_rich_theme(theme: ColorTheme) -> Theme:
    return Theme(
        {
            "success": f"bold {theme.success}",
            "error": f"bold {theme.error}",
            "warning": f"bold {theme.warning}",
            "header": f"bold {theme.primary}",
            "command": theme.command,
            "path": theme.path,
            "dim": theme.dim,
        }
    )


console = Console(theme=_build_rich_theme(ColorTheme()))


class Styles:
    """Style names for ``console.print(..., style=...)``."""

    ERROR = "error"
    WARNING = "warning"
    HEADER = "header"
    COMMAND = "command"
    DIM = "dim"


class Messages:
    """Markup helpers for status lines."""

    @staticmethod
    def success(text: str) -> str:
        return f"[success]✓ {text}[/success]"

    @staticmethod
    def error(text: str) -> str:
        return f"[error]✗ {text}[/error]"

    @staticmethod
    def warning(text: str) -> str:
        return f"[warning]⚠️  {text}[/warning]"

    @staticmethod
    def header(text: str) -> str:
        return f"[header]{text}[/header]"

    @staticmethod
    def path(text: str) -> str:
        return f"[path]{text}[/path]"


__all__ = ["console", "Styles", "Messages"]
