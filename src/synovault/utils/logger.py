"""
Component Logger

Provides colored logging for installer components with:
- Unified API for all components (preflight, config, deployment, health)
- Rich terminal output with component-specific colors
- Message hierarchy mirroring the installer's status markers

Usage:
    logger = get_logger("preflight")
    logger.key_info("Checking Docker installation...")
    logger.info("Using existing directory")
    logger.debug("docker info returned 0")
    logger.success("Docker is installed and running")
    logger.warning("Not running on Synology NAS")
    logger.error("Failed to pull Docker image")
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

COMPONENT_COLORS = {
    "preflight": "cyan",
    "config": "blue",
    "token": "magenta",
    "runtime": "bright_blue",
    "deployment": "green",
    "health": "yellow",
    "installer": "white",
}


class ComponentLogger:
    """
    Rich-formatted logger for installer components with color coding and message hierarchy.

    Message Types:
    - key_info: Important operational information (step headers)
    - info: Normal operational messages
    - debug: Detailed tracing information
    - warning: Warning messages
    - error: Error messages
    - success: Success messages
    """

    def __init__(self, base_logger: logging.Logger, component_name: str, color: str = "white"):
        """
        Initialize component logger.

        Args:
            base_logger: Underlying Python logger
            component_name: Name of the component (e.g., 'preflight', 'health')
            color: Rich color name for this component
        """
        self.base_logger = base_logger
        self.component_name = component_name
        self.color = color

    def _format_message(self, message: str, style: str, emoji: str = "") -> str:
        """Format message with Rich markup and emoji prefix.

        The message itself is escaped, so paths or errors containing brackets
        print literally.
        """
        prefix = f"{emoji}{self.component_name.title()}: "
        message = escape(message)
        if style:
            return f"[{style}]{prefix}{message}[/{style}]"
        return f"{prefix}{message}"

    def key_info(self, message: str) -> None:
        """Important operational information."""
        style = f"bold {self.color}" if self.color != "white" else "bold white"
        self.base_logger.info(self._format_message(message, style))

    def info(self, message: str) -> None:
        """Info message."""
        self.base_logger.info(self._format_message(message, self.color))

    def debug(self, message: str) -> None:
        """Debug message - detailed technical info."""
        style = f"dim {self.color}" if self.color != "white" else "dim white"
        self.base_logger.debug(self._format_message(message, style, "🔍 "))

    def warning(self, message: str) -> None:
        """Warning message."""
        self.base_logger.warning(self._format_message(message, "bold yellow", "⚠️  "))

    def error(self, message: str, exc_info: bool = False) -> None:
        """Error message.

        Args:
            message: Error message
            exc_info: Whether to include exception traceback
        """
        self.base_logger.error(self._format_message(message, "bold red", "❌ "), exc_info=exc_info)

    def success(self, message: str) -> None:
        """Success message."""
        self.base_logger.info(self._format_message(message, "bold green", "✅ "))


def _setup_rich_logging(level: int = logging.INFO) -> None:
    """Configure Rich logging for the root logger (called once)."""
    root_logger = logging.getLogger()

    # Prevent duplicate handler registration
    for handler in root_logger.handlers:
        if isinstance(handler, RichHandler):
            return

    root_logger.setLevel(level)

    console = Console(stderr=True, width=120)

    handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        markup=True,
        show_path=False,
        show_time=True,
        show_level=True,
        tracebacks_show_locals=False,  # locals may hold the admin token
    )

    root_logger.addHandler(handler)

    for lib in ["httpx", "httpcore"]:
        logging.getLogger(lib).setLevel(logging.WARNING)


def set_log_level(level: int) -> None:
    """Change the root log level, e.g. for ``--verbose``."""
    _setup_rich_logging(level)
    logging.getLogger().setLevel(level)


def get_logger(component_name: str = None, level: int = logging.INFO, *, color: str = None) -> ComponentLogger:
    """
    Get a component logger.

    Args:
        component_name: Component name (e.g., 'preflight', 'deployment')
        level: Logging level used when the root handler is first installed
        color: Explicit Rich color, overriding the component default

    Returns:
        ComponentLogger instance

    Examples:
        logger = get_logger("health")
        logger.info("Waiting for Vaultwarden to start (attempt 1/30)...")
    """
    _setup_rich_logging(level)

    if component_name is None:
        raise ValueError("Component name is required. Usage: get_logger('component_name')")

    base_logger = logging.getLogger(component_name)
    actual_color = color or COMPONENT_COLORS.get(component_name, "white")
    return ComponentLogger(base_logger, component_name, actual_color)
