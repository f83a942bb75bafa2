"""
Tests for the component logger.

Tests cover:
- Logger creation and component colors
- Message formatting with Rich markup
- Level handling
"""

import logging

import pytest

from synovault.utils.logger import ComponentLogger, get_logger, set_log_level


class TestComponentLoggerBasic:
    """Test basic ComponentLogger functionality."""

    def test_logger_creation(self):
        logger = get_logger("health")
        assert isinstance(logger, ComponentLogger)
        assert logger.component_name == "health"
        assert logger.color == "yellow"

    def test_unknown_component_uses_white(self):
        assert get_logger("something_else").color == "white"

    def test_explicit_color(self):
        assert get_logger("health", color="blue").color == "blue"

    def test_component_name_required(self):
        with pytest.raises(ValueError):
            get_logger()

    def test_basic_logging_methods(self):
        """All message types can be emitted without errors."""
        logger = get_logger("test_component")

        logger.info("Info message")
        logger.debug("Debug message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.success("Success message")
        logger.key_info("Key info message")


class TestFormatting:
    def test_success_prefix_and_style(self, caplog):
        logger = get_logger("deployment")

        with caplog.at_level(logging.INFO, logger="deployment"):
            logger.success("Vaultwarden container started")

        assert "✅ Deployment: Vaultwarden container started" in caplog.text
        assert "[bold green]" in caplog.records[-1].getMessage()

    def test_warning_level(self, caplog):
        logger = get_logger("preflight")

        with caplog.at_level(logging.WARNING, logger="preflight"):
            logger.warning("Not running on Synology NAS")

        assert caplog.records[-1].levelno == logging.WARNING

    def test_brackets_in_message_are_literal(self, caplog):
        logger = get_logger("config")

        with caplog.at_level(logging.INFO, logger="config"):
            logger.info("Creating data directory: /volume1/[bold]vw")

        assert "/volume1/\\[bold]vw" in caplog.records[-1].getMessage()

    def test_debug_hidden_at_info(self, caplog):
        logger = get_logger("runtime")

        with caplog.at_level(logging.INFO):
            logger.debug("Running: docker info")

        assert "docker info" not in caplog.text


def test_set_log_level_debug():
    set_log_level(logging.DEBUG)
    try:
        assert logging.getLogger().level == logging.DEBUG
    finally:
        set_log_level(logging.INFO)
