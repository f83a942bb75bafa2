"""Tests for main CLI entry point.

Tests the main CLI group and lazy command loading mechanism.
"""

from unittest import mock

import pytest
from click.testing import CliRunner

from synovault.cli.main import LazyGroup, cli, main


@pytest.fixture
def runner():
    """Provide a Click CLI runner for testing."""
    return CliRunner()


class TestLazyGroup:
    """Test the LazyGroup command loading mechanism."""

    def test_get_command_imports_module(self):
        group = LazyGroup(name="test")
        ctx = mock.Mock()

        with mock.patch("importlib.import_module") as mock_import:
            mock_module = mock.Mock()
            mock_import.return_value = mock_module

            cmd = group.get_command(ctx, "install")

            mock_import.assert_called_once_with("synovault.cli.install_cmd")
            assert cmd is mock_module.install

    def test_get_command_returns_none_for_invalid_command(self):
        group = LazyGroup(name="test")

        assert group.get_command(mock.Mock(), "nonexistent_command") is None

    def test_list_commands(self):
        group = LazyGroup(name="test")

        assert group.list_commands(mock.Mock()) == ["install", "verify", "token"]


class TestCliGroup:
    """Test the main CLI group."""

    def test_cli_group_help(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "install" in result.output
        assert "verify" in result.output

    def test_cli_version_option(self, runner):
        from synovault import __version__

        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_token_command(self, runner):
        result = runner.invoke(cli, ["token"])

        assert result.exit_code == 0
        assert len(result.output.strip()) == 64


class TestMainFunction:
    def test_main_keyboard_interrupt(self):
        with mock.patch("synovault.cli.main.cli", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 130

    def test_main_unexpected_error(self):
        with mock.patch("synovault.cli.main.cli", side_effect=RuntimeError("boom")):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
