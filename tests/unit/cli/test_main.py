"""Unit tests for the main CLI application."""

import logging
from pathlib import Path

from spacewarden import __version__
from spacewarden.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


class TestMainApp:
    """Tests for global options."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"spacewarden version {__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for name in ("space", "reconcile", "records", "config"):
            assert name in result.output

    def test_verbose_enables_debug_logging(self, config_file: Path) -> None:
        runner.invoke(app, ["-v", "--config", str(config_file), "records", "list"])
        assert logging.getLogger().level == logging.DEBUG

    def test_quiet_limits_logging_to_errors(self, config_file: Path) -> None:
        runner.invoke(app, ["-q", "--config", str(config_file), "records", "list"])
        assert logging.getLogger().level == logging.ERROR

    def test_invalid_config_exits(self, tmp_path: Path) -> None:
        """A broken config file is reported instead of a traceback."""
        path = tmp_path / "config.toml"
        path.write_text("reserved_bytes = -1\n")

        result = runner.invoke(app, ["--config", str(path), "records", "list"])

        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_log_options_described(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert "Log debug messages" in result.output
        assert "Only log errors" in result.output
