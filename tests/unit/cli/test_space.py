"""Unit tests for the space commands."""

import os
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

from spacewarden.cli.main import app
from spacewarden.core.config import WardenConfig, save_config
from spacewarden.storage.errors import InsufficientSpaceError, StorageIOError
from typer.testing import CliRunner

runner = CliRunner()

MIB = 1024 * 1024
DAY = 24 * 60 * 60


class TestEnsureCommand:
    """Tests for spacewarden space ensure."""

    @patch("spacewarden.cli.commands.space.SpaceGuarantee.from_config")
    def test_ensure_success(
        self, mock_from_config: MagicMock, config_file: Path, tmp_path: Path
    ) -> None:
        """The guarantee is asked for the parsed size at the nearest existing directory."""
        target = tmp_path / "data" / "new" / "movie.bin"

        result = runner.invoke(
            app, ["--config", str(config_file), "space", "ensure", str(target), "5M"]
        )

        assert result.exit_code == 0
        assert "5.0 MiB available" in result.output
        mock_from_config.return_value.ensure.assert_called_once_with(tmp_path / "data", 5 * MIB)

    @patch("spacewarden.cli.commands.space.SpaceGuarantee.from_config")
    def test_force_full_eviction_flag(
        self, mock_from_config: MagicMock, config_file: Path, tmp_path: Path
    ) -> None:
        """--force-full-eviction is passed through the configuration."""
        runner.invoke(
            app,
            [
                "--config",
                str(config_file),
                "space",
                "ensure",
                str(tmp_path),
                "1",
                "--force-full-eviction",
            ],
        )

        config: WardenConfig = mock_from_config.call_args.args[0]
        assert config.force_full_eviction is True

    @patch("spacewarden.cli.commands.space.SpaceGuarantee.from_config")
    def test_insufficient_space(
        self, mock_from_config: MagicMock, config_file: Path, tmp_path: Path
    ) -> None:
        mock_from_config.return_value.ensure.side_effect = InsufficientSpaceError(10, 4)

        result = runner.invoke(
            app, ["--config", str(config_file), "space", "ensure", str(tmp_path), "10"]
        )

        assert result.exit_code == 1
        assert "Not enough free space" in result.output

    @patch("spacewarden.cli.commands.space.SpaceGuarantee.from_config")
    def test_io_error(self, mock_from_config: MagicMock, config_file: Path, tmp_path: Path) -> None:
        mock_from_config.return_value.ensure.side_effect = StorageIOError("reclamation timed out")

        result = runner.invoke(
            app, ["--config", str(config_file), "space", "ensure", str(tmp_path), "10"]
        )

        assert result.exit_code == 1
        assert "Space check failed" in result.output

    def test_invalid_size(self, config_file: Path, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["--config", str(config_file), "space", "ensure", str(tmp_path), "lots"]
        )
        assert result.exit_code != 0


class TestEvictCommand:
    """Tests for spacewarden space evict."""

    def test_evicts_old_files(self, config_file: Path, warden_config: WardenConfig) -> None:
        """Old finished downloads are removed, running ones are not."""
        cache = warden_config.storage.download_cache_dir
        old = cache / "old.bin"
        old.write_bytes(b"\0" * MIB)
        running = cache / "partial" / "dl.bin"
        running.parent.mkdir()
        running.write_bytes(b"\0" * MIB)
        stamp = time.time() - 3 * DAY
        for path in (old, running):
            os.utime(path, (stamp, stamp))

        result = runner.invoke(app, ["--config", str(config_file), "space", "evict", "1M"])

        assert result.exit_code == 0
        assert "Evicted Files" in result.output
        assert not old.exists()
        assert running.exists()

    def test_nothing_eligible(self, config_file: Path, warden_config: WardenConfig) -> None:
        """Recent files are kept and the shortfall is reported."""
        fresh = warden_config.storage.download_cache_dir / "fresh.bin"
        fresh.write_bytes(b"\0" * 16)

        result = runner.invoke(app, ["--config", str(config_file), "space", "evict", "1K"])

        assert result.exit_code == 0
        assert "Nothing eligible" in result.output
        assert "Could not free" in result.output
        assert fresh.exists()


class TestStatusCommand:
    """Tests for spacewarden space status."""

    def test_status_table(self, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "space", "status"])

        assert result.exit_code == 0
        assert "Storage Roots" in result.output
        assert "Reserved margin" in result.output

    def test_missing_root_marked(self, config_file: Path, warden_config: WardenConfig) -> None:
        warden_config.storage.external_dir.rmdir()

        result = runner.invoke(app, ["--config", str(config_file), "space", "status"])

        assert result.exit_code == 0
        assert "missing" in result.output

    def test_reclaim_helper_not_configured(self, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "space", "status"])

        assert "Reclaim helper: not configured" in result.output

    def test_reclaim_helper_availability(
        self, tmp_path: Path, warden_config: WardenConfig
    ) -> None:
        """The configured helper is looked up on PATH."""
        config = warden_config.model_copy(update={"reclaim_command": ["trim-caches", "{bytes}"]})
        path = save_config(config, tmp_path / "helper.toml")

        with patch("spacewarden.storage.reclaimer.command_exists", return_value=False):
            missing = runner.invoke(app, ["--config", str(path), "space", "status"])
        with patch("spacewarden.storage.reclaimer.command_exists", return_value=True):
            found = runner.invoke(app, ["--config", str(path), "space", "status"])

        assert "trim-caches not found" in missing.output
        assert "Reclaim helper: trim-caches" in found.output
        assert "not found" not in found.output
