"""Unit tests for warden configuration."""

import tomllib
from pathlib import Path

import pytest
from pydantic import ValidationError
from spacewarden.core.config import (
    DEFAULT_MIN_DELETE_AGE_SECONDS,
    DEFAULT_RECLAIM_TIMEOUT_SECONDS,
    DEFAULT_RESERVED_BYTES,
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    StorageConfig,
    WardenConfig,
    load_config,
    load_config_or_default,
    save_config,
)


class TestWardenConfigModel:
    """Tests for WardenConfig validation."""

    def test_defaults(self) -> None:
        config = WardenConfig()
        assert config.reserved_bytes == DEFAULT_RESERVED_BYTES == 32 * 1024 * 1024
        assert config.min_delete_age_seconds == DEFAULT_MIN_DELETE_AGE_SECONDS == 86400
        assert config.reclaim_timeout_seconds == DEFAULT_RECLAIM_TIMEOUT_SECONDS == 30.0
        assert config.force_full_eviction is False
        assert config.running_dir_name == "partial"
        assert config.reclaim_command is None
        assert config.storage.external_emulated is True
        assert config.storage.removable_volumes == []

    @pytest.mark.parametrize(
        "overrides",
        [
            {"reserved_bytes": -1},
            {"min_delete_age_seconds": -5},
            {"reclaim_timeout_seconds": 0},
            {"running_dir_name": ""},
            {"reclaim_command": []},
            {"unknown_field": 1},
        ],
    )
    def test_rejects_invalid_values(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            WardenConfig(**overrides)

    def test_storage_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            StorageConfig(sdcard="/mnt/sd")  # type: ignore[call-arg]


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("reserved_bytes = = 1\n")
        with pytest.raises(ConfigParseError, match="Invalid TOML"):
            load_config(path)

    def test_invalid_content(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("reserved_bytes = -1\n")
        with pytest.raises(ConfigError, match="Invalid config content"):
            load_config(path)

    def test_partial_file_uses_defaults(self, tmp_path: Path) -> None:
        """Keys not present in the file keep their defaults."""
        path = tmp_path / "config.toml"
        path.write_text(
            "force_full_eviction = true\n"
            'reclaim_command = ["trim-caches", "{bytes}"]\n'
            "\n"
            "[storage]\n"
            'data_dir = "/srv/data"\n'
            'removable_volumes = ["/media/usb"]\n'
        )

        config = load_config(path)

        assert config.force_full_eviction is True
        assert config.reclaim_command == ["trim-caches", "{bytes}"]
        assert config.storage.data_dir == Path("/srv/data")
        assert config.storage.removable_volumes == [Path("/media/usb")]
        assert config.reserved_bytes == DEFAULT_RESERVED_BYTES


class TestLoadConfigOrDefault:
    """Tests for load_config_or_default."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = load_config_or_default(tmp_path / "missing.toml")
        assert config.reserved_bytes == DEFAULT_RESERVED_BYTES

    def test_parse_errors_propagate(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("not toml at all [")
        with pytest.raises(ConfigParseError):
            load_config_or_default(path)


class TestSaveConfig:
    """Tests for save_config."""

    def test_save_then_load(self, tmp_path: Path, warden_config: WardenConfig) -> None:
        """A saved config loads back equal."""
        config = warden_config.model_copy(
            update={"reserved_bytes": 1024, "reclaim_command": ["trim", "{bytes}"]}
        )
        path = save_config(config, tmp_path / "nested" / "config.toml")

        assert path.exists()
        assert load_config(path) == config

    def test_none_values_omitted(self, tmp_path: Path) -> None:
        """Unset optionals are left out of the TOML file."""
        path = save_config(WardenConfig(), tmp_path / "config.toml")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        assert "reclaim_command" not in data
        assert "storage" in data

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        save_config(WardenConfig(), tmp_path / "config.toml")
        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]

    def test_unwritable_parent_raises_config_error(self, tmp_path: Path) -> None:
        """A file where the config directory should be is reported as ConfigError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        with pytest.raises(ConfigError, match="Cannot create config directory"):
            save_config(WardenConfig(), blocker / "config.toml")
