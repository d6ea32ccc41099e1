"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest
from spacewarden.core.config import StorageConfig, WardenConfig, save_config

MIB = 1024 * 1024

# Fixed "now" for age-based tests (2023-11-14T22:13:20Z)
NOW = 1_700_000_000.0

DAY = 24 * 60 * 60


@pytest.fixture
def make_file() -> Callable[..., Path]:
    """Factory creating a file of a given size and age relative to NOW."""

    def _make(path: Path, size: int, age_seconds: float = 2 * DAY) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\0" * size)
        mtime = NOW - age_seconds
        os.utime(path, (mtime, mtime))
        return path

    return _make


@pytest.fixture
def storage_config(tmp_path: Path) -> StorageConfig:
    """StorageConfig with every root created under tmp_path."""
    config = StorageConfig(
        data_dir=tmp_path / "data",
        download_cache_dir=tmp_path / "cache" / "downloads",
        external_dir=tmp_path / "external",
        private_cache_dir=tmp_path / "private" / "cache",
        private_files_dir=tmp_path / "private" / "files",
        external_emulated=True,
        removable_volumes=[],
    )
    for root in (
        config.data_dir,
        config.download_cache_dir,
        config.external_dir,
        config.private_cache_dir,
        config.private_files_dir,
    ):
        root.mkdir(parents=True, exist_ok=True)
    return config


@pytest.fixture
def warden_config(tmp_path: Path, storage_config: StorageConfig) -> WardenConfig:
    """WardenConfig pointing every path under tmp_path."""
    return WardenConfig(
        records_path=tmp_path / "state" / "records.jsonl",
        storage=storage_config,
    )


@pytest.fixture
def now() -> float:
    """The fixed current time used by make_file."""
    return NOW


@pytest.fixture
def config_file(tmp_path: Path, warden_config: WardenConfig) -> Path:
    """warden_config saved as TOML, for passing to the CLI via --config."""
    return save_config(warden_config, tmp_path / "config.toml")
