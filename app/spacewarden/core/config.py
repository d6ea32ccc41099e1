"""Warden configuration and settings.

This module provides the configuration model and I/O functions for the
space guarantee, cache evictor, and orphan reconciler.

Configuration is stored in ~/.config/spacewarden/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from spacewarden.core.paths import (
    ensure_dir,
    get_cache_dir,
    get_config_path,
    get_data_dir,
    get_records_path,
)

logger = logging.getLogger(__name__)

MIB = 1024 * 1024

# Safety buffer kept free on every partition
DEFAULT_RESERVED_BYTES = 32 * MIB

# Files touched within this window are never evicted
DEFAULT_MIN_DELETE_AGE_SECONDS = 24 * 60 * 60

DEFAULT_RECLAIM_TIMEOUT_SECONDS = 30.0

# Subtree of the download cache holding in-progress transfers
DEFAULT_RUNNING_DIR_NAME = "partial"


class StorageConfig(BaseModel):
    """Well-known storage roots used for strategy selection and reconciliation.

    Attributes:
        data_dir: Primary data root.
        download_cache_dir: Shared download-cache root.
        external_dir: External-storage root.
        private_cache_dir: Owner's private cache directory.
        private_files_dir: Owner's private files directory.
        external_emulated: Whether external storage is emulated on the data partition.
        removable_volumes: Mount roots of removable media.
    """

    model_config = ConfigDict(extra="forbid")

    data_dir: Annotated[
        Path,
        Field(default_factory=get_data_dir, description="Primary data root"),
    ]
    download_cache_dir: Annotated[
        Path,
        Field(
            default_factory=lambda: get_cache_dir() / "downloads",
            description="Shared download-cache root",
        ),
    ]
    external_dir: Annotated[
        Path,
        Field(
            default_factory=lambda: Path.home() / "Downloads",
            description="External-storage root",
        ),
    ]
    private_cache_dir: Annotated[
        Path,
        Field(
            default_factory=lambda: get_cache_dir() / "private",
            description="Private cache directory",
        ),
    ]
    private_files_dir: Annotated[
        Path,
        Field(
            default_factory=lambda: get_data_dir() / "files",
            description="Private files directory",
        ),
    ]
    external_emulated: Annotated[
        bool,
        Field(description="External storage is emulated on the data partition"),
    ] = True
    removable_volumes: Annotated[
        list[Path],
        Field(default_factory=list, description="Mount roots of removable media"),
    ]


class WardenConfig(BaseModel):
    """Configuration for the space guarantee and cleanup passes.

    Attributes:
        reserved_bytes: Bytes kept free on every partition, never counted as usable.
        min_delete_age_seconds: Grace period protecting recently modified cache files.
        reclaim_timeout_seconds: Upper bound on the external reclamation wait.
        force_full_eviction: Ask the external reclaimer for everything it can free.
        running_dir_name: Directory name pruned from cache eviction.
        reclaim_command: Optional argv run to reclaim space externally.
        records_path: Location of the tracked-download record file.
        storage: Well-known storage roots.
    """

    model_config = ConfigDict(extra="forbid")

    reserved_bytes: Annotated[
        int,
        Field(ge=0, description="Reserved safety margin in bytes"),
    ] = DEFAULT_RESERVED_BYTES
    min_delete_age_seconds: Annotated[
        int,
        Field(ge=0, description="Minimum age before a cache file may be evicted"),
    ] = DEFAULT_MIN_DELETE_AGE_SECONDS
    reclaim_timeout_seconds: Annotated[
        float,
        Field(gt=0, description="Timeout for external reclamation in seconds"),
    ] = DEFAULT_RECLAIM_TIMEOUT_SECONDS
    force_full_eviction: Annotated[
        bool,
        Field(description="Request unbounded external reclamation"),
    ] = False
    running_dir_name: Annotated[
        str,
        Field(min_length=1, description="In-progress transfer directory name"),
    ] = DEFAULT_RUNNING_DIR_NAME
    reclaim_command: Annotated[
        list[str] | None,
        Field(description="Command run to reclaim space ({bytes} is substituted)"),
    ] = None
    records_path: Annotated[
        Path,
        Field(default_factory=get_records_path, description="Record store file"),
    ]
    storage: Annotated[
        StorageConfig,
        Field(default_factory=StorageConfig, description="Storage roots"),
    ]

    @field_validator("reclaim_command")
    @classmethod
    def validate_reclaim_command(cls, v: list[str] | None) -> list[str] | None:
        """Reject an empty reclaim command."""
        if v is not None and not v:
            msg = "reclaim_command must not be empty (omit it instead)"
            raise ValueError(msg)
        return v


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> WardenConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated WardenConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return WardenConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> WardenConfig:
    """Load configuration, falling back to defaults when no file exists.

    Parse and schema errors still propagate.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file found, using defaults")
        return WardenConfig()


def save_config(config: WardenConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The WardenConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    try:
        ensure_dir(config_path.parent, "config")
    except RuntimeError as e:
        raise ConfigError(str(e)) from e

    # TOML has no null, so unset optionals are omitted
    data = config.model_dump(mode="json", exclude_none=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
