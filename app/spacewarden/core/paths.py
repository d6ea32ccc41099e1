"""XDG-compliant path management for spacewarden.

This module provides standardized paths following the XDG Base Directory
Specification for configuration, state, data, and cache storage.

XDG defaults:
- Config: ~/.config/spacewarden/
- State: ~/.local/state/spacewarden/
- Data: ~/.local/share/spacewarden/
- Cache: ~/.cache/spacewarden/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "spacewarden"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/spacewarden/ (or XDG_CONFIG_HOME/spacewarden/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the tracked-download record file.

    Returns:
        Path to ~/.local/state/spacewarden/ (or XDG_STATE_HOME/spacewarden/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_data_dir() -> Path:
    """Get the data directory path.

    Returns:
        Path to ~/.local/share/spacewarden/ (or XDG_DATA_HOME/spacewarden/).
    """
    return _get_xdg_dir("XDG_DATA_HOME", ".local/share")


def get_cache_dir() -> Path:
    """Get the cache directory path.

    Returns:
        Path to ~/.cache/spacewarden/ (or XDG_CACHE_HOME/spacewarden/).
    """
    return _get_xdg_dir("XDG_CACHE_HOME", ".cache")


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/spacewarden/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_records_path() -> Path:
    """Get the default record store path.

    Returns:
        Path to ~/.local/state/spacewarden/records.jsonl.
    """
    return get_state_dir() / "records.jsonl"


def ensure_dir(path: Path, name: str) -> Path:
    """Create directory (and parents) if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
