"""Shared types and utilities for CLI commands.

This module provides helpers used across multiple CLI command modules
to avoid code duplication.
"""

import typer

from spacewarden.core.config import ConfigError, WardenConfig, load_config_or_default
from spacewarden.utils.formatting import parse_size, print_error


def get_config(ctx: typer.Context) -> WardenConfig:
    """Load the configuration selected by the global --config option.

    Falls back to defaults when no config file exists.

    Raises:
        typer.Exit: If the config file is invalid.
    """
    obj = ctx.find_root().obj or {}
    try:
        return load_config_or_default(obj.get("config_path"))
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def size_argument(value: str) -> int:
    """Typer parser for byte sizes such as "5M" or "1048576"."""
    try:
        return parse_size(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
