"""CLI commands for spacewarden.

This package contains all subcommand implementations.
"""

from spacewarden.cli.commands import config, reconcile, records, space

__all__ = ["config", "reconcile", "records", "space"]
