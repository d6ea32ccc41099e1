"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from spacewarden import __version__
from spacewarden.cli.commands import config, reconcile, records, space

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Create main Typer app
app = typer.Typer(
    name="spacewarden",
    help="Free-space guarantees and orphan cleanup for download storage.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"spacewarden version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log debug messages.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only log errors.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config.toml (default: XDG config dir).",
        ),
    ] = None,
) -> None:
    """spacewarden - keep download storage from filling up.

    Guarantee free space before writes, evict stale cache files and
    reconcile tracked records with what is on disk.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# Register commands
app.add_typer(space.app, name="space")
app.add_typer(reconcile.app, name="reconcile")
app.add_typer(records.app, name="records")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
