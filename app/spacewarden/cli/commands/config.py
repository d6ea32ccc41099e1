"""Configuration commands.

Provides commands to display the effective configuration and to write
a default config file.
"""

from typing import Annotated

import tomli_w
import typer

from spacewarden.cli.types import get_config
from spacewarden.core.config import ConfigError, WardenConfig, save_config
from spacewarden.core.paths import get_config_path
from spacewarden.utils.formatting import console, print_error, print_success, print_warning

app = typer.Typer(
    help="Show and initialize configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the effective configuration as TOML."""
    config = get_config(ctx)
    data = config.model_dump(mode="json", exclude_none=True)
    console.print(tomli_w.dumps(data), markup=False, highlight=False)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    obj = ctx.find_root().obj or {}
    path = obj.get("config_path") or get_config_path()

    if path.exists() and not force:
        print_warning(f"Config already exists: {path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        saved = save_config(WardenConfig(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Config written to {saved}")
