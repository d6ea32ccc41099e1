"""Free-space commands.

Provides commands to guarantee space for a write, evict old files from
the download cache, and show the state of the well-known storage roots.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from spacewarden.cli.types import get_config, size_argument
from spacewarden.storage.errors import InsufficientSpaceError, StorageIOError
from spacewarden.storage.evictor import CacheEvictor
from spacewarden.storage.guarantee import SpaceGuarantee, query_free_bytes
from spacewarden.storage.identity import UNKNOWN_PARTITION, partition_of
from spacewarden.storage.models import EvictionReport
from spacewarden.storage.reclaimer import CommandReclaimer
from spacewarden.utils.formatting import (
    console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Guarantee and reclaim free space.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def ensure(
    ctx: typer.Context,
    path: Annotated[
        Path,
        typer.Argument(help="File about to be written (need not exist yet)."),
    ],
    size: Annotated[
        int,
        typer.Argument(
            parser=size_argument,
            metavar="SIZE",
            help="Bytes to be written, e.g. 1048576, 512K, 5M.",
        ),
    ],
    force_full_eviction: Annotated[
        bool,
        typer.Option(
            "--force-full-eviction",
            help="Ask the external reclaimer to free everything it can.",
        ),
    ] = False,
) -> None:
    """Make sure SIZE bytes fit on the partition backing PATH."""
    config = get_config(ctx)
    if force_full_eviction:
        config = config.model_copy(update={"force_full_eviction": True})

    target = _existing_ancestor(path)
    guarantee = SpaceGuarantee.from_config(config)

    try:
        guarantee.ensure(target, size)
    except InsufficientSpaceError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except StorageIOError as e:
        print_error(f"Space check failed: {e}")
        raise typer.Exit(code=1) from e

    print_success(f"{format_size(size)} available for {path}")


@app.command()
def evict(
    ctx: typer.Context,
    size: Annotated[
        int,
        typer.Argument(
            parser=size_argument,
            metavar="SIZE",
            help="Bytes to free, e.g. 100M.",
        ),
    ],
) -> None:
    """Delete the oldest finished downloads until SIZE bytes are freed."""
    config = get_config(ctx)
    evictor = CacheEvictor(
        config.storage.download_cache_dir,
        running_dir_name=config.running_dir_name,
        min_delete_age=config.min_delete_age_seconds,
    )
    report = evictor.free_bytes(size)

    if not report.deleted and not report.failed:
        print_info("Nothing eligible for eviction.")
    else:
        _print_eviction_table(report)

    console.print(
        f"\n[muted]Freed {format_size(report.freed_bytes)} of {format_size(size)} requested "
        f"({report.candidates} candidates, {len(report.skipped_recent)} too recent)[/muted]"
    )
    if not report.satisfied:
        print_warning("Could not free the requested amount.")


@app.command()
def status(ctx: typer.Context) -> None:
    """Show partitions and usable space of the storage roots."""
    config = get_config(ctx)
    storage = config.storage

    table = Table(
        title="Storage Roots",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Root", no_wrap=True)
    table.add_column("Path")
    table.add_column("Partition", justify="right")
    table.add_column("Usable", justify="right", style="info")

    roots = (
        ("data", storage.data_dir),
        ("download cache", storage.download_cache_dir),
        ("external", storage.external_dir),
        ("private cache", storage.private_cache_dir),
        ("private files", storage.private_files_dir),
    )
    for name, root in roots:
        partition = partition_of(root)
        if partition == UNKNOWN_PARTITION:
            table.add_row(name, str(root), "[muted]-[/muted]", "[muted]missing[/muted]")
            continue
        try:
            usable = format_size(query_free_bytes(root) - config.reserved_bytes)
        except OSError:
            usable = "[muted]?[/muted]"
        table.add_row(name, str(root), str(partition), usable)

    console.print(table)
    console.print(f"\n[muted]Reserved margin: {format_size(config.reserved_bytes)}[/muted]")
    helper = _reclaim_helper_state(config.reclaim_command)
    console.print(f"[muted]Reclaim helper:[/muted] {helper}")


# === Private helper functions ===


def _reclaim_helper_state(command: list[str] | None) -> str:
    """Describe whether the external reclaim command can run."""
    if command is None:
        return "[muted]not configured[/muted]"
    if CommandReclaimer(command).is_available():
        return f"[success]{command[0]}[/success]"
    return f"[warning]{command[0]} not found[/warning]"


def _existing_ancestor(path: Path) -> Path:
    """Return path, or its closest ancestor that exists."""
    candidate = path.absolute()
    while not candidate.exists() and candidate != candidate.parent:
        candidate = candidate.parent
    return candidate


def _print_eviction_table(report: EvictionReport) -> None:
    """Display evicted and failed paths as a Rich table."""
    table = Table(
        title="Evicted Files",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=8, justify="center")
    table.add_column("Path")

    for path in report.deleted:
        table.add_row("[success]OK[/success]", path)
    for path in report.failed:
        table.add_row("[error]FAIL[/error]", path)

    console.print(table)
