"""Tracked record commands.

Provides commands to add, list and remove records in the record store.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from spacewarden.cli.types import get_config
from spacewarden.storage.errors import RecordStoreError
from spacewarden.storage.records import JsonlRecordStore
from spacewarden.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage tracked download records.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def add(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="File to track.")],
    record_id: Annotated[
        str | None,
        typer.Option("--id", help="Record id (generated if omitted)."),
    ] = None,
) -> None:
    """Track PATH as a stored download."""
    store = JsonlRecordStore(get_config(ctx).records_path)
    try:
        record = store.add(str(path.absolute()), record_id=record_id)
    except RecordStoreError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Tracking {record.path} as {record.id}")


@app.command("list")
def list_records(ctx: typer.Context) -> None:
    """List tracked records."""
    store = JsonlRecordStore(get_config(ctx).records_path)
    try:
        records = store.query_all()
    except RecordStoreError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not records:
        print_info("No tracked records.")
        return

    table = Table(
        title="Tracked Records",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", no_wrap=True)
    table.add_column("Path")
    table.add_column("On disk", width=8, justify="center")

    for record in records:
        if not record.path:
            table.add_row(record.id, "[muted]-[/muted]", "")
            continue
        present = Path(record.path).exists()
        marker = "[success]yes[/success]" if present else "[error]no[/error]"
        table.add_row(record.id, record.path, marker)

    console.print(table)


@app.command()
def remove(
    ctx: typer.Context,
    record_id: Annotated[str, typer.Argument(help="Record id to remove.")],
) -> None:
    """Stop tracking a record (the file is left in place)."""
    store = JsonlRecordStore(get_config(ctx).records_path)
    try:
        removed = store.delete_by_id(record_id)
    except RecordStoreError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not removed:
        print_error(f"No record with id {record_id}")
        raise typer.Exit(code=1)
    print_success(f"Removed record {record_id}")
