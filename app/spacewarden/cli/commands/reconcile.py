"""Reconcile command.

This module provides the `spacewarden reconcile` command, which prunes
records whose files are gone and files no record refers to.
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from spacewarden.cli.types import get_config
from spacewarden.storage.errors import RecordStoreError
from spacewarden.storage.models import ReconcileReport
from spacewarden.storage.reconciler import OrphanReconciler
from spacewarden.utils.formatting import console, print_error, print_success

app = typer.Typer(
    name="reconcile",
    help="Reconcile tracked records with files on disk.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def reconcile(
    ctx: typer.Context,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """Delete orphaned files and records pointing at missing files.

    Records on removable media that is currently unmounted are kept.

    Examples:
        spacewarden reconcile --dry-run
        spacewarden reconcile --json
    """
    if ctx.invoked_subcommand is not None:
        return

    config = get_config(ctx)
    reconciler = OrphanReconciler.from_config(config, dry_run=dry_run)

    try:
        report = reconciler.reconcile()
    except RecordStoreError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if json_output:
        _print_json(report)
    else:
        _print_report(report)

    if report.failed_files:
        raise typer.Exit(code=1)


# === Private helper functions ===


def _print_json(report: ReconcileReport) -> None:
    """Display the report as JSON."""
    data = {
        "dry_run": report.dry_run,
        "tracked": report.tracked,
        "deleted_records": report.deleted_records,
        "kept_records": report.kept_records,
        "deleted_files": report.deleted_files,
        "failed_files": report.failed_files,
    }
    console.print_json(json.dumps(data))


def _print_report(report: ReconcileReport) -> None:
    """Display the report as a Rich table."""
    changes = report.deleted_records or report.deleted_files or report.failed_files
    if not changes and not report.kept_records:
        print_success(f"Storage is consistent. {report.tracked} tracked files, no orphans.")
        return

    verb = "Would delete" if report.dry_run else "Deleted"
    table = Table(
        title="Reconciliation (Dry Run)" if report.dry_run else "Reconciliation",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", no_wrap=True)
    table.add_column("Kind", width=8)
    table.add_column("Target")

    for record_id in report.deleted_records:
        table.add_row(f"[removed]{verb}[/removed]", "record", record_id)
    for record_id in report.kept_records:
        table.add_row(
            "[muted]Kept[/muted]", "record", f"{record_id} [muted](media unmounted)[/muted]"
        )
    for path in report.deleted_files:
        table.add_row(f"[removed]{verb}[/removed]", "file", path)
    for path in report.failed_files:
        table.add_row("[error]FAIL[/error]", "file", path)

    console.print(table)
    console.print(f"\n[muted]{report.tracked} tracked files[/muted]")
