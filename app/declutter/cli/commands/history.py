"""History command for viewing past deletions.

This module provides the `declutter history` command for viewing
what declutter has deleted and how much space it freed.
"""

import json
from datetime import UTC, datetime
from typing import Annotated

import typer
from rich.table import Table

from declutter.core.state import StateManager
from declutter.models.deletion import DeletionMode
from declutter.models.history import HistoryEntry
from declutter.utils.formatting import console, format_size, print_info, print_success

app = typer.Typer(
    name="history",
    help="View history of deletions.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    since: Annotated[
        str | None,
        typer.Option(
            "--since",
            help="Show entries since date (YYYY-MM-DD).",
        ),
    ] = None,
    pattern: Annotated[
        str | None,
        typer.Option(
            "--pattern",
            "-p",
            help="Only show paths matching a glob pattern (e.g. '*/node_modules').",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show history of deletions.

    Displays items deleted by declutter, newest first, with their size,
    deletion time and whether they went to the trash.

    Examples:
        declutter history              # Show last 20 entries
        declutter history -n 50        # Show last 50 entries
        declutter history --since 2026-01-01
        declutter history --pattern '*/.cache/*'
        declutter history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    state = StateManager()
    entries = state.list_by_pattern(pattern) if pattern else state.list_entries()

    # Apply since filter if provided
    if since:
        try:
            since_parsed = datetime.fromisoformat(since)
        except ValueError:
            typer.echo(f"Invalid date format: {since}. Use YYYY-MM-DD.", err=True)
            raise typer.Exit(code=1) from None
        # If no timezone info, treat as UTC
        if since_parsed.tzinfo is None:
            since_parsed = since_parsed.replace(tzinfo=UTC)
        entries = [e for e in entries if e.deletion_datetime >= since_parsed]

    entries = entries[:limit]
    if not entries:
        print_info("No history entries found.")
        return

    if json_output:
        _print_json(entries)
    else:
        _print_table(entries)


@app.command()
def clear(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Delete the recorded history."""
    state = StateManager()
    if not yes and not typer.confirm(f"Clear {state.count()} history entries?", default=False):
        print_info("Aborted.")
        raise typer.Exit(code=0)
    state.clear()
    print_success("History cleared.")


def _print_table(entries: list[HistoryEntry]) -> None:
    """Print history as Rich table.

    Args:
        entries: List of history entries to display.
    """
    table = Table(
        title="Deletion History",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", style="dim")
    table.add_column("Deleted", style="info")
    table.add_column("Path", no_wrap=True, overflow="ellipsis")
    table.add_column("Size", justify="right")
    table.add_column("Mode")

    for entry in entries:
        if entry.deletion_type is DeletionMode.RECOVERABLE:
            mode = "[success]trash[/]"
        else:
            mode = "[error]permanent[/]"
        table.add_row(
            entry.id[:8],
            entry.deletion_datetime.astimezone().strftime("%Y-%m-%d %H:%M"),
            entry.path + ("/" if entry.is_directory else ""),
            format_size(entry.size_bytes),
            mode,
        )

    console.print(table)
    total = sum(e.size_bytes for e in entries)
    console.print(f"\n[dim]{len(entries)} deletion(s), {format_size(total)} freed[/dim]")


def _print_json(entries: list[HistoryEntry]) -> None:
    """Print history as JSON.

    Args:
        entries: List of history entries to output.
    """
    output = [entry.to_dict() for entry in entries]
    console.print_json(json.dumps(output))
