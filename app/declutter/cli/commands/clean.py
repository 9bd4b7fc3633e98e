"""Clean command implementation.

Deletes files and directories, to the trash by default, and records
every deletion in the history.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import Annotated

import typer
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TaskID, TextColumn

from declutter.cli.display import create_deletion_plan_table, print_deletion_result
from declutter.core.state import StateManager
from declutter.deletion.engine import DeletionEngine
from declutter.deletion.progress import QueueProgressSink
from declutter.models.deletion import DeleteResult, DeletionMode
from declutter.models.node import Node
from declutter.scanning.scanner import DirectoryScanner, ScanError
from declutter.utils.formatting import console, format_size, print_error, print_info
from declutter.utils.tree import top_level_items


def clean(
    paths: Annotated[
        list[Path],
        typer.Argument(help="Files or directories to delete."),
    ],
    permanent: Annotated[
        bool,
        typer.Option("--permanent", help="Delete permanently instead of moving to the trash."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Delete files and directories.

    Items go to the trash unless --permanent is given. Nested paths are
    deleted once, through their outermost selected directory. The
    command exits with code 1 if any item could not be deleted.

    Examples:
        declutter clean ~/Downloads/old-iso ~/Downloads/archive.zip
        declutter clean ~/projects/legacy --permanent --yes
        declutter clean ~/tmp/* --dry-run
    """
    scanner = DirectoryScanner()
    nodes: list[Node] = []
    for path in paths:
        try:
            nodes.append(scanner.create_node(path))
        except ScanError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
    nodes = top_level_items(nodes)

    console.print(create_deletion_plan_table(nodes, dry_run))
    total = sum(node.size for node in nodes)
    mode = DeletionMode.PERMANENT if permanent else DeletionMode.RECOVERABLE

    if dry_run:
        print_info(f"Dry-run: {len(nodes)} item(s) would be deleted ({format_size(total)}).")
        return

    # Confirm unless --yes
    if not yes:
        verb = "permanently delete" if permanent else "move to trash"
        confirmed = typer.confirm(
            f"\nProceed to {verb} {len(nodes)} item(s) ({format_size(total)})?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    result = _run_with_progress(DeletionEngine(history=StateManager()), nodes, mode)
    print_deletion_result(result)

    # Exit with error if any deletion failed
    if not result.success:
        raise typer.Exit(code=1)


def _run_with_progress(
    engine: DeletionEngine,
    nodes: list[Node],
    mode: DeletionMode,
) -> DeleteResult:
    """Run the deletion on a worker thread while rendering its progress.

    Ctrl+C stops the batch before the next item; the partial result is returned.
    """
    sink = QueueProgressSink()
    cancel = threading.Event()

    with (
        Progress(
            TextColumn("[info]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("[muted]{task.fields[current]}"),
            console=console,
            transient=True,
        ) as progress,
        ThreadPoolExecutor(max_workers=1) as executor,
    ):
        task = progress.add_task("Deleting", total=len(nodes), current="")
        future = executor.submit(engine.delete, nodes, mode, sink, cancel=cancel)
        try:
            while not future.done():
                wait([future], timeout=0.1)
                _advance(progress, task, sink)
        except KeyboardInterrupt:
            cancel.set()
        result = future.result()
        _advance(progress, task, sink)

    return result


def _advance(progress: Progress, task: TaskID, sink: QueueProgressSink) -> None:
    latest = sink.latest()
    if latest is not None:
        progress.update(
            task,
            completed=latest.processed_count,
            current=Path(latest.current_path).name,
        )
