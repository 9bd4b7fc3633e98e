"""Shared Rich display functions for trees, candidates and deletion results.

Provides reusable renderers used by the scan, suggest and clean
commands, plus the JSON shapes used by their ``--json`` output.
"""

from datetime import datetime
from typing import Any

from rich.table import Table
from rich.tree import Tree

from declutter.models.deletion import DeleteResult
from declutter.models.node import LoadState, Node
from declutter.models.score import NodeScore
from declutter.utils.formatting import (
    console,
    format_age,
    format_size,
    print_success,
    print_warning,
    score_style,
    size_style,
)
from declutter.utils.tree import middle_ellipsis


def _node_label(node: Node, now: datetime | None = None) -> str:
    if node.is_error:
        return f"[error]{node.name}[/error]"
    kind = "directory" if node.is_directory else "file"
    name = f"{node.name}/" if node.is_directory else node.name
    size = f"[{size_style(node.size)}]{format_size(node.size)}[/]"
    age = f"[muted]{format_age(node.last_modified, now)}[/muted]"
    collapsed = node.has_children and node.load_state is LoadState.UNLOADED
    more = " [muted]...[/muted]" if collapsed else ""
    return f"[{kind}]{name}[/{kind}]  {size}  {age}{more}"


def create_node_tree(root: Node, now: datetime | None = None) -> Tree:
    """Build a Rich tree from the loaded part of a node tree.

    Children are listed largest first. Directories that were not
    expanded but have children are marked with an ellipsis.

    Args:
        root: Root of the subtree to render.
        now: Reference time for ages.

    Returns:
        Rich Tree renderable.
    """
    tree = Tree(_node_label(root, now), guide_style="border")
    pending: list[tuple[Node, Tree]] = [(root, tree)]
    while pending:
        node, branch = pending.pop()
        for child in sorted(node.children, key=lambda n: n.size, reverse=True):
            pending.append((child, branch.add(_node_label(child, now))))
    return tree


def create_candidates_table(
    ranked: list[NodeScore],
    selected: list[Node],
    now: datetime | None = None,
) -> Table:
    """Create a table of ranked candidates with their scores.

    Args:
        ranked: Candidate scores, strongest first.
        selected: Nodes chosen for deletion (marked in the first column).
        now: Reference time for ages.

    Returns:
        Rich Table configured for candidate display.
    """
    chosen = {id(node) for node in selected}
    table = Table(
        title="Cleanup Candidates",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", width=1)
    table.add_column("Path", no_wrap=True, overflow="ellipsis")
    table.add_column("Size", justify="right")
    table.add_column("Modified", style="muted", justify="right")
    table.add_column("Age Score", justify="right")
    table.add_column("Size Score", justify="right")
    table.add_column("Score", justify="right")

    for score in ranked:
        node = score.node
        marker = "[success]*[/success]" if id(node) in chosen else ""
        table.add_row(
            marker,
            middle_ellipsis(node.full_path, 80),
            f"[{size_style(node.size)}]{format_size(node.size)}[/]",
            format_age(node.last_modified, now),
            f"{score.age_score:.2f}",
            f"{score.size_score:.2f}",
            f"[{score_style(score.combined_score)}]{score.combined_score:.2f}[/]",
        )

    return table


def create_deletion_plan_table(nodes: list[Node], dry_run: bool = False) -> Table:
    """Create a table listing the nodes about to be deleted."""
    title = "Planned Deletions (Dry Run)" if dry_run else "Planned Deletions"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", no_wrap=True, overflow="ellipsis")
    table.add_column("Type", width=5)
    table.add_column("Size", justify="right")

    for node in nodes:
        table.add_row(
            middle_ellipsis(node.full_path, 80),
            "dir" if node.is_directory else "file",
            format_size(node.size),
        )

    return table


def print_deletion_result(result: DeleteResult) -> None:
    """Print per-item failures and a summary line for a deletion batch."""
    if result.errors:
        table = Table(
            title="Failed Deletions",
            show_header=True,
            header_style="bold_header",
            border_style="border",
        )
        table.add_column("Path", no_wrap=True, overflow="ellipsis")
        table.add_column("Reason", width=14)
        table.add_column("Message", style="muted")
        for error in result.errors:
            table.add_row(
                middle_ellipsis(error.item_path, 80),
                f"[error]{error.kind.value}[/error]",
                error.error_message,
            )
        console.print(table)

    freed = format_size(result.total_bytes_freed)
    if result.cancelled:
        print_warning(
            f"Cancelled: {result.deleted_count} deleted, {result.failed_count} failed, {freed} freed"
        )
    elif result.failed_count:
        print_warning(f"{result.deleted_count} deleted, {result.failed_count} failed, {freed} freed")
    else:
        print_success(f"All {result.deleted_count} item(s) deleted, {freed} freed.")


def node_to_dict(node: Node) -> dict[str, Any]:
    """Convert the loaded part of a node tree to JSON-serializable data."""
    return {
        "name": node.name,
        "path": node.full_path,
        "type": "directory" if node.is_directory else "file",
        "size_bytes": node.size,
        "last_modified": node.last_modified.isoformat() if node.last_modified else None,
        "last_accessed": node.last_accessed.isoformat() if node.last_accessed else None,
        "error": node.error,
        "children": [node_to_dict(child) for child in node.children],
    }


def score_to_dict(score: NodeScore, selected: bool) -> dict[str, Any]:
    """Convert a candidate score to JSON-serializable data."""
    return {
        "path": score.node.full_path,
        "size_bytes": score.node.size,
        "age_score": round(score.age_score, 4),
        "size_score": round(score.size_score, 4),
        "combined_score": round(score.combined_score, 4),
        "selected": selected,
    }
