"""Path and tree helpers.

Provides directory-boundary-aware path comparison and top-level
deduplication of node selections, shared by the selection service and
the deletion engine.
"""

import os
from collections.abc import Iterable
from pathlib import PurePath

from declutter.models.node import Node

_SEPARATORS = os.sep + (os.altsep or "")


def normalize_path(path: str) -> str:
    """Normalize a path for comparison.

    Strips trailing separators (keeping a bare filesystem root intact)
    and applies the platform's case folding.

    Args:
        path: Path to normalize.

    Returns:
        Normalized path string.
    """
    stripped = path.rstrip(_SEPARATORS)
    if not stripped:
        stripped = path[:1]
    elif len(stripped) == 2 and stripped[1] == ":":
        # Windows drive root ("C:\\" must keep its separator)
        stripped += os.sep
    return os.path.normcase(stripped)


def is_nested_path(path: str, ancestor: str) -> bool:
    """Check whether ``path`` lies strictly inside ``ancestor``.

    The check respects directory boundaries: ``/data/app2`` is not nested
    in ``/data/app``.

    Args:
        path: Candidate descendant path.
        ancestor: Candidate ancestor path.

    Returns:
        True if ``path`` is a descendant of ``ancestor``.
    """
    child = normalize_path(path)
    parent = normalize_path(ancestor)
    if child == parent:
        return False
    prefix = parent if parent.endswith(os.sep) else parent + os.sep
    return child.startswith(prefix)


def top_level_items(nodes: Iterable[Node]) -> list[Node]:
    """Drop nodes whose ancestor (or identical path) is also present.

    Deleting a directory deletes everything inside it, so keeping only
    the outermost selections avoids double-counting freed space. The
    relative order of the surviving nodes is preserved.

    Args:
        nodes: Selected nodes, possibly nested.

    Returns:
        Nodes with no selected ancestor, in input order.
    """
    items = list(nodes)
    if len(items) <= 1:
        return items

    # Shortest paths first so ancestors are seen before descendants
    by_length = sorted(enumerate(items), key=lambda pair: len(normalize_path(pair[1].full_path)))
    kept_paths: set[str] = set()
    kept_indexes: set[int] = set()

    for index, node in by_length:
        normalized = normalize_path(node.full_path)
        if normalized in kept_paths:
            continue
        ancestors = {os.path.normcase(str(p)) for p in PurePath(normalized).parents}
        if ancestors & kept_paths:
            continue
        kept_paths.add(normalized)
        kept_indexes.add(index)

    return [node for index, node in enumerate(items) if index in kept_indexes]


def middle_ellipsis(path: str, max_length: int) -> str:
    """Shorten a path by replacing its middle with ``...``.

    Args:
        path: Path to shorten.
        max_length: Maximum length of the result (at least 5).

    Returns:
        The path unchanged if short enough, otherwise a shortened form.
    """
    if len(path) <= max_length:
        return path
    if max_length < 5:
        return path[:max_length]
    remaining = max_length - 3
    head = remaining // 2
    tail = remaining - head
    return f"{path[:head]}...{path[-tail:]}"
