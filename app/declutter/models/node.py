"""Directory tree node model.

This module defines the in-memory representation of one filesystem
entry within a scanned tree. A parent owns its children exclusively;
children keep only a weak back-reference to their parent so the tree
never forms a reference cycle.
"""

from __future__ import annotations

import os
import weakref
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class LoadState(str, Enum):
    """Lazy-load state of a node's children.

    Attributes:
        UNLOADED: Children have not been enumerated yet (or were cleared).
        LOADING: An expansion of this node is in flight.
        LOADED: Children are populated and reflect the last expansion.
    """

    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


@dataclass(eq=False, slots=True, weakref_slot=True)
class Node:
    """Represents a file or directory within a scanned tree.

    Identity semantics: two nodes are equal only if they are the same
    object, so nodes can be used as dictionary keys and set members
    while their mutable fields change.

    Attributes:
        name: Base name of the entry.
        full_path: Absolute path, unique within a scan.
        is_directory: True for directories.
        size: Size in bytes (recursive sum of descendant files for directories).
        last_modified: Last modification time (timezone-aware, None if unknown).
        last_accessed: Last access time (timezone-aware, None if unknown).
        depth: Distance from the scan root (root is 0).
        has_children: Cheap, non-recursive hint that the node can be expanded.
        load_state: Lazy-load state of ``children``.
        error: Failure message for synthetic error nodes, None otherwise.
        children: Child nodes owned by this node.
    """

    name: str
    full_path: str
    is_directory: bool
    size: int = 0
    last_modified: datetime | None = None
    last_accessed: datetime | None = None
    depth: int = 0
    has_children: bool = False
    load_state: LoadState = LoadState.UNLOADED
    error: str | None = None
    children: list[Node] = field(default_factory=list, repr=False)
    _parent_ref: weakref.ref[Node] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate node data after initialization."""
        if not self.full_path:
            msg = "Node path cannot be empty"
            raise ValueError(msg)
        if self.size < 0:
            msg = f"Node size cannot be negative, got {self.size}"
            raise ValueError(msg)

    @property
    def parent(self) -> Node | None:
        """Parent node, or None for roots and detached nodes."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def is_error(self) -> bool:
        """Whether this is a synthetic node standing in for unreadable children."""
        return self.error is not None

    @property
    def is_root(self) -> bool:
        """Whether this node sits at depth 0 without a parent."""
        return self._parent_ref is None

    def attach_child(self, child: Node) -> None:
        """Take ownership of ``child`` and append it to ``children``.

        Sets the child's back-reference and depth. The child must not be
        attached to another parent.

        Args:
            child: Node to attach.

        Raises:
            ValueError: If the child already has a parent or is this node.
        """
        if child is self:
            msg = "A node cannot be its own child"
            raise ValueError(msg)
        if child.parent is not None:
            msg = f"Node already has a parent: {child.full_path}"
            raise ValueError(msg)
        child._parent_ref = weakref.ref(self)
        child.depth = self.depth + 1
        self.children.append(child)

    def clear_children(self) -> None:
        """Drop all children and return to the UNLOADED state.

        A cleared node can be expanded again.
        """
        for child in self.children:
            child._parent_ref = None
        self.children.clear()
        self.load_state = LoadState.UNLOADED

    def iter_subtree(self) -> Iterator[Node]:
        """Iterate over this node and all loaded descendants, depth-first pre-order."""
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def loaded_file_size(self) -> int:
        """Sum of sizes of all loaded descendant files (the node itself if a file)."""
        return sum(n.size for n in self.iter_subtree() if not n.is_directory and not n.is_error)

    @classmethod
    def error_node(cls, parent: Node, message: str) -> Node:
        """Create a synthetic child describing why ``parent`` could not be read.

        The node is not attached; callers attach it like any other child.

        Args:
            parent: Directory whose children could not be enumerated.
            message: Human-readable failure message.

        Returns:
            Unattached error node with zero size and no children.
        """
        return cls(
            name=f"<error: {message}>",
            full_path=os.path.join(parent.full_path, "<error>"),
            is_directory=False,
            load_state=LoadState.LOADED,
            error=message,
        )
