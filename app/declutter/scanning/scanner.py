"""Directory scanner with lazy expansion and size aggregation.

Builds Node trees from the local filesystem. Roots are measured eagerly
(full recursive size); children are enumerated one level at a time on
demand and delivered incrementally through generators, so the thread
consuming ``expand()`` is the only writer of the tree.

Per-entry failures (permission denied, entries vanishing mid-walk, I/O
faults) never abort a walk: the entry is skipped, or, when the directory
being expanded cannot be listed at all, a synthetic error child takes
the place of its children.
"""

import logging
import os
import stat
import threading
from collections.abc import Iterator
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from declutter.models.node import LoadState, Node
from declutter.models.options import ScanOptions
from declutter.scanning.filters import (
    EntryInfo,
    Predicate,
    compile_filter,
    timestamp_to_datetime,
)

logger = logging.getLogger(__name__)


class ScanError(Exception):
    """Raised when a scan root is missing or is not a directory."""


def _cancelled(cancel: threading.Event | None) -> bool:
    return cancel is not None and cancel.is_set()


class DirectoryScanner:
    """Scans directory trees into Node structures.

    The scanner is stateless apart from a size cache, so one instance can
    be shared by every caller. The cache maps directory paths to their
    recursive size; it is filled while measuring roots, so the first
    expansion of the same tree reuses the sizes instead of walking again.
    Expanding a node a second time (after ``Node.clear_children``) drops
    the cached sizes below it, so a reload sees the current filesystem.
    ``scan()`` clears the whole cache, as does ``clear_size_cache()``.

    Args:
        max_workers: Upper bound for parallel fan-out. Defaults to the
            number of CPU cores.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        if max_workers is not None and max_workers < 1:
            msg = f"max_workers must be at least 1, got {max_workers}"
            raise ValueError(msg)
        self._max_workers = max_workers or os.cpu_count() or 1
        self._size_cache: dict[str, int] = {}
        self._expanded_paths: set[str] = set()
        self._cache_lock = threading.Lock()
        self._state_lock = threading.Lock()

    @property
    def max_workers(self) -> int:
        """Upper bound for parallel fan-out."""
        return self._max_workers

    def clear_size_cache(self) -> None:
        """Forget all cached directory sizes."""
        with self._cache_lock:
            self._size_cache.clear()
            self._expanded_paths.clear()

    def forget_sizes(self, path: str) -> None:
        """Drop cached sizes of ``path`` and every directory below it."""
        prefix = path.rstrip(os.sep) + os.sep
        with self._cache_lock:
            stale = [p for p in self._size_cache if p == path or p.startswith(prefix)]
            for p in stale:
                del self._size_cache[p]
            self._expanded_paths.difference_update(
                [p for p in self._expanded_paths if p.startswith(prefix)]
            )
        if stale:
            logger.debug("Dropped %d cached sizes below %s", len(stale), path)

    # === Measuring ===

    def directory_size(self, path: str) -> int:
        """Recursive sum of all file sizes below ``path``.

        Symlinks are counted by their own size and never followed.
        Unreadable subdirectories count as zero.

        Args:
            path: Directory to measure.

        Returns:
            Total size in bytes.
        """
        with self._cache_lock:
            cached = self._size_cache.get(path)
        if cached is not None:
            return cached

        total = 0
        try:
            with os.scandir(path) as it:
                entries = list(it)
        except FileNotFoundError:
            logger.debug("Directory vanished while measuring: %s", path)
            return 0
        except OSError as e:
            logger.debug("Cannot measure directory %s: %s", path, e)
            entries = []

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    total += self.directory_size(entry.path)
                else:
                    total += entry.stat(follow_symlinks=False).st_size
            except OSError as e:
                logger.debug("Skipping unreadable entry %s: %s", entry.path, e)

        with self._cache_lock:
            self._size_cache[path] = total
        return total

    def has_any_children(self, path: str, include_files: bool = True) -> bool:
        """Check for at least one subdirectory (or file) without recursing.

        Args:
            path: Directory to peek into.
            include_files: Whether files count as children.

        Returns:
            True if the directory has something to expand; False if it is
            empty or unreadable.
        """
        try:
            with os.scandir(path) as it:
                for entry in it:
                    try:
                        if include_files or entry.is_dir(follow_symlinks=False):
                            return True
                    except OSError:
                        continue
        except OSError:
            return False
        return False

    # === Tree building ===

    def create_root(self, path: str | os.PathLike[str], include_files: bool = True) -> Node:
        """Create the root node for a directory, measuring it eagerly.

        The recursive size walk makes this call expensive; run it off any
        interactive thread. The root's children stay UNLOADED until
        ``expand()`` is called.

        Args:
            path: Directory to use as root.
            include_files: Whether files count when peeking for children.

        Returns:
            Root node at depth 0 without a parent.

        Raises:
            ScanError: If the path does not exist, cannot be read, or is
                not a directory.
        """
        root = self.create_node(path, include_files)
        if not root.is_directory:
            raise ScanError(f"Not a directory: {root.full_path}")
        logger.info("Created root node for directory: %s", root.full_path)
        return root

    def create_node(self, path: str | os.PathLike[str], include_files: bool = True) -> Node:
        """Create a detached node for a file or directory.

        Directories are measured recursively; symlinks are described by
        the link itself.

        Args:
            path: Existing file or directory.
            include_files: Whether files count when peeking for children.

        Returns:
            Node at depth 0 without a parent.

        Raises:
            ScanError: If the path does not exist or cannot be read.
        """
        full_path = os.path.abspath(Path(path).expanduser())
        try:
            st = os.lstat(full_path)
        except FileNotFoundError as e:
            raise ScanError(f"Path not found: {full_path}") from e
        except OSError as e:
            raise ScanError(f"Cannot access {full_path}: {e}") from e

        is_directory = stat.S_ISDIR(st.st_mode)
        return Node(
            name=os.path.basename(full_path.rstrip(os.sep)) or full_path,
            full_path=full_path,
            is_directory=is_directory,
            size=self.directory_size(full_path) if is_directory else st.st_size,
            last_modified=timestamp_to_datetime(st.st_mtime),
            last_accessed=timestamp_to_datetime(st.st_atime),
            depth=0,
            has_children=is_directory and self.has_any_children(full_path, include_files),
            load_state=LoadState.UNLOADED if is_directory else LoadState.LOADED,
        )

    def expand(
        self,
        node: Node,
        predicate: Predicate | None = None,
        include_files: bool = True,
        *,
        parallel: bool = False,
        cancel: threading.Event | None = None,
    ) -> Iterator[Node]:
        """Load one level of children, yielding each child as it is attached.

        Only UNLOADED directory nodes are expanded. A call against a node
        that is LOADING (another expansion in flight) or LOADED yields
        nothing, so concurrent callers never duplicate children.

        Args:
            node: Directory node to expand.
            predicate: Inclusion predicate (see ``compile_filter``); None keeps all.
            include_files: Whether to enumerate files as well as subdirectories.
            parallel: Measure sibling subdirectories on a worker pool.
            cancel: Event that stops the expansion between entries.

        Yields:
            Newly attached child nodes.
        """
        if not node.is_directory or node.is_error:
            return
        if not self._begin_expansion(node):
            logger.debug("Expansion already done or in flight: %s", node.full_path)
            return

        count = 0
        try:
            for child in self._load_children(node, predicate, include_files, parallel, cancel):
                node.attach_child(child)
                count += 1
                yield child
        finally:
            with self._state_lock:
                node.load_state = LoadState.LOADED
            node.has_children = bool(node.children)
            logger.info("Loaded %d children for node: %s", count, node.full_path)

    def expand_all(
        self,
        node: Node,
        predicate: Predicate | None = None,
        include_files: bool = True,
        *,
        max_depth: int | None = None,
        parallel: bool = False,
        cancel: threading.Event | None = None,
    ) -> Iterator[Node]:
        """Expand a subtree level after level, yielding every new node.

        Args:
            node: Subtree root.
            predicate: Inclusion predicate applied at every level.
            include_files: Whether to enumerate files.
            max_depth: Levels below ``node`` to materialize; None for all.
            parallel: Use parallel fan-out at every expansion.
            cancel: Event that stops the walk; the subtree keeps what was loaded.

        Yields:
            Newly attached nodes, parents before their children.
        """
        pending: list[Node] = [node]
        while pending:
            if _cancelled(cancel):
                logger.info("Scan cancelled below %s", node.full_path)
                return
            current = pending.pop()
            if max_depth is not None and current.depth - node.depth >= max_depth:
                continue
            for child in self.expand(
                current, predicate, include_files, parallel=parallel, cancel=cancel
            ):
                yield child
                if child.is_directory:
                    pending.append(child)

    def scan(
        self,
        options: ScanOptions,
        *,
        parallel: bool = True,
        cancel: threading.Event | None = None,
    ) -> list[Node]:
        """Create and expand one level of every root listed in ``options``.

        Roots that cannot be opened are logged and left out. With
        ``parallel`` the roots are processed concurrently, one worker per
        root; each root's subtree is only ever written by its own worker.

        Args:
            options: Scan options naming the roots and filters.
            parallel: Process roots concurrently.
            cancel: Event that stops the scan.

        Returns:
            Root nodes in the order of ``options.directories_to_scan``.
        """
        self.clear_size_cache()
        predicate = compile_filter(options)
        paths = list(options.directories_to_scan)

        def scan_root(path: str) -> Node | None:
            if _cancelled(cancel):
                return None
            try:
                root = self.create_root(path, options.include_files)
            except ScanError as e:
                logger.warning("Skipping scan root: %s", e)
                return None
            for _child in self.expand(root, predicate, options.include_files, cancel=cancel):
                pass
            return root

        if parallel and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=min(self._max_workers, len(paths))) as executor:
                results = list(executor.map(scan_root, paths))
        else:
            results = [scan_root(path) for path in paths]

        return [root for root in results if root is not None]

    # === Internals ===

    def _begin_expansion(self, node: Node) -> bool:
        with self._state_lock:
            if node.load_state is not LoadState.UNLOADED:
                return False
            node.load_state = LoadState.LOADING
        with self._cache_lock:
            reloading = node.full_path in self._expanded_paths
            self._expanded_paths.add(node.full_path)
        if reloading:
            self.forget_sizes(node.full_path)
        return True

    def _load_children(
        self,
        node: Node,
        predicate: Predicate | None,
        include_files: bool,
        parallel: bool,
        cancel: threading.Event | None,
    ) -> Iterator[Node]:
        try:
            with os.scandir(node.full_path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning("Error reading directory %s: %s", node.full_path, e)
            yield Node.error_node(node, e.strerror or str(e))
            return

        directories: list[os.DirEntry[str]] = []
        files: list[os.DirEntry[str]] = []
        for entry in entries:
            try:
                is_directory = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                logger.warning("Cannot determine type of %s: %s", entry.path, e)
                continue
            if is_directory:
                directories.append(entry)
            elif include_files:
                files.append(entry)

        if parallel and len(directories) > 1:
            yield from self._directory_children_parallel(
                node, directories, predicate, include_files, cancel
            )
        else:
            for entry in directories:
                if _cancelled(cancel):
                    return
                child = self._directory_child(node, entry, predicate, include_files)
                if child is not None:
                    yield child

        for entry in files:
            if _cancelled(cancel):
                return
            child = self._file_child(node, entry, predicate)
            if child is not None:
                yield child

    def _directory_children_parallel(
        self,
        node: Node,
        directories: list[os.DirEntry[str]],
        predicate: Predicate | None,
        include_files: bool,
        cancel: threading.Event | None,
    ) -> Iterator[Node]:
        executor = ThreadPoolExecutor(max_workers=min(self._max_workers, len(directories)))
        try:
            futures: list[Future[Node | None]] = [
                executor.submit(self._directory_child, node, entry, predicate, include_files)
                for entry in directories
            ]
            for future in as_completed(futures):
                if _cancelled(cancel):
                    return
                child = future.result()
                if child is not None:
                    yield child
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def _directory_child(
        self,
        parent: Node,
        entry: os.DirEntry[str],
        predicate: Predicate | None,
        include_files: bool,
    ) -> Node | None:
        try:
            info = EntryInfo.from_dir_entry(entry, size_fn=self.directory_size)
            if predicate is not None and not predicate(info):
                return None
            return Node(
                name=entry.name,
                full_path=entry.path,
                is_directory=True,
                size=info.size,
                last_modified=info.last_modified,
                last_accessed=info.last_accessed,
                depth=parent.depth + 1,
                has_children=self.has_any_children(entry.path, include_files),
            )
        except FileNotFoundError:
            logger.debug("Directory vanished during scan: %s", entry.path)
        except OSError as e:
            logger.warning("Could not access subdirectory %s: %s", entry.path, e)
        return None

    def _file_child(
        self,
        parent: Node,
        entry: os.DirEntry[str],
        predicate: Predicate | None,
    ) -> Node | None:
        try:
            info = EntryInfo.from_dir_entry(entry)
            if predicate is not None and not predicate(info):
                return None
            return Node(
                name=entry.name,
                full_path=entry.path,
                is_directory=False,
                size=info.file_size,
                last_modified=info.last_modified,
                last_accessed=info.last_accessed,
                depth=parent.depth + 1,
                load_state=LoadState.LOADED,
            )
        except FileNotFoundError:
            logger.debug("File vanished during scan: %s", entry.path)
        except OSError as e:
            logger.warning("Could not access file %s: %s", entry.path, e)
        return None
