"""Entry filter pipeline.

Compiles ScanOptions into a single predicate over filesystem entries.
Each enabled sub-filter contributes one boolean function; the compiled
predicate is their logical AND. Disabled sub-filters are never added,
so they always pass.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from declutter.models.options import ScanOptions

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EntryInfo:
    """Filesystem entry as seen by the filter pipeline.

    Directory sizes are expensive, so they are computed on first access
    through ``size_fn`` and cached on the instance. The scanner reads the
    cached value back instead of measuring the directory twice.

    Attributes:
        path: Absolute path of the entry.
        is_directory: True for directories (symlinks are never directories).
        last_modified: Last modification time (UTC).
        last_accessed: Last access time (UTC).
        file_size: Size of a file in bytes (0 for directories).
    """

    path: str
    is_directory: bool
    last_modified: datetime
    last_accessed: datetime
    file_size: int = 0
    size_fn: Callable[[str], int] | None = field(default=None, repr=False)
    _calculated_size: int | None = field(default=None, repr=False)

    @property
    def name(self) -> str:
        """Base name of the entry."""
        return os.path.basename(self.path)

    @property
    def size(self) -> int:
        """Size in bytes; recursive for directories, computed lazily."""
        if not self.is_directory:
            return self.file_size
        if self._calculated_size is None:
            self._calculated_size = self.size_fn(self.path) if self.size_fn else 0
        return self._calculated_size

    @property
    def size_calculated(self) -> bool:
        """Whether a directory size has already been computed."""
        return self._calculated_size is not None

    @classmethod
    def from_dir_entry(
        cls,
        entry: os.DirEntry[str],
        size_fn: Callable[[str], int] | None = None,
    ) -> EntryInfo:
        """Build an EntryInfo from a directory listing entry.

        Args:
            entry: Entry returned by ``os.scandir``.
            size_fn: Recursive size function used for directories.

        Raises:
            OSError: If the entry cannot be stat'ed.
        """
        is_directory = entry.is_dir(follow_symlinks=False)
        st = entry.stat(follow_symlinks=False)
        return cls(
            path=entry.path,
            is_directory=is_directory,
            last_modified=timestamp_to_datetime(st.st_mtime),
            last_accessed=timestamp_to_datetime(st.st_atime),
            file_size=0 if is_directory else st.st_size,
            size_fn=size_fn,
        )


def timestamp_to_datetime(timestamp: float) -> datetime:
    """Convert a POSIX timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp, tz=UTC)


Predicate = Callable[[EntryInfo], bool]


def accept_all(_entry: EntryInfo) -> bool:
    """Predicate that accepts every entry."""
    return True


class FilterBuilder:
    """Collects sub-filter criteria and builds their conjunction."""

    def __init__(self) -> None:
        self._criteria: list[Predicate] = []

    def __len__(self) -> int:
        return len(self._criteria)

    def with_modified_before(self, cutoff: datetime) -> FilterBuilder:
        """Keep entries last modified at or before ``cutoff``."""
        self._criteria.append(lambda entry: entry.last_modified <= cutoff)
        return self

    def with_accessed_before(self, cutoff: datetime) -> FilterBuilder:
        """Keep entries last accessed at or before ``cutoff``."""
        self._criteria.append(lambda entry: entry.last_accessed <= cutoff)
        return self

    def with_file_size(self, threshold_bytes: int) -> FilterBuilder:
        """Keep files of at least ``threshold_bytes``; directories pass."""
        self._criteria.append(
            lambda entry: entry.is_directory or entry.file_size >= threshold_bytes
        )
        return self

    def with_directory_size(self, threshold_bytes: int) -> FilterBuilder:
        """Keep directories of at least ``threshold_bytes``; files pass."""
        self._criteria.append(
            lambda entry: not entry.is_directory or entry.size >= threshold_bytes
        )
        return self

    def with_include_files(self, include_files: bool) -> FilterBuilder:
        """Exclude files entirely unless ``include_files`` is set."""
        if not include_files:
            self._criteria.append(lambda entry: entry.is_directory)
        return self

    def build(self) -> Predicate:
        """Return a predicate that is True when every criterion holds.

        The criteria are snapshotted, so later builder calls do not
        change an already-built predicate.
        """
        criteria = tuple(self._criteria)
        if not criteria:
            return accept_all

        def predicate(entry: EntryInfo) -> bool:
            return all(criterion(entry) for criterion in criteria)

        return predicate


def compile_filter(options: ScanOptions | None, now: datetime | None = None) -> Predicate:
    """Compile scan options into an entry-inclusion predicate.

    Args:
        options: Scan options; None means no filtering.
        now: Reference time for relative age cutoffs (defaults to now, UTC).

    Returns:
        Predicate returning True for entries to keep.
    """
    if options is None:
        return accept_all

    builder = FilterBuilder()
    age = options.age_filter

    modified_cutoff = age.modified_cutoff(now)
    if modified_cutoff is not None:
        builder.with_modified_before(modified_cutoff)

    accessed_cutoff = age.accessed_cutoff(now)
    if accessed_cutoff is not None:
        builder.with_accessed_before(accessed_cutoff)

    if options.include_files:
        if options.file_size_filter.is_active:
            builder.with_file_size(options.file_size_filter.threshold_bytes)
    else:
        builder.with_include_files(False)

    if options.directory_size_filter.is_active:
        builder.with_directory_size(options.directory_size_filter.threshold_bytes)

    logger.debug("Compiled scan filter with %d criteria", len(builder))
    return builder.build()
