"""Scan and scorer configuration models.

These are caller-owned configuration values validated by pydantic and
frozen, so they cannot change during a scan or a scoring pass.
"""

from __future__ import annotations

import calendar
from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

BYTES_PER_MB = 1024 * 1024


def subtract_months(moment: datetime, months: int) -> datetime:
    """Return ``moment`` shifted back by whole calendar months.

    The day of month is clamped to the length of the target month,
    so March 31 minus one month is the last day of February.

    Args:
        moment: Reference datetime.
        months: Number of months to go back (may be zero).

    Returns:
        Shifted datetime with the same time of day and timezone.
    """
    total = moment.year * 12 + (moment.month - 1) - months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _as_aware(value: datetime | None) -> datetime | None:
    """Interpret naive datetimes as local time and attach the timezone."""
    if value is None or value.tzinfo is not None:
        return value
    return value.astimezone()


class AgeFilter(BaseModel):
    """Age sub-filter settings.

    Each half (modified / accessed) is enabled by its ``use_*`` flag. The
    cutoff is the explicit ``*_before`` date when set, otherwise
    ``now - months``; with neither, that half is disabled.

    Attributes:
        use_modified_date: Apply the last-modified cutoff.
        modified_before: Explicit last-modified cutoff.
        months_modified_value: Relative cutoff in months when no explicit date is set.
        use_accessed_date: Apply the last-accessed cutoff.
        accessed_before: Explicit last-accessed cutoff.
        months_accessed_value: Relative cutoff in months when no explicit date is set.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    use_modified_date: bool = False
    modified_before: datetime | None = None
    months_modified_value: Annotated[int, Field(ge=0, le=1200)] = 1
    use_accessed_date: bool = False
    accessed_before: datetime | None = None
    months_accessed_value: Annotated[int, Field(ge=0, le=1200)] = 1

    @field_validator("modified_before", "accessed_before", mode="after")
    @classmethod
    def make_timezone_aware(cls, v: datetime | None) -> datetime | None:
        """Attach the local timezone to naive cutoff dates."""
        return _as_aware(v)

    @property
    def is_active(self) -> bool:
        """Whether any half of the age filter is switched on."""
        return self.use_modified_date or self.use_accessed_date

    def modified_cutoff(self, now: datetime | None = None) -> datetime | None:
        """Effective last-modified cutoff, or None when the half is disabled."""
        if not self.use_modified_date:
            return None
        return _resolve_cutoff(self.modified_before, self.months_modified_value, now)

    def accessed_cutoff(self, now: datetime | None = None) -> datetime | None:
        """Effective last-accessed cutoff, or None when the half is disabled."""
        if not self.use_accessed_date:
            return None
        return _resolve_cutoff(self.accessed_before, self.months_accessed_value, now)


def _resolve_cutoff(before: datetime | None, months: int, now: datetime | None) -> datetime | None:
    if before is not None:
        return before
    if months > 0:
        return subtract_months(now or datetime.now(UTC), months)
    return None


class EntrySizeFilter(BaseModel):
    """Size sub-filter settings for one entry kind (files or directories).

    Attributes:
        size_threshold_mb: Minimum size in megabytes (binary, 1 MB = 1024 * 1024 bytes).
        use_size_filter: Apply the threshold.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    size_threshold_mb: int = 1
    use_size_filter: bool = False

    @property
    def threshold_bytes(self) -> int:
        """Threshold converted to bytes."""
        return self.size_threshold_mb * BYTES_PER_MB

    @property
    def is_active(self) -> bool:
        """Whether the filter is enabled with a positive threshold."""
        return self.use_size_filter and self.size_threshold_mb > 0


class ScanOptions(BaseModel):
    """Options controlling which roots are scanned and which entries are kept.

    Attributes:
        directories_to_scan: Root directories to scan.
        age_filter: Age sub-filter settings.
        file_size_filter: Size sub-filter applied to files.
        directory_size_filter: Size sub-filter applied to directories.
        include_files: Whether files appear in the tree at all.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    directories_to_scan: tuple[str, ...] = ()
    age_filter: AgeFilter = Field(default_factory=AgeFilter)
    file_size_filter: EntrySizeFilter = Field(default_factory=EntrySizeFilter)
    directory_size_filter: EntrySizeFilter = Field(default_factory=EntrySizeFilter)
    include_files: bool = True

    @field_validator("directories_to_scan", mode="after")
    @classmethod
    def deduplicate_directories(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Drop empty and repeated root paths while keeping order."""
        seen: dict[str, None] = {}
        for path in v:
            if path and path not in seen:
                seen[path] = None
        return tuple(seen)


class ScorerOptions(BaseModel):
    """Weights and cut-off for the selection scorer.

    Attributes:
        weight_age: Relative importance of the age score.
        weight_size: Relative importance of the size score.
        top_percentage: Fraction of ranked candidates to select, in (0, 1].
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    weight_age: Annotated[float, Field(ge=0.0, description="Age weight")] = 0.5
    weight_size: Annotated[float, Field(ge=0.0, description="Size weight")] = 0.5
    top_percentage: Annotated[
        float,
        Field(gt=0.0, le=1.0, description="Fraction of candidates to select (0-1]"),
    ] = 0.4
