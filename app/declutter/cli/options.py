"""Shared option handling for CLI commands.

Merges command-line filter flags over the defaults stored in the
configuration file, so every command builds its ScanOptions and
ScorerOptions the same way.
"""

from pathlib import Path

import typer
from pydantic import ValidationError

from declutter.core.config import ConfigError, DeclutterConfig, load_config_or_default
from declutter.models.options import AgeFilter, EntrySizeFilter, ScanOptions, ScorerOptions
from declutter.utils.formatting import print_error


def load_settings() -> DeclutterConfig:
    """Load the configuration file, exiting with an error message if it is invalid.

    Returns:
        Loaded configuration, or defaults when no file exists.

    Raises:
        typer.Exit: If the configuration file cannot be parsed or validated.
    """
    try:
        return load_config_or_default()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def build_scan_options(
    paths: list[Path],
    base: ScanOptions,
    *,
    include_files: bool | None = None,
    min_file_mb: int | None = None,
    min_dir_mb: int | None = None,
    older_than_months: int | None = None,
) -> ScanOptions:
    """Overlay command-line flags on configured scan options.

    A flag left at None keeps the configured value. Setting a size or
    age flag switches the corresponding sub-filter on; a value of 0
    switches it off.

    Args:
        paths: Root directories to scan.
        base: Configured scan options.
        include_files: Whether files are listed.
        min_file_mb: Minimum file size in MB.
        min_dir_mb: Minimum directory size in MB.
        older_than_months: Keep only entries not modified for this many months.

    Returns:
        Effective scan options.

    Raises:
        typer.Exit: If the resulting options are invalid.
    """
    update: dict[str, object] = {"directories_to_scan": tuple(str(p) for p in paths)}
    if include_files is not None:
        update["include_files"] = include_files
    if min_file_mb is not None:
        update["file_size_filter"] = EntrySizeFilter(
            size_threshold_mb=min_file_mb, use_size_filter=min_file_mb > 0
        )
    if min_dir_mb is not None:
        update["directory_size_filter"] = EntrySizeFilter(
            size_threshold_mb=min_dir_mb, use_size_filter=min_dir_mb > 0
        )
    if older_than_months is not None:
        update["age_filter"] = base.age_filter.model_copy(
            update={
                "use_modified_date": older_than_months > 0,
                "modified_before": None,
                "months_modified_value": older_than_months,
            }
        )

    try:
        # Re-validate so the merged values go through the same checks as the file
        return ScanOptions.model_validate({**base.model_dump(), **_dump(update)})
    except ValidationError as e:
        print_error(f"Invalid scan options: {e}")
        raise typer.Exit(code=1) from e


def build_scorer_options(
    base: ScorerOptions,
    *,
    top: float | None = None,
    weight_age: float | None = None,
    weight_size: float | None = None,
) -> ScorerOptions:
    """Overlay command-line flags on configured scorer options.

    Raises:
        typer.Exit: If the resulting options are invalid.
    """
    update: dict[str, float] = {}
    if top is not None:
        update["top_percentage"] = top
    if weight_age is not None:
        update["weight_age"] = weight_age
    if weight_size is not None:
        update["weight_size"] = weight_size

    try:
        return ScorerOptions.model_validate({**base.model_dump(), **update})
    except ValidationError as e:
        print_error(f"Invalid scorer options: {e}")
        raise typer.Exit(code=1) from e


def _dump(update: dict[str, object]) -> dict[str, object]:
    return {
        key: value.model_dump() if isinstance(value, AgeFilter | EntrySizeFilter) else value
        for key, value in update.items()
    }
