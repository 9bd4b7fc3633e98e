"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from datetime import UTC, datetime

from rich.console import Console

from declutter.core.theme import get_theme

_SIZE_UNITS: tuple[str, ...] = ("B", "KB", "MB", "GB", "TB", "PB")


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int | None) -> str:
    """Format a byte count with binary units.

    Args:
        size_bytes: Number of bytes, or None.

    Returns:
        Human-readable size such as ``"1.5 GB"``; ``"0 B"`` for None or zero.
    """
    if not size_bytes:
        return "0 B"
    size = float(size_bytes)
    for unit in _SIZE_UNITS:
        if abs(size) < 1024 or unit == _SIZE_UNITS[-1]:
            return f"{int(size)} B" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} {_SIZE_UNITS[-1]}"


def format_age(moment: datetime | None, now: datetime | None = None) -> str:
    """Format how long ago ``moment`` was, in the coarsest sensible unit.

    Args:
        moment: Timestamp to describe, or None.
        now: Reference time (defaults to the current UTC time).

    Returns:
        Text such as ``"3 days"``, ``"5 months"``, or ``"-"`` when unknown.
    """
    if moment is None:
        return "-"
    delta = (now or datetime.now(UTC)) - moment
    days = max(delta.days, 0)
    if days >= 730:
        return f"{days // 365} years"
    if days >= 60:
        return f"{days // 30} months"
    if days == 1:
        return "1 day"
    return f"{days} days"


def size_style(size_bytes: int) -> str:
    """Pick a theme style name by size bucket (>= 1 GB, >= 100 MB, smaller)."""
    if size_bytes >= 1024**3:
        return "size_large"
    if size_bytes >= 100 * 1024**2:
        return "size_medium"
    return "size_small"


def score_style(score: float) -> str:
    """Pick a theme style name for a [0, 1] candidate score."""
    if score >= 0.75:
        return "score_high"
    if score >= 0.5:
        return "score_medium"
    return "score_low"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
