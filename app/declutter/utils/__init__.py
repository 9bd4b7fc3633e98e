"""Utility modules for declutter.

This module exports commonly used utility functions.
"""

from declutter.utils.formatting import (
    console,
    err_console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from declutter.utils.tree import is_nested_path, normalize_path, top_level_items

__all__ = [
    "console",
    "err_console",
    "format_size",
    "is_nested_path",
    "normalize_path",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "top_level_items",
]
