"""Filesystem scanning module.

This module provides the entry filter pipeline and the directory scanner
that builds lazily expanded Node trees.
"""

from declutter.scanning.filters import EntryInfo, FilterBuilder, Predicate, compile_filter
from declutter.scanning.scanner import DirectoryScanner, ScanError

__all__ = [
    "DirectoryScanner",
    "EntryInfo",
    "FilterBuilder",
    "Predicate",
    "ScanError",
    "compile_filter",
]
