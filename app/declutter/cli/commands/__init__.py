"""CLI commands for declutter.

This package contains all subcommand implementations.
"""

from declutter.cli.commands import clean, config, history, reveal, scan, suggest

__all__ = ["clean", "config", "history", "reveal", "scan", "suggest"]
