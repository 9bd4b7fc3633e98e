"""CLI package for declutter.

This package contains the Typer application and all subcommands.
"""

from declutter.cli.main import app

__all__ = ["app"]
