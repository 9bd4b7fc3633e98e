"""Open command implementation.

Reveals a path in the platform file manager.
"""

from pathlib import Path
from typing import Annotated

import typer

from declutter.core.explorer import ExplorerError, open_in_explorer
from declutter.utils.formatting import print_error


def open_path(
    path: Annotated[
        Path,
        typer.Argument(help="File or directory to reveal."),
    ],
) -> None:
    """Reveal a file or directory in the file manager."""
    try:
        open_in_explorer(path)
    except FileNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except ExplorerError as e:
        print_error(f"Could not open file manager: {e}")
        raise typer.Exit(code=1) from e
