"""Reveal paths in the platform file manager."""

import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


class ExplorerError(Exception):
    """Raised when no file manager could be launched."""


def explorer_command(path: Path, platform: str | None = None) -> list[str]:
    """Build the command that reveals ``path`` on the given platform.

    Files are revealed in their containing directory on Linux, where
    ``xdg-open`` has no "select" mode.

    Args:
        path: Existing file or directory.
        platform: ``sys.platform`` value; defaults to the running platform.

    Returns:
        Command and arguments.
    """
    platform = platform or sys.platform
    if platform == "darwin":
        return ["open", "-R", str(path)] if path.is_file() else ["open", str(path)]
    if platform.startswith("win"):
        return ["explorer", f"/select,{path}"] if path.is_file() else ["explorer", str(path)]
    target = path if path.is_dir() else path.parent
    return ["xdg-open", str(target)]


def open_in_explorer(path: str | os.PathLike[str]) -> None:
    """Open the platform file manager at ``path``.

    Args:
        path: File or directory to reveal.

    Raises:
        FileNotFoundError: If the path no longer exists.
        ExplorerError: If the file manager command is missing or fails.
    """
    target = Path(path).expanduser()
    if not target.exists():
        raise FileNotFoundError(f"Path does not exist: {target}")

    args = explorer_command(target)
    if shutil.which(args[0]) is None:
        raise ExplorerError(f"File manager command not found: {args[0]}")

    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=10.0, check=False)
    except subprocess.TimeoutExpired as e:
        raise ExplorerError(f"{args[0]} did not return within {e.timeout}s") from e
    except OSError as e:
        raise ExplorerError(f"Cannot run {args[0]}: {e}") from e
    # explorer.exe reports exit code 1 even on success
    if result.returncode != 0 and args[0] != "explorer":
        raise ExplorerError(result.stderr.strip() or f"{args[0]} exited with {result.returncode}")
    logger.info("Opened %s in file manager", target)
