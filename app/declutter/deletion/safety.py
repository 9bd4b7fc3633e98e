"""Paths that must never be deleted.

This module defines the system folders, user folders, and glob patterns
that are refused by the deletion engine before anything touches the
filesystem. System folders protect their whole subtree; well-known user
folders only protect themselves, so their contents can still be cleaned.
"""

import fnmatch
import os
from pathlib import Path

from declutter.core.paths import get_config_dir, get_state_dir
from declutter.utils.tree import is_nested_path, normalize_path


class UnsafePathError(Exception):
    """Raised when a path is refused by the safety validator."""


# Folders whose every descendant is protected as well.
SYSTEM_DIRECTORIES: list[str] = [
    "/bin",
    "/boot",
    "/dev",
    "/etc",
    "/lib",
    "/lib32",
    "/lib64",
    "/proc",
    "/sbin",
    "/sys",
    "/usr",
    "/var/lib",
    # macOS
    "/System",
    "/Library",
    "/Applications",
]

# Windows folders resolved from the environment, also protecting descendants.
_WINDOWS_FOLDER_VARIABLES: tuple[str, ...] = (
    "SystemRoot",
    "ProgramFiles",
    "ProgramFiles(x86)",
    "CommonProgramFiles",
    "CommonProgramFiles(x86)",
    "ProgramData",
)

# User folders protected only against deletion of the folder itself.
USER_FOLDERS: list[str] = [
    "~",
    "~/Desktop",
    "~/Documents",
    "~/Downloads",
    "~/Music",
    "~/Pictures",
    "~/Videos",
    "~/.config",
    "~/.local",
    "~/.local/share",
    "~/.local/state",
]

# Protected path patterns (glob-style).
# Patterns starting with ~ are expanded to the user's home directory
# before matching.
PROTECTED_PATH_PATTERNS: list[str] = [
    # SSH and security
    "~/.ssh",
    "~/.ssh/*",
    "~/.gnupg",
    "~/.gnupg/*",
    "~/.local/share/keyrings",
    "~/.local/share/keyrings/*",
    # Shell startup files
    "~/.bashrc",
    "~/.profile",
    "~/.zshrc",
]


def _expand_home(pattern: str) -> str:
    if pattern == "~":
        return str(Path.home())
    if pattern.startswith("~/"):
        return os.path.join(str(Path.home()), pattern[2:])
    return pattern


def system_directories() -> list[str]:
    """System folders for the running platform, including Windows ones from the environment."""
    folders = list(SYSTEM_DIRECTORIES)
    for variable in _WINDOWS_FOLDER_VARIABLES:
        value = os.environ.get(variable)
        if value:
            folders.append(value)
    return folders


def app_directories() -> list[str]:
    """Configuration and state folders of declutter itself."""
    return [str(get_config_dir()), str(get_state_dir())]


def is_protected_path(path: str) -> bool:
    """Check if a path matches a protected glob pattern or is a protected user folder.

    Args:
        path: Absolute filesystem path to check.

    Returns:
        True if the path must not be deleted.
    """
    normalized = normalize_path(path)

    for folder in USER_FOLDERS:
        if normalized == normalize_path(_expand_home(folder)):
            return True

    for pattern in PROTECTED_PATH_PATTERNS:
        if fnmatch.fnmatch(normalized, normalize_path(_expand_home(pattern))):
            return True

    for folder in app_directories():
        if normalized == normalize_path(folder) or is_nested_path(normalized, folder):
            return True

    return False


def validate_path(path: str) -> str:
    """Validate that a path is safe to delete.

    Args:
        path: Path to validate; relative paths are resolved against the
            working directory. Symlinks are not followed, since deleting a
            link never touches its target.

    Returns:
        The absolute path.

    Raises:
        UnsafePathError: If the path is empty, a filesystem root, a
            system folder or inside one, or otherwise protected.
    """
    if not path or not path.strip():
        raise UnsafePathError("Path cannot be empty")

    full_path = os.path.abspath(os.path.expanduser(path))

    if os.path.dirname(full_path) == full_path:
        raise UnsafePathError(f"Refusing to delete filesystem root: {full_path}")

    for folder in system_directories():
        if normalize_path(full_path) == normalize_path(folder) or is_nested_path(full_path, folder):
            raise UnsafePathError(
                f"Cannot delete '{path}': it is or resides inside the protected "
                f"system folder '{folder}'"
            )

    if is_protected_path(full_path):
        raise UnsafePathError(f"Cannot delete '{path}': protected path")

    return full_path
