"""Where declutter keeps its files.

Configuration lives under ``$XDG_CONFIG_HOME/declutter`` (``~/.config``)
and the deletion history under ``$XDG_STATE_HOME/declutter``
(``~/.local/state``). Both directories are also refused as deletion
targets by the safety validator.
"""

import os
from pathlib import Path

APP_NAME = "declutter"

_XDG_DEFAULTS: dict[str, str] = {
    "XDG_CONFIG_HOME": ".config",
    "XDG_STATE_HOME": ".local/state",
}


def _app_dir(env_var: str) -> Path:
    """Resolve the application subdirectory of an XDG base directory.

    An unset or empty variable falls back to the default under ``$HOME``.
    """
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home() / _XDG_DEFAULTS[env_var]
    return root / APP_NAME


def get_config_dir() -> Path:
    """Directory holding config.toml and theme.toml."""
    return _app_dir("XDG_CONFIG_HOME")


def get_state_dir() -> Path:
    """Directory holding the deletion history."""
    return _app_dir("XDG_STATE_HOME")


def get_config_path() -> Path:
    """Scan and scorer defaults, ``config.toml``."""
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Optional color overrides, ``theme.toml``."""
    return get_config_dir() / "theme.toml"


def get_history_path() -> Path:
    """Append-only deletion log, ``history.jsonl``."""
    return get_state_dir() / "history.jsonl"


def _ensure_dir(path: Path, label: str) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {label} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {label} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if needed.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_state_dir() -> Path:
    """Create the state directory if needed.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")
