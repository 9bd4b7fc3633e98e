"""Persistent scan and scorer configuration.

The configuration file holds default ScanOptions and ScorerOptions so
CLI invocations do not need to repeat filter flags. It is stored in
~/.config/declutter/config.toml:

    [scan]
    include_files = true

    [scan.file_size_filter]
    use_size_filter = true
    size_threshold_mb = 50

    [scorer]
    weight_age = 0.6
    weight_size = 0.4
    top_percentage = 0.25
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from declutter.core.paths import get_config_path
from declutter.models.options import ScanOptions, ScorerOptions

logger = logging.getLogger(__name__)


class DeclutterConfig(BaseModel):
    """Top-level configuration file model.

    Attributes:
        scan: Default scan options (roots and filters).
        scorer: Default scorer weights and selection cut-off.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    scan: ScanOptions = Field(default_factory=ScanOptions)
    scorer: ScorerOptions = Field(default_factory=ScorerOptions)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file cannot be parsed."""


def load_config(path: Path | None = None) -> DeclutterConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated DeclutterConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return DeclutterConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> DeclutterConfig:
    """Load configuration, falling back to defaults when no file exists.

    Parse and validation errors still propagate.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Loaded or default DeclutterConfig.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file found, using defaults")
        return DeclutterConfig()


def save_config(config: DeclutterConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The configuration to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: DeclutterConfig) -> dict[str, Any]:
    """Convert the configuration to a TOML-serializable dictionary.

    TOML has no null, so unset optional values are omitted.
    """
    return config.model_dump(mode="json", exclude_none=True)
