"""Settings resolution for the ne CLI.

Each setting is resolved with the following precedence (highest to lowest):
1. CLI argument
2. Environment variable (NE_<KEY>)
3. Project config file (.ne/config.yaml in the working directory)
4. Built-in default

Settings are resolved once when a command starts and passed down
explicitly; nothing below the CLI reads the environment.

Usage:
    from ne_cli.config import load_settings

    settings = load_settings(data_dir=cli_data_dir)
    settings.data_dir      # Path to the Natural Earth shapefile tree
    settings.catalog_path  # Path to ne.csv
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ne_cli.constants import CATALOG_FILENAME, DEFAULT_DATA_DIR
from ne_cli.errors import ConfigInvalidStructureError, ConfigParseError

# Keys accepted in .ne/config.yaml
KNOWN_SETTINGS: frozenset[str] = frozenset({"data_dir", "catalog"})

# Config directory and file name (relative to the working directory)
CONFIG_DIRNAME = ".ne"
CONFIG_FILENAME = "config.yaml"


@dataclass(frozen=True)
class Settings:
    """Settings in effect for one run.

    Attributes:
        data_dir: Root of the Natural Earth data tree ({scale}m_{theme}/...).
        catalog_path: Catalog CSV describing the available layers.
    """

    data_dir: Path
    catalog_path: Path


def get_config_path(cwd: Path) -> Path:
    """Get the path to the project config file.

    Args:
        cwd: Working directory the command runs in.

    Returns:
        Path to .ne/config.yaml
    """
    return cwd / CONFIG_DIRNAME / CONFIG_FILENAME


def load_config(cwd: Path) -> dict[str, Any]:
    """Load configuration from .ne/config.yaml.

    Args:
        cwd: Working directory the command runs in.

    Returns:
        Config dictionary. Returns empty dict if file doesn't exist or is empty.

    Raises:
        ConfigParseError: If the file is not valid YAML.
        ConfigInvalidStructureError: If the document is not a mapping or
            has keys other than KNOWN_SETTINGS.
    """
    config_file = get_config_path(cwd)

    if not config_file.exists():
        return {}

    content = config_file.read_text()
    if not content.strip():
        return {}

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigParseError(str(config_file), str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigInvalidStructureError(
            str(config_file), f"expected a mapping, got {type(data).__name__}"
        )

    unknown = sorted(str(key) for key in data if key not in KNOWN_SETTINGS)
    if unknown:
        raise ConfigInvalidStructureError(
            str(config_file), f"unknown setting(s): {', '.join(unknown)}"
        )
    return data


def _get_env_var_name(key: str) -> str:
    """Convert a setting key to environment variable name.

    Args:
        key: Setting key (e.g., "data_dir")

    Returns:
        Environment variable name (e.g., "NE_DATA_DIR")
    """
    return f"NE_{key.upper()}"


def get_setting(
    key: str,
    cli_value: Any | None = None,
    config: dict[str, Any] | None = None,
    default: Any | None = None,
) -> Any | None:
    """Resolve a setting with full precedence.

    Args:
        key: Setting key (e.g., "data_dir", "catalog")
        cli_value: Value passed via CLI argument (highest precedence)
        config: Loaded project config
        default: Built-in default (lowest precedence)

    Returns:
        Resolved value, or the default if not set at any level.
    """
    if cli_value is not None:
        return cli_value

    env_value = os.environ.get(_get_env_var_name(key))
    if env_value is not None:
        return env_value

    if config and config.get(key) is not None:
        return config[key]

    return default


def load_settings(
    cwd: Path | None = None,
    *,
    data_dir: str | None = None,
    catalog: str | None = None,
) -> Settings:
    """Resolve all settings for a run.

    Relative paths from the config file or defaults are resolved against
    the working directory.

    Args:
        cwd: Working directory (default: current working directory).
        data_dir: --data-dir CLI value, if given.
        catalog: --catalog CLI value, if given.

    Returns:
        Frozen Settings for the run.
    """
    base = cwd if cwd is not None else Path.cwd()
    config = load_config(base)

    resolved_data_dir = get_setting("data_dir", data_dir, config, DEFAULT_DATA_DIR)
    resolved_catalog = get_setting("catalog", catalog, config, CATALOG_FILENAME)

    return Settings(
        data_dir=base / Path(str(resolved_data_dir)).expanduser(),
        catalog_path=base / Path(str(resolved_catalog)).expanduser(),
    )
