"""
Configuration loader — reads modreg.yml into the Settings model.

This is the primary entry point for loading registry configuration.
It reads YAML, validates against Pydantic schemas, and returns
typed settings. A registry without a modreg.yml runs on defaults.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from modreg.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "modreg.yml"
CONFIG_FILE_ALT = "modreg.yaml"


class ConfigError(Exception):
    """Raised when registry configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for modreg.yml starting from the given directory, walking up.

    This allows running commands from inside ``modules/`` and still
    finding the registry root.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to the config file, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        for name in (CONFIG_FILE, CONFIG_FILE_ALT):
            candidate = current / name
            if candidate.is_file():
                return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None) -> Settings:
    """Load and validate registry configuration.

    Args:
        path: Path to modreg.yml. None means "no config file": defaults.

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        logger.debug("No %s found, using default settings", CONFIG_FILE)
        return Settings()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading registry config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"{path} is not valid UTF-8: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Settings()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid registry configuration: {e}") from e

    logger.info("Loaded registry config '%s' from %s", settings.registry.name, path)
    return settings


def registry_root(config_path: Path | None) -> Path:
    """Get the registry root directory: the config file's directory, else cwd."""
    if config_path is None:
        return Path.cwd().resolve()
    return config_path.parent.resolve()
