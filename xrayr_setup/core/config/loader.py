"""
Configuration loader: reads xrayr-setup.yml into the Settings model.

Configuration is optional: without a file every default in
``core.models.settings`` applies. A file only overrides the keys it
names. The YAML is validated against the Pydantic schema.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from xrayr_setup.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename, looked up in the working directory
CONFIG_FILE = "xrayr-setup.yml"

# Environment variable pointing at an explicit config file
CONFIG_ENV_VAR = "XRAYR_SETUP_CONFIG"


class ConfigError(Exception):
    """Raised when the installer configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Locate a config file without an explicit ``--config``.

    Order: ``$XRAYR_SETUP_CONFIG``, then ``xrayr-setup.yml`` in
    ``start_dir`` (default: cwd).

    Returns:
        Path to the config file, or None if there is none.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    candidate = (start_dir or Path.cwd()) / CONFIG_FILE
    if candidate.is_file():
        return candidate
    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate installer settings.

    Args:
        path: Explicit config path. If None, searches via
            :func:`find_config_file` and falls back to defaults.

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If an explicit file is missing or the content is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using built-in defaults", CONFIG_FILE)
            return Settings()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.debug("Loaded settings from %s", path)
    return settings
