"""Editor settings: built-in defaults merged with an optional user TOML file.

The user file is ``$TEXC_CONFIG`` when set, otherwise
``~/.config/texc/config.toml``. A missing file is normal; a broken one is
logged and the defaults are used.
"""

from __future__ import annotations

import copy
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import toml

from .constants import TEXC_QUIT_TIMES, TEXC_STATUS_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "editor": {
        "quit_times": TEXC_QUIT_TIMES,
        "status_message_timeout": TEXC_STATUS_TIMEOUT,
    },
    "logging": {
        "file": os.path.join(tempfile.gettempdir(), "texc.log"),
        "file_level": "INFO",
        # stderr belongs to the raw-mode terminal while editing.
        "log_to_console": False,
        "console_level": "WARNING",
    },
}


def user_config_path() -> Path:
    env_path = os.environ.get("TEXC_CONFIG")
    if env_path:
        return Path(env_path)
    return Path.home() / ".config" / "texc" / "config.toml"


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into a copy of *base*."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    final_config = copy.deepcopy(DEFAULT_CONFIG)

    config_path = Path(path) if path is not None else user_config_path()
    if not config_path.is_file():
        logger.debug("No user config at %s, using defaults", config_path)
        return final_config

    try:
        user_config = toml.load(config_path)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.error("Could not parse user config '%s': %s. Using defaults.", config_path, exc)
        return final_config

    logger.info("Loaded user config from %s", config_path)
    return deep_merge(final_config, user_config)
