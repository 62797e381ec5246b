"""User configuration for the editor.

Configuration is a small JSON object stored in the user's config
directory. Every key is optional; anything missing, unreadable or
invalid falls back to the built-in default with a logged warning, so a
broken config file never keeps the editor from starting.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TILDE_CONFIG"
LOG_LEVEL_ENV_VAR = "TILDE_LOG_LEVEL"

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class EditorConfig:
    quit_times: int = EditorConstants.DEFAULT_QUIT_TIMES
    message_duration: float = EditorConstants.DEFAULT_MESSAGE_DURATION
    log_level: str = "WARNING"
    log_file: Optional[str] = None  # Default: tilde.log in the user log directory


def default_config_path() -> Path:
    """Path of the config file, honouring ``TILDE_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path(platformdirs.user_config_dir(EditorConstants.NAME)) / "config.json"


def validate_setting(key: str, value: Any) -> bool:
    """Check a single config value.

    Args:
        key: Setting name.
        value: Value read from the config file.

    Returns:
        True if the value can be used, False otherwise.
    """
    if key == 'quit_times':
        # bool is an int subclass but never a sensible count
        return isinstance(value, int) and not isinstance(value, bool) and value >= 1
    if key == 'message_duration':
        return (isinstance(value, (int, float)) and not isinstance(value, bool)
                and value >= 0)
    if key == 'log_level':
        return isinstance(value, str) and value.upper() in _LOG_LEVELS
    if key == 'log_file':
        return value is None or isinstance(value, str)
    return False


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config from {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Config file {path} has invalid format (not an object), ignoring")
        return {}
    return data


def load_config(path: Optional[Path] = None) -> EditorConfig:
    """Load the configuration, falling back to defaults key by key."""
    if path is None:
        path = default_config_path()

    config = EditorConfig()
    known = {f.name for f in fields(EditorConfig)}
    for key, value in _read_config_file(Path(path)).items():
        if key not in known:
            logger.warning(f"Ignoring unknown config key {key!r}")
            continue
        if not validate_setting(key, value):
            logger.warning(f"Ignoring invalid value {value!r} for config key {key!r}")
            continue
        setattr(config, key, value)

    level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if level:
        if validate_setting('log_level', level):
            config.log_level = level
        else:
            logger.warning(f"Ignoring invalid {LOG_LEVEL_ENV_VAR}={level!r}")

    config.log_level = config.log_level.upper()
    return config
