"""Logging setup for the interactive editor.

The editor owns the terminal while it runs, so log records go to a file.
Library use of the package configures nothing.
"""

from __future__ import annotations

import logging
from pathlib import Path

import platformdirs

from .config import EditorConfig
from .constants import EditorConstants

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def default_log_path() -> Path:
    return Path(platformdirs.user_log_dir(EditorConstants.NAME)) / "tilde.log"


def configure_logging(config: EditorConfig) -> logging.Handler:
    """Attach a file handler to the package logger and return it."""
    path = Path(config.log_file) if config.log_file else default_log_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding='utf-8')
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger = logging.getLogger(EditorConstants.NAME)
    package_logger.setLevel(config.log_level)
    package_logger.addHandler(handler)
    return handler
