from __future__ import annotations

import importlib.metadata

DISTRIBUTION_NAME = "tilde-editor"

# Used when running from a source tree that hasn't been installed
__version__ = "0.1.0"


def get_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        return __version__


def get_version_string() -> str:
    return f"tilde {get_version()}"
