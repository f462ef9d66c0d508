"""Environment-driven settings.

Precedence for every setting:
  1. explicit argument (CLI option or function parameter)
  2. environment variable
  3. bundled default
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

CONTENT_DIR_ENV = "LOCALEDOCS_CONTENT_DIR"
LOG_LEVEL_ENV = "LOCALEDOCS_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def content_dir(explicit: Path | str | None = None) -> Path | None:
    """Return a content directory override, or None to use bundled content."""
    if explicit:
        return Path(explicit)
    env = os.getenv(CONTENT_DIR_ENV)
    if env:
        return Path(env)
    return None


def log_level(verbose: bool = False) -> int:
    """Return the logging level for the CLI."""
    if verbose:
        return logging.DEBUG
    name = (os.getenv(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level
    return logging.WARNING
