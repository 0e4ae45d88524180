"""Logger setup shared by the CLI, the web app and the sync jobs.

Modules ask for ``logging.getLogger("gamenight.<area>")``; everything
hangs off the ``gamenight`` logger configured here.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

__all__ = ["LOG_FORMAT", "logger", "setup_logging"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("gamenight")


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: int | str = logging.INFO, log_file: Path | None = None) -> None:
    """Attach console (and optionally file) handlers to the app logger.

    Calling it again only adjusts the console level.

    Args:
        level: Numeric level or a name such as ``"debug"``; unknown names
            fall back to INFO.
        log_file: When given, a full DEBUG log is appended there as well.
    """
    numeric = _resolve_level(level)
    logger.setLevel(numeric)

    if logger.handlers:
        for handler in logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(numeric)
        return

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        to_file = logging.FileHandler(log_file, encoding="utf-8")
        to_file.setLevel(logging.DEBUG)
        to_file.setFormatter(formatter)
        logger.addHandler(to_file)
        # the file handler needs DEBUG records to reach it
        logger.setLevel(min(numeric, logging.DEBUG))
