"""Small JSON document helpers used for on-disk settings and saved views.

Reads never raise: a missing, unreadable or corrupt document yields the
caller's fallback. Writes go through a temp file so readers only ever see
a complete document.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

__all__ = ["load_json", "save_json"]

logger = logging.getLogger("gamenight.json_utils")


def load_json(path: Path, default: Any = None) -> Any:
    """Return the parsed document at ``path``, or ``default`` ({} if None)."""
    fallback = {} if default is None else default
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return fallback
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return fallback
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring corrupt JSON in %s: %s", path, exc)
        return fallback


def save_json(path: Path, data: Any) -> bool:
    """Write ``data`` to ``path`` as pretty-printed UTF-8 JSON.

    Returns:
        False when the data is not serializable or the disk write fails.
    """
    try:
        text = json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        logger.error("Refusing to save %s: %s", path, exc)
        return False

    staging = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        staging.write_text(text + "\n", encoding="utf-8")
        staging.replace(path)
    except OSError as exc:
        logger.error("Failed to save %s: %s", path, exc)
        return False
    return True
