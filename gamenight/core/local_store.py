"""Client-local persisted key-value state.

Holds the user's shortlist, exclusions, theme and tab configuration in a
single JSON document. The document is read once on construction and every
write goes straight back to disk. A missing or malformed file behaves like
an empty store.
"""

from __future__ import annotations

import copy
import logging
import threading
from pathlib import Path
from typing import Any

from gamenight.utils.json_utils import load_json, save_json

logger = logging.getLogger("gamenight.local_store")

__all__ = ["LocalStore", "STORAGE_PREFIX"]

STORAGE_PREFIX = "gaming-decisions"


class LocalStore:
    """Namespaced JSON key-value store with write-through persistence."""

    def __init__(self, path: Path) -> None:
        """Loads the store from disk.

        Args:
            path: JSON document backing the store.
        """
        self.path = path
        self._lock = threading.Lock()

        data = load_json(path, default={})
        if not isinstance(data, dict):
            logger.warning("Local state in %s is not an object, starting empty", path)
            data = {}
        self._data: dict[str, Any] = data

    @staticmethod
    def key(name: str) -> str:
        """Full storage key for a namespace, e.g. ``gaming-decisions-theme``."""
        return f"{STORAGE_PREFIX}-{name}"

    def get(self, name: str, default: Any = None) -> Any:
        """Returns a deep copy of the stored value, or default."""
        with self._lock:
            if self.key(name) not in self._data:
                return default
            return copy.deepcopy(self._data[self.key(name)])

    def set(self, name: str, value: Any) -> bool:
        """Stores a value and writes the document through to disk.

        Returns:
            True if the write reached disk.
        """
        with self._lock:
            self._data[self.key(name)] = copy.deepcopy(value)
            return save_json(self.path, self._data)

    def remove(self, name: str) -> bool:
        with self._lock:
            if self._data.pop(self.key(name), None) is None:
                return True
            return save_json(self.path, self._data)
