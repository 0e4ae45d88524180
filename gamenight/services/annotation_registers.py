# gamenight/services/annotation_registers.py

"""Client-local shortlist and exclusion registers.

Both map a game ID to a small annotation and live in the LocalStore under
their own namespace. They are loaded once on construction and written
through on every mutation. They are never sent to the canonical store.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from gamenight.core.local_store import LocalStore

logger = logging.getLogger("gamenight.registers")

__all__ = [
    "EXCLUDED_NAMESPACE",
    "ExcludedEntry",
    "ExclusionRegister",
    "SHORTLIST_NAMESPACE",
    "ShortlistEntry",
    "ShortlistRegister",
]

SHORTLIST_NAMESPACE = "shortlist"
EXCLUDED_NAMESPACE = "excluded"


@dataclass
class ShortlistEntry:
    """Players who championed a game and why."""

    players: list[str] = field(default_factory=list)
    reason: str = ""


@dataclass
class ExcludedEntry:
    """Why a game was excluded and by whom."""

    reason: str = ""
    excluded_by: str = ""


class _Register:
    """Shared load/persist logic for a namespaced game-ID map."""

    namespace: str = ""

    def __init__(self, store: LocalStore) -> None:
        self._store = store
        raw = store.get(self.namespace, default={})
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed %s register", self.namespace)
            raw = {}

        self._entries: dict[str, Any] = {}
        for game_id, value in raw.items():
            entry = self._decode(value)
            if entry is None:
                logger.debug("Dropping malformed %s entry for %s", self.namespace, game_id)
                continue
            self._entries[str(game_id)] = entry

    def _decode(self, value: Any) -> Any:
        raise NotImplementedError

    def _encode(self, entry: Any) -> dict[str, Any]:
        raise NotImplementedError

    def _persist(self) -> None:
        self._store.set(self.namespace, {gid: self._encode(e) for gid, e in self._entries.items()})

    def __contains__(self, game_id: object) -> bool:
        return game_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def ids(self) -> frozenset[str]:
        """IDs of all annotated games."""
        return frozenset(self._entries)

    def get(self, game_id: str) -> Any:
        """Returns the entry for a game, or None."""
        return self._entries.get(game_id)


class ShortlistRegister(_Register):
    """Shortlisted games with their champions and reasons."""

    namespace = SHORTLIST_NAMESPACE

    def _decode(self, value: Any) -> ShortlistEntry | None:
        if not isinstance(value, dict):
            return None
        players = value.get("players", [])
        if not isinstance(players, list):
            players = []
        reason = value.get("reason", "")
        return ShortlistEntry(
            players=[str(p) for p in dict.fromkeys(players)],
            reason=reason if isinstance(reason, str) else "",
        )

    def _encode(self, entry: ShortlistEntry) -> dict[str, Any]:
        return asdict(entry)

    def toggle(self, game_id: str) -> bool:
        """Adds or removes a game.

        Returns:
            True if the game is shortlisted afterwards.
        """
        if game_id in self._entries:
            del self._entries[game_id]
            shortlisted = False
        else:
            self._entries[game_id] = ShortlistEntry()
            shortlisted = True
        self._persist()
        return shortlisted

    def toggle_player(self, game_id: str, player_name: str) -> None:
        """Adds or removes a champion; no-op for games not on the shortlist."""
        entry = self._entries.get(game_id)
        if entry is None:
            return
        if player_name in entry.players:
            entry.players.remove(player_name)
        else:
            entry.players.append(player_name)
        self._persist()

    def set_reason(self, game_id: str, reason: str) -> None:
        """Sets the free-text reason; no-op for games not on the shortlist."""
        entry = self._entries.get(game_id)
        if entry is None:
            return
        entry.reason = reason
        self._persist()


class ExclusionRegister(_Register):
    """Games hidden from every tab except "excluded"."""

    namespace = EXCLUDED_NAMESPACE

    def _decode(self, value: Any) -> ExcludedEntry | None:
        if not isinstance(value, dict):
            return None
        reason = value.get("reason", "")
        excluded_by = value.get("excludedBy", value.get("excluded_by", ""))
        return ExcludedEntry(
            reason=reason if isinstance(reason, str) else "",
            excluded_by=excluded_by if isinstance(excluded_by, str) else "",
        )

    def _encode(self, entry: ExcludedEntry) -> dict[str, Any]:
        return {"reason": entry.reason, "excludedBy": entry.excluded_by}

    def exclude(self, game_id: str, reason: str, excluded_by: str) -> None:
        """Excludes a game, replacing any previous annotation."""
        self._entries[game_id] = ExcludedEntry(reason=reason, excluded_by=excluded_by)
        self._persist()

    def restore(self, game_id: str) -> bool:
        """Removes a game from the register.

        Returns:
            True if the game was excluded.
        """
        if self._entries.pop(game_id, None) is None:
            return False
        self._persist()
        return True
