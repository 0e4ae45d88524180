# gamenight/services/dashboard.py

"""Dashboard state and its single rebuild path.

The dashboard holds the raw rows fetched from the store, the player
selection, the filter service, both annotation registers and the user
configuration. The ownership join is rebuilt on demand whenever the raw
rows or the selection changed since the last build; filtering and sorting
run on every read.

Manual refreshes and store change notifications share ``refresh()``.
Each fetch is tagged with a sequence number, and a response older than
the one already applied for the same entity is dropped, so overlapping
refreshes can never roll the view back.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from gamenight.core.db import StoreError
from gamenight.core.game import Game, GameWithOwnership
from gamenight.core.local_store import LocalStore
from gamenight.core.player import Player, PlayerGame
from gamenight.core.sync_log import SyncLog
from gamenight.services.annotation_registers import ExclusionRegister, ShortlistRegister
from gamenight.services.data_access import DataAccess
from gamenight.services.filter_constants import AppTab, SortKey
from gamenight.services.filter_service import FilterService
from gamenight.services.ownership_service import build_games_with_ownership
from gamenight.services.sort_service import sort_games
from gamenight.services.tab_config import AppConfig, load_app_config, save_app_config
from gamenight.services.theme_service import ThemeService

logger = logging.getLogger("gamenight.dashboard")

__all__ = ["Dashboard", "LibraryStats", "PlayerStats", "SyncStatus"]


@dataclass
class PlayerStats:
    player: Player
    owned_count: int = 0
    total_playtime_hours: float = 0.0


@dataclass
class LibraryStats:
    """Headline numbers for the current selection.

    Attributes:
        total_games: Catalog entries not hidden by deprecated servers.
        owned_by_all: Of those, games every selected player owns.
        free_games: Of those, free games.
        players: Per selected player library size and playtime.
    """

    total_games: int = 0
    owned_by_all: int = 0
    free_games: int = 0
    players: list[PlayerStats] = field(default_factory=list)


@dataclass
class SyncStatus:
    latest: SyncLog | None = None
    latest_successful: SyncLog | None = None

    @property
    def failed(self) -> bool:
        return self.latest is not None and self.latest.status == "error"


class Dashboard:
    """Explicit data-flow graph behind the game night dashboard."""

    def __init__(
        self,
        data: DataAccess,
        local_store: LocalStore,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Loads the client-local state and applies the configured defaults.

        Args:
            data: Store read access.
            local_store: Client-local key-value store.
            today: Date provider for release-recency filtering.
        """
        self.data = data
        self.local_store = local_store
        self.shortlist = ShortlistRegister(local_store)
        self.exclusions = ExclusionRegister(local_store)
        self.theme = ThemeService(local_store)
        self.config: AppConfig = load_app_config(local_store)
        self.filters = FilterService(self.shortlist, self.exclusions, today)

        self.tab = AppTab.ALL
        self.filters.apply_tab_defaults(self.config.resolve_tab(self.tab))

        self.players: list[Player] = []
        self.games: list[Game] = []
        self.player_games: list[PlayerGame] = []
        self.sync_status = SyncStatus()
        self.error: str | None = None
        self.loading = False

        self._lock = threading.RLock()
        self._request_seq = 0
        self._applied_seq: dict[str, int] = {}
        self._selection_initialized = False
        self._unsubscribe: Callable[[], None] | None = None

        self._dirty = True
        self._built_for: tuple[str, ...] = ()
        self._enriched: list[GameWithOwnership] = []

    # ── Data refresh ─────────────────────────────────────

    def start(self) -> None:
        """Initial fetch plus a live subscription to store changes."""
        self.refresh()
        if self._unsubscribe is None:
            self._unsubscribe = self.data.subscribe_changes(self._on_store_change)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_store_change(self, table: str, event: str) -> None:
        logger.debug("Store change on %s (%s), refreshing", table, event)
        self.refresh()

    def refresh(self) -> bool:
        """Re-fetches every entity and marks the view for rebuild.

        A failed fetch keeps the previous rows for that entity and records
        the error; the other entities are still refreshed.

        Returns:
            True if every fetch succeeded.
        """
        with self._lock:
            self._request_seq += 1
            seq = self._request_seq
            self.loading = True

        fetches: tuple[tuple[str, Callable[[], Any]], ...] = (
            ("players", self.data.fetch_players),
            ("games", self.data.fetch_games),
            ("player_games", self.data.fetch_player_games),
            ("sync_status", self._fetch_sync_status),
        )
        errors: list[str] = []
        for entity, fetch in fetches:
            try:
                value = fetch()
            except StoreError as exc:
                logger.warning("Could not fetch %s: %s", entity, exc)
                errors.append(f"{entity}: {exc}")
                continue
            self.apply_response(entity, seq, value)

        with self._lock:
            if seq == self._request_seq:
                self.loading = False
                self.error = "; ".join(errors) or None
        return not errors

    def _fetch_sync_status(self) -> SyncStatus:
        return SyncStatus(self.data.fetch_latest_sync(), self.data.fetch_latest_successful_sync())

    def apply_response(self, entity: str, seq: int, value: Any) -> bool:
        """Applies one fetched entity unless a newer response already landed.

        Args:
            entity: players, games, player_games or sync_status.
            seq: Sequence number of the refresh that fetched it.
            value: The fetched value.

        Returns:
            True if the value was applied.
        """
        with self._lock:
            if seq < self._applied_seq.get(entity, 0):
                logger.debug("Dropping stale %s response #%d", entity, seq)
                return False
            self._applied_seq[entity] = seq
            setattr(self, entity, value)
            if entity == "players":
                self._init_selection()
            if entity != "sync_status":
                self._dirty = True
            return True

    def _init_selection(self) -> None:
        """Selects the primary players the first time players arrive."""
        if self._selection_initialized or not self.players:
            return
        self._selection_initialized = True
        if not self.filters.state.selected_players:
            self.filters.set_selected_players(p.id for p in self.players if p.is_primary)

    # ── Selection, tabs, annotations ─────────────────────

    @property
    def selected_player_ids(self) -> tuple[str, ...]:
        return self.filters.state.selected_players

    def select_players(self, player_ids: list[str]) -> None:
        self._selection_initialized = True
        self.filters.set_selected_players(player_ids)

    def toggle_player(self, player_id: str) -> None:
        self._selection_initialized = True
        self.filters.toggle_player(player_id)

    def set_tab(self, tab: AppTab, apply_defaults: bool = True) -> None:
        """Switches tab and loads its configured defaults."""
        self.tab = tab
        if apply_defaults:
            self.filters.apply_tab_defaults(self.config.resolve_tab(tab))

    def update_config(self, config: AppConfig) -> None:
        """Persists a new configuration and applies it to the active tab."""
        self.config = config
        save_app_config(self.local_store, config)
        self.filters.apply_tab_defaults(config.resolve_tab(self.tab))

    def toggle_shortlist(self, game_id: str) -> bool:
        return self.shortlist.toggle(game_id)

    def exclude_game(self, game_id: str, reason: str, excluded_by: str) -> None:
        self.exclusions.exclude(game_id, reason, excluded_by)

    def restore_game(self, game_id: str) -> bool:
        return self.exclusions.restore(game_id)

    # ── Derived views ────────────────────────────────────

    def enriched(self) -> list[GameWithOwnership]:
        """Ownership views for every game, rebuilt only when inputs changed."""
        with self._lock:
            selection = self.selected_player_ids
            if self._dirty or selection != self._built_for:
                self._enriched = build_games_with_ownership(
                    self.games, self.player_games, self.players, selection
                )
                self._built_for = selection
                self._dirty = False
                logger.debug("Rebuilt %d ownership view(s) for %d player(s)", len(self._enriched), len(selection))
            return self._enriched

    def visible_games(self) -> list[GameWithOwnership]:
        """Filtered and sorted games of the active tab."""
        return self.filters.sorted_view(self.enriched(), self.tab)

    def available_tags(self) -> list[str]:
        return self.filters.available_tags(self.enriched(), self.tab)

    def tab_counts(self) -> dict[AppTab, int]:
        return self.filters.tab_counts(self.enriched())

    def quick_picks(self, limit: int = 5) -> list[GameWithOwnership]:
        """Top recommended games with enough reviews to trust the rating.

        Draws from what the "all" tab currently shows.
        """
        candidates = [
            entry
            for entry in self.filters.apply(self.enriched(), AppTab.ALL)
            if (entry.game.steam_review_count or 0) >= self.config.min_review_count
        ]
        ranked = sort_games(candidates, [SortKey.RECOMMENDATION], len(self.selected_player_ids))
        return ranked[:limit]

    def coming_soon(self, limit: int = 6) -> list[GameWithOwnership]:
        """Unreleased games, soonest first, undated last."""
        upcoming = [
            entry
            for entry in self.enriched()
            if entry.game.is_coming_soon
            and not entry.game.servers_deprecated
            and entry.game.id not in self.exclusions
        ]
        upcoming.sort(key=lambda e: (e.game.release_date is None, e.game.release_date or ""))
        return upcoming[:limit]

    def library_stats(self) -> LibraryStats:
        """Counts over non-deprecated games plus per-player library totals."""
        eligible = [e for e in self.enriched() if not e.game.servers_deprecated]
        stats = LibraryStats(
            total_games=len(eligible),
            owned_by_all=sum(1 for e in eligible if e.all_selected_own),
            free_games=sum(1 for e in eligible if e.game.is_free),
        )

        selected = set(self.selected_player_ids)
        for player in self.players:
            if player.id not in selected:
                continue
            edges = [pg for pg in self.player_games if pg.player_id == player.id]
            stats.players.append(
                PlayerStats(
                    player=player,
                    owned_count=len(edges),
                    total_playtime_hours=round(sum(pg.playtime_hours for pg in edges), 2),
                )
            )
        return stats
