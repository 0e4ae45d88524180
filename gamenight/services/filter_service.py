# gamenight/services/filter_service.py

"""Dashboard filter service for Steam Game Night.

Provides FilterState (frozen dataclass) and FilterService, which runs the
predicate chain over ownership views for the active tab, builds the tag
facet and counts games per tab. Sorting is delegated to the sort engine.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from gamenight.core.game import GameWithOwnership
from gamenight.services.filter_constants import (
    ALL_GAME_MODE_KEYS,
    DEFAULT_SORT_KEY,
    GAME_MODE_CATEGORIES,
    PROTON_TIER_RANK,
    RELEASE_DATE_DAYS,
    TAG_FACET_LIMIT,
    AppTab,
    ProtonFilter,
    ReleaseDateFilter,
    SortKey,
)
from gamenight.services.sort_service import (
    SortToggleMode,
    effective_sort_keys,
    normalize_sort_keys,
    sort_games,
    toggle_sort_key,
)
from gamenight.utils.date_utils import days_since

if TYPE_CHECKING:
    from gamenight.services.annotation_registers import ExclusionRegister, ShortlistRegister
    from gamenight.services.tab_config import TabDefaults

logger = logging.getLogger("gamenight.filter_service")

__all__ = ["FilterService", "FilterState"]


@dataclass(frozen=True)
class FilterState:
    """Immutable snapshot of the current filter configuration.

    Attributes:
        selected_players: IDs of the players in tonight's group.
        owned_by_all: Only games every selected player owns (free counts).
        owned_by_none: Only paid games no selected player owns.
        free_only: Only free games.
        on_sale_only: Only discounted or free games.
        shortlisted_only: Only shortlisted games.
        linux_only: Only games with Linux support.
        include_tags: Game must carry at least one of these.
        exclude_tags: Game must carry none of these.
        sort_keys: Sort stack, highest priority first; never empty.
        search_query: Case-insensitive name substring.
        game_modes: Enabled game-mode keys (OR); empty means no restriction.
        proton_filter: Compatibility-tier floor.
        release_date_filter: Release-recency ceiling.
    """

    selected_players: tuple[str, ...] = ()
    owned_by_all: bool = False
    owned_by_none: bool = False
    free_only: bool = False
    on_sale_only: bool = False
    shortlisted_only: bool = False
    linux_only: bool = False
    include_tags: frozenset[str] = frozenset()
    exclude_tags: frozenset[str] = frozenset()
    sort_keys: tuple[SortKey, ...] = (DEFAULT_SORT_KEY,)
    search_query: str = ""
    game_modes: frozenset[str] = frozenset()
    proton_filter: ProtonFilter = ProtonFilter.ALL
    release_date_filter: ReleaseDateFilter = ReleaseDateFilter.ALL


def _casefold_set(values: Iterable[str]) -> set[str]:
    return {value.casefold() for value in values}


def _toggle_tag(tag: str, target: list[str], other: list[str]) -> None:
    """Toggles a tag in target and removes it from other (case-insensitive)."""
    folded = tag.casefold()
    if any(t.casefold() == folded for t in target):
        target[:] = [t for t in target if t.casefold() != folded]
        return
    target.append(tag)
    other[:] = [t for t in other if t.casefold() != folded]


class FilterService:
    """Manages dashboard filter state and applies it to ownership views.

    The service keeps a mutable internal state. ``apply()`` returns a
    filtered copy of the input list and never mutates it.
    """

    def __init__(
        self,
        shortlist: ShortlistRegister | None = None,
        exclusions: ExclusionRegister | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Initializes the FilterService with the default state.

        Args:
            shortlist: Shortlist register; none means nothing is shortlisted.
            exclusions: Exclusion register; none means nothing is excluded.
            today: Date provider for the release-recency filter.
        """
        self.shortlist = shortlist
        self.exclusions = exclusions
        self._today = today
        self._restore(FilterState())

    # ── State ────────────────────────────────────────────

    @property
    def state(self) -> FilterState:
        """Returns the current filter state as a frozen snapshot."""
        return FilterState(
            selected_players=tuple(self._selected_players),
            owned_by_all=self._owned_by_all,
            owned_by_none=self._owned_by_none,
            free_only=self._free_only,
            on_sale_only=self._on_sale_only,
            shortlisted_only=self._shortlisted_only,
            linux_only=self._linux_only,
            include_tags=frozenset(self._include_tags),
            exclude_tags=frozenset(self._exclude_tags),
            sort_keys=tuple(self._sort_keys),
            search_query=self._search_query,
            game_modes=frozenset(self._game_modes),
            proton_filter=self._proton_filter,
            release_date_filter=self._release_date_filter,
        )

    def restore_state(self, state: FilterState) -> None:
        """Replaces the current filter state with the given snapshot.

        Args:
            state: A frozen FilterState to restore from.
        """
        self._restore(state)

    def _restore(self, state: FilterState) -> None:
        self._selected_players: list[str] = list(dict.fromkeys(state.selected_players))
        self._owned_by_all = state.owned_by_all
        self._owned_by_none = state.owned_by_none
        self._free_only = state.free_only
        self._on_sale_only = state.on_sale_only
        self._shortlisted_only = state.shortlisted_only
        self._linux_only = state.linux_only
        self._include_tags: list[str] = sorted(state.include_tags)
        included = _casefold_set(self._include_tags)
        self._exclude_tags: list[str] = sorted(t for t in state.exclude_tags if t.casefold() not in included)
        self._sort_keys: list[SortKey] = normalize_sort_keys(state.sort_keys)
        self._search_query = state.search_query
        self._game_modes: set[str] = set(state.game_modes) & ALL_GAME_MODE_KEYS
        self._proton_filter = state.proton_filter
        self._release_date_filter = state.release_date_filter

    def reset(self, defaults: TabDefaults | None = None) -> None:
        """Resets every filter, keeping the player selection.

        Args:
            defaults: Configured defaults to start from, if any.
        """
        selected = self._selected_players
        self._restore(FilterState(selected_players=tuple(selected)))
        if defaults is not None:
            self.apply_tab_defaults(defaults)

    def apply_tab_defaults(self, defaults: TabDefaults) -> None:
        """Loads a tab's configured defaults into the state.

        The player selection, search text and ownership toggles are kept.
        """
        self._linux_only = defaults.linux_only
        self._release_date_filter = defaults.release_date_filter
        self._proton_filter = defaults.proton_filter
        self._game_modes = set(defaults.game_modes) & ALL_GAME_MODE_KEYS
        self._sort_keys = normalize_sort_keys(defaults.sort_keys)
        self._exclude_tags = list(defaults.exclude_tags)
        folded = _casefold_set(self._exclude_tags)
        self._include_tags = [t for t in self._include_tags if t.casefold() not in folded]

    # ── Mutators ─────────────────────────────────────────

    def set_selected_players(self, player_ids: Iterable[str]) -> None:
        self._selected_players = list(dict.fromkeys(player_ids))

    def toggle_player(self, player_id: str) -> None:
        """Adds or removes a player from the selection."""
        if player_id in self._selected_players:
            self._selected_players.remove(player_id)
        else:
            self._selected_players.append(player_id)

    def toggle_owned_by_all(self) -> None:
        self._owned_by_all = not self._owned_by_all

    def toggle_owned_by_none(self) -> None:
        self._owned_by_none = not self._owned_by_none

    def toggle_free_only(self) -> None:
        self._free_only = not self._free_only

    def toggle_on_sale_only(self) -> None:
        self._on_sale_only = not self._on_sale_only

    def toggle_shortlisted_only(self) -> None:
        self._shortlisted_only = not self._shortlisted_only

    def toggle_linux_only(self) -> None:
        self._linux_only = not self._linux_only

    def toggle_include_tag(self, tag: str) -> None:
        """Toggles an include tag; an included tag leaves the exclude set."""
        _toggle_tag(tag, self._include_tags, self._exclude_tags)

    def toggle_exclude_tag(self, tag: str) -> None:
        """Toggles an exclude tag; an excluded tag leaves the include set."""
        _toggle_tag(tag, self._exclude_tags, self._include_tags)

    def toggle_game_mode(self, mode: str) -> None:
        """Enables or disables a game-mode key."""
        if mode not in ALL_GAME_MODE_KEYS:
            logger.warning("Unknown game mode filter key: %s", mode)
            return
        if mode in self._game_modes:
            self._game_modes.discard(mode)
        else:
            self._game_modes.add(mode)

    def set_proton_filter(self, value: ProtonFilter | str) -> None:
        try:
            self._proton_filter = ProtonFilter(value)
        except ValueError:
            logger.warning("Unknown compatibility filter: %s, falling back to ALL", value)
            self._proton_filter = ProtonFilter.ALL

    def set_release_date_filter(self, value: ReleaseDateFilter | str) -> None:
        try:
            self._release_date_filter = ReleaseDateFilter(value)
        except ValueError:
            logger.warning("Unknown release date filter: %s, falling back to ALL", value)
            self._release_date_filter = ReleaseDateFilter.ALL

    def set_search(self, query: str) -> None:
        self._search_query = query

    def toggle_sort_key(self, key: SortKey | str, mode: SortToggleMode = SortToggleMode.REMOVE) -> None:
        """Applies a click on a sort key to the sort stack."""
        try:
            key = SortKey(key)
        except ValueError:
            logger.warning("Unknown sort key: %s", key)
            return
        self._sort_keys = toggle_sort_key(self._sort_keys, key, mode)

    def set_sort_keys(self, keys: Iterable[SortKey | str]) -> None:
        self._sort_keys = normalize_sort_keys(keys)

    # ── Pipeline ─────────────────────────────────────────

    def apply(self, games: Sequence[GameWithOwnership], tab: AppTab = AppTab.ALL) -> list[GameWithOwnership]:
        """Applies all active filters to a list of games.

        Filter pipeline (first failing step hides the game):

        1. Deprecated servers, always hidden.
        2. Linux-only toggle.
        3. Exclusion register: only excluded games on the excluded tab,
           none elsewhere.
        4. Group size: known max players below the selection size.
        5. Game modes (OR over enabled modes; none enabled passes all).
        6. Compatibility-tier floor.
        7. Release recency.
        8. Trending tab needs a positive trending score.
        9. Shortlist toggle or shortlisted tab.
        10. Ownership toggles.
        11. Include tags.
        12. Exclude tags.
        13. Name search.

        Args:
            games: Ownership views for every catalog entry.
            tab: The active tab.

        Returns:
            A new list containing only games that pass all filters.
        """
        today = self._today()
        return [g for g in games if self._passes_context(g, tab, today) and self._passes_user_filters(g)]

    def sorted_view(self, games: Sequence[GameWithOwnership], tab: AppTab = AppTab.ALL) -> list[GameWithOwnership]:
        """Filters for the tab, then sorts by the effective sort stack."""
        keys = effective_sort_keys(self._sort_keys, tab)
        return sort_games(self.apply(games, tab), keys, len(self._selected_players))

    def available_tags(self, games: Sequence[GameWithOwnership], tab: AppTab = AppTab.ALL) -> list[str]:
        """Builds the tag facet.

        Counts community tags over the games that pass every step before
        the tag filters, so the chips reflect the current context.

        Returns:
            Up to 20 tag names, most frequent first.
        """
        today = self._today()
        counts: Counter[str] = Counter()
        for game in games:
            if self._passes_context(game, tab, today):
                counts.update(dict.fromkeys(game.game.steam_tags, 1))
        return [tag for tag, _ in counts.most_common(TAG_FACET_LIMIT)]

    def tab_counts(self, games: Sequence[GameWithOwnership]) -> dict[AppTab, int]:
        """Number of games each tab would show under the current state."""
        return {tab: len(self.apply(games, tab)) for tab in AppTab}

    def has_active_filters(self) -> bool:
        """Checks whether any filter deviates from the default state."""
        default = FilterState(selected_players=tuple(self._selected_players), sort_keys=tuple(self._sort_keys))
        return self.state != default

    # ── Predicates ───────────────────────────────────────

    def _passes_context(self, entry: GameWithOwnership, tab: AppTab, today: date) -> bool:
        """Steps 1-10: everything except tags and search."""
        game = entry.game
        if game.servers_deprecated:
            return False
        if self._linux_only and not game.supports_linux:
            return False
        if not self._passes_exclusion(game.id, tab):
            return False
        if not self._passes_group_size(entry):
            return False
        if not self._passes_game_modes(entry):
            return False
        if not self._passes_proton_filter(entry):
            return False
        if not self._passes_release_date(entry, today):
            return False
        if tab == AppTab.TRENDING and not (game.trending_score or 0) > 0:
            return False
        if (self._shortlisted_only or tab == AppTab.SHORTLISTED) and not self._is_shortlisted(game.id):
            return False
        return self._passes_ownership(entry)

    def _passes_user_filters(self, entry: GameWithOwnership) -> bool:
        """Steps 11-13: tags and search."""
        if self._include_tags or self._exclude_tags:
            tags = _casefold_set(entry.game.all_tags)
            if self._include_tags and not tags & _casefold_set(self._include_tags):
                return False
            if self._exclude_tags and tags & _casefold_set(self._exclude_tags):
                return False
        if self._search_query:
            return self._search_query.casefold() in entry.game.name.casefold()
        return True

    def _is_shortlisted(self, game_id: str) -> bool:
        return self.shortlist is not None and game_id in self.shortlist

    def _passes_exclusion(self, game_id: str, tab: AppTab) -> bool:
        excluded = self.exclusions is not None and game_id in self.exclusions
        return excluded if tab == AppTab.EXCLUDED else not excluded

    def _passes_group_size(self, entry: GameWithOwnership) -> bool:
        max_players = entry.game.max_players
        if not self._selected_players or max_players is None:
            return True
        return max_players >= len(self._selected_players)

    def _passes_game_modes(self, entry: GameWithOwnership) -> bool:
        """OR logic; fails open when no mode is enabled."""
        if not self._game_modes:
            return True
        categories = set(entry.game.categories)
        return any(categories & GAME_MODE_CATEGORIES[mode] for mode in self._game_modes)

    def _passes_proton_filter(self, entry: GameWithOwnership) -> bool:
        if self._proton_filter == ProtonFilter.ALL:
            return True
        tier = (entry.game.protondb_rating or "").lower()
        if self._proton_filter == ProtonFilter.NATIVE:
            return tier == "native"
        rank = PROTON_TIER_RANK.get(tier)
        return rank is not None and rank <= PROTON_TIER_RANK[self._proton_filter.value]

    def _passes_release_date(self, entry: GameWithOwnership, today: date) -> bool:
        """Unreleased games pass; undated games only pass ALL."""
        max_days = RELEASE_DATE_DAYS.get(self._release_date_filter)
        if max_days is None:
            return True
        age = days_since(entry.game.release_date, today)
        return age is not None and age <= max_days

    def _passes_ownership(self, entry: GameWithOwnership) -> bool:
        game = entry.game
        if self._owned_by_all and not entry.effective_all_own:
            return False
        if self._owned_by_none and (entry.owner_count > 0 or game.is_free):
            return False
        if self._free_only and not game.is_free:
            return False
        if self._on_sale_only and not (game.is_on_sale or game.is_free):
            return False
        return True
