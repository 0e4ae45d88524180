"""Tests for the dashboard filter pipeline.

Tests cover:
- Every pipeline step in isolation
- Tab-specific behaviour (trending, shortlisted, excluded)
- Tag include/exclude mutual exclusion
- The tag facet and per-tab counts
- State snapshots, reset and tab defaults
"""

from __future__ import annotations

from datetime import date

import pytest

from gamenight.core.game import Game, GameWithOwnership
from gamenight.services.annotation_registers import ExclusionRegister, ShortlistRegister
from gamenight.services.filter_constants import AppTab, ProtonFilter, ReleaseDateFilter, SortKey
from gamenight.services.filter_service import FilterService, FilterState
from gamenight.services.tab_config import TabDefaults

TODAY = date(2026, 10, 18)


def _entry(name: str = "Game", owner_count: int = 0, all_own: bool = False, **game_fields) -> GameWithOwnership:
    game_fields.setdefault("id", name)
    return GameWithOwnership(
        game=Game(steam_app_id=abs(hash(name)) % 100000, name=name, **game_fields),
        owner_count=owner_count,
        all_selected_own=all_own,
    )


def _names(entries: list[GameWithOwnership]) -> list[str]:
    return [e.game.name for e in entries]


@pytest.fixture
def shortlist(local_store) -> ShortlistRegister:
    return ShortlistRegister(local_store)


@pytest.fixture
def exclusions(local_store) -> ExclusionRegister:
    return ExclusionRegister(local_store)


@pytest.fixture
def service(shortlist, exclusions) -> FilterService:
    return FilterService(shortlist, exclusions, today=lambda: TODAY)


# ========================================================================
# Context steps
# ========================================================================


class TestContextSteps:
    """Pipeline steps 1-10."""

    def test_deprecated_servers_always_hidden(self, service: FilterService) -> None:
        games = [_entry("dead", servers_deprecated=True), _entry("alive")]
        for tab in AppTab:
            assert "dead" not in _names(service.apply(games, tab))

    def test_linux_only(self, service: FilterService) -> None:
        games = [_entry("native", supports_linux=True), _entry("windows", protondb_rating="gold")]
        service.toggle_linux_only()
        assert _names(service.apply(games)) == ["native"]

    def test_excluded_games_only_on_excluded_tab(self, service: FilterService, exclusions) -> None:
        games = [_entry("boring"), _entry("fun")]
        exclusions.exclude("boring", "Too slow", "Alice")

        assert _names(service.apply(games, AppTab.ALL)) == ["fun"]
        assert _names(service.apply(games, AppTab.EXCLUDED)) == ["boring"]

    def test_group_size(self, service: FilterService) -> None:
        games = [_entry("duo", max_players=2), _entry("squad", max_players=4), _entry("unknown")]
        service.set_selected_players(["a", "b", "c"])
        assert _names(service.apply(games)) == ["squad", "unknown"]

    def test_group_size_ignored_without_selection(self, service: FilterService) -> None:
        assert _names(service.apply([_entry("solo", max_players=1)])) == ["solo"]

    def test_game_modes_use_or(self, service: FilterService) -> None:
        games = [
            _entry("versus", categories=["Online PvP"]),
            _entry("coop", categories=["Online Co-op"]),
            _entry("solo", categories=["Single-player"]),
        ]
        service.toggle_game_mode("multiplayer")
        service.toggle_game_mode("coop")
        assert _names(service.apply(games)) == ["versus", "coop"]

    def test_no_game_mode_passes_everything(self, service: FilterService) -> None:
        games = [_entry("solo", categories=["Single-player"]), _entry("blank")]
        assert _names(service.apply(games)) == ["solo", "blank"]

    def test_unknown_game_mode_is_ignored(self, service: FilterService) -> None:
        service.toggle_game_mode("mmo")
        assert service.state.game_modes == frozenset()

    @pytest.mark.parametrize(
        ("floor", "expected"),
        [
            (ProtonFilter.ALL, ["native", "platinum", "gold", "silver", "pending", "unrated"]),
            (ProtonFilter.NATIVE, ["native"]),
            (ProtonFilter.PLATINUM, ["native", "platinum"]),
            (ProtonFilter.GOLD, ["native", "platinum", "gold"]),
        ],
    )
    def test_proton_floor(self, service: FilterService, floor: ProtonFilter, expected: list[str]) -> None:
        games = [
            _entry("native", protondb_rating="native"),
            _entry("platinum", protondb_rating="platinum"),
            _entry("gold", protondb_rating="Gold"),
            _entry("silver", protondb_rating="silver"),
            _entry("pending", protondb_rating="pending"),
            _entry("unrated"),
        ]
        service.set_proton_filter(floor)
        assert _names(service.apply(games)) == expected

    def test_invalid_proton_filter_falls_back(self, service: FilterService) -> None:
        service.set_proton_filter("diamond")
        assert service.state.proton_filter == ProtonFilter.ALL

    def test_release_recency(self, service: FilterService) -> None:
        games = [
            _entry("this week", release_date="2026-10-15"),
            _entry("last month", release_date="2026-09-25"),
            _entry("upcoming", release_date="2026-12-01"),
            _entry("undated"),
        ]
        service.set_release_date_filter(ReleaseDateFilter.WEEK)
        assert _names(service.apply(games)) == ["this week", "upcoming"]

        service.set_release_date_filter("month")
        assert _names(service.apply(games)) == ["this week", "last month", "upcoming"]

        service.set_release_date_filter(ReleaseDateFilter.ALL)
        assert len(service.apply(games)) == 4

    def test_trending_tab_needs_positive_score(self, service: FilterService) -> None:
        games = [_entry("hot", trending_score=80), _entry("zero", trending_score=0), _entry("cold")]
        assert _names(service.apply(games, AppTab.TRENDING)) == ["hot"]
        assert len(service.apply(games, AppTab.ALL)) == 3

    def test_shortlisted_tab_and_toggle(self, service: FilterService, shortlist) -> None:
        games = [_entry("picked"), _entry("other")]
        shortlist.toggle("picked")

        assert _names(service.apply(games, AppTab.SHORTLISTED)) == ["picked"]
        service.toggle_shortlisted_only()
        assert _names(service.apply(games, AppTab.ALL)) == ["picked"]

    def test_without_registers_nothing_is_shortlisted(self) -> None:
        service = FilterService(today=lambda: TODAY)
        assert service.apply([_entry("a")], AppTab.SHORTLISTED) == []
        assert _names(service.apply([_entry("a")], AppTab.ALL)) == ["a"]


# ========================================================================
# Ownership toggles
# ========================================================================


class TestOwnership:
    """Pipeline step 10."""

    @pytest.fixture
    def games(self) -> list[GameWithOwnership]:
        return [
            _entry("everyone", owner_count=2, all_own=True),
            _entry("half", owner_count=1),
            _entry("nobody"),
            _entry("free", is_free=True),
            _entry("sale", is_on_sale=True, sale_percent=50),
        ]

    def test_owned_by_all_counts_free_games(self, service: FilterService, games) -> None:
        service.toggle_owned_by_all()
        assert _names(service.apply(games)) == ["everyone", "free"]

    def test_partially_owned_paid_game_hidden_by_owned_by_all(self, service: FilterService) -> None:
        entry = _entry("half owned native", owner_count=1, protondb_rating="native", steam_review_score=90)
        service.set_selected_players(["a", "b"])
        service.toggle_owned_by_all()
        assert service.apply([entry]) == []

    def test_owned_by_none_excludes_free(self, service: FilterService, games) -> None:
        service.toggle_owned_by_none()
        assert _names(service.apply(games)) == ["nobody", "sale"]

    def test_free_only(self, service: FilterService, games) -> None:
        service.toggle_free_only()
        assert _names(service.apply(games)) == ["free"]

    def test_on_sale_includes_free(self, service: FilterService, games) -> None:
        service.toggle_on_sale_only()
        assert _names(service.apply(games)) == ["free", "sale"]

    def test_toggles_flip_back(self, service: FilterService, games) -> None:
        service.toggle_free_only()
        service.toggle_free_only()
        assert len(service.apply(games)) == 5


# ========================================================================
# Tags and search
# ========================================================================


class TestTagsAndSearch:
    """Pipeline steps 11-13."""

    @pytest.fixture
    def games(self) -> list[GameWithOwnership]:
        return [
            _entry("Valheim", steam_tags=["Survival", "Open World"], categories=["Online Co-op"]),
            _entry("Rust", steam_tags=["Survival", "PvP"]),
            _entry("Overcooked", steam_tags=["Cooking"], categories=["Shared/Split Screen"]),
        ]

    def test_include_tags_any(self, service: FilterService, games) -> None:
        service.toggle_include_tag("survival")
        assert _names(service.apply(games)) == ["Valheim", "Rust"]

    def test_include_matches_categories(self, service: FilterService, games) -> None:
        service.toggle_include_tag("Online Co-op")
        assert _names(service.apply(games)) == ["Valheim"]

    def test_exclude_tags(self, service: FilterService, games) -> None:
        service.toggle_exclude_tag("PvP")
        assert _names(service.apply(games)) == ["Valheim", "Overcooked"]

    def test_tag_lists_are_mutually_exclusive(self, service: FilterService) -> None:
        service.toggle_include_tag("Survival")
        service.toggle_exclude_tag("survival")
        state = service.state
        assert state.include_tags == frozenset()
        assert state.exclude_tags == frozenset({"survival"})

        service.toggle_include_tag("SURVIVAL")
        state = service.state
        assert state.include_tags == frozenset({"SURVIVAL"})
        assert state.exclude_tags == frozenset()

    def test_toggle_tag_twice_removes_it(self, service: FilterService) -> None:
        service.toggle_include_tag("Survival")
        service.toggle_include_tag("survival")
        assert service.state.include_tags == frozenset()

    def test_search_is_case_insensitive_substring(self, service: FilterService, games) -> None:
        service.set_search("OVER")
        assert _names(service.apply(games)) == ["Overcooked"]

    def test_apply_does_not_mutate_input(self, service: FilterService, games) -> None:
        service.set_search("nothing matches")
        assert service.apply(games) == []
        assert len(games) == 3


# ========================================================================
# Facet, counts, sorting
# ========================================================================


class TestDerivedViews:
    def test_available_tags_counts_context_games(self, service: FilterService, exclusions) -> None:
        games = [
            _entry("a", steam_tags=["Survival", "Co-op"]),
            _entry("b", steam_tags=["Survival", "Survival"]),
            _entry("c", steam_tags=["Racing"], servers_deprecated=True),
            _entry("d", steam_tags=["Horror"]),
        ]
        exclusions.exclude("d", "", "")
        service.toggle_include_tag("Co-op")

        # Tag filters and search do not narrow the facet
        assert service.available_tags(games) == ["Survival", "Co-op"]

    def test_available_tags_limit(self, service: FilterService) -> None:
        games = [_entry(f"g{i}", steam_tags=[f"Tag{i}"]) for i in range(30)]
        assert len(service.available_tags(games)) == 20

    def test_tab_counts(self, service: FilterService, shortlist, exclusions) -> None:
        games = [_entry("hot", trending_score=5), _entry("listed"), _entry("gone")]
        shortlist.toggle("listed")
        exclusions.exclude("gone", "", "")

        counts = service.tab_counts(games)

        assert counts[AppTab.ALL] == 2
        assert counts[AppTab.TRENDING] == 1
        assert counts[AppTab.SHORTLISTED] == 1
        assert counts[AppTab.EXCLUDED] == 1

    def test_sorted_view_appends_tab_default(self, service: FilterService) -> None:
        games = [_entry("Same", id="cool", trending_score=10), _entry("Same", id="hot", trending_score=90)]
        service.set_sort_keys([SortKey.NAME])
        result = service.sorted_view(games, AppTab.TRENDING)
        assert [e.game.id for e in result] == ["hot", "cool"]

    def test_toggle_sort_key_keeps_stack_non_empty(self, service: FilterService) -> None:
        service.toggle_sort_key(SortKey.RECOMMENDATION)
        assert service.state.sort_keys == (SortKey.RECOMMENDATION,)
        service.toggle_sort_key("not a key")
        assert service.state.sort_keys == (SortKey.RECOMMENDATION,)


# ========================================================================
# State management
# ========================================================================


class TestState:
    def test_default_state(self, service: FilterService) -> None:
        assert service.state == FilterState()
        assert not service.has_active_filters()

    def test_restore_round_trip(self, service: FilterService) -> None:
        state = FilterState(
            selected_players=("a", "b"),
            free_only=True,
            include_tags=frozenset({"Co-op"}),
            exclude_tags=frozenset({"co-op", "PvP"}),
            sort_keys=(SortKey.NAME,),
            proton_filter=ProtonFilter.GOLD,
        )
        service.restore_state(state)
        restored = service.state

        assert restored.selected_players == ("a", "b")
        assert restored.free_only
        assert restored.exclude_tags == frozenset({"PvP"})
        assert restored.proton_filter == ProtonFilter.GOLD
        assert service.has_active_filters()

    def test_reset_keeps_selection(self, service: FilterService) -> None:
        service.set_selected_players(["a"])
        service.toggle_free_only()
        service.set_search("x")

        service.reset()

        assert service.state == FilterState(selected_players=("a",))

    def test_toggle_player(self, service: FilterService) -> None:
        service.toggle_player("a")
        service.toggle_player("b")
        service.toggle_player("a")
        assert service.state.selected_players == ("b",)

    def test_apply_tab_defaults(self, service: FilterService) -> None:
        service.set_search("valheim")
        service.toggle_include_tag("Massively Multiplayer")
        defaults = TabDefaults(
            sort_keys=(SortKey.TRENDING,),
            linux_only=True,
            release_date_filter=ReleaseDateFilter.YEAR,
            proton_filter=ProtonFilter.PLATINUM,
        )

        service.apply_tab_defaults(defaults)
        state = service.state

        assert state.sort_keys == (SortKey.TRENDING,)
        assert state.linux_only
        assert state.release_date_filter == ReleaseDateFilter.YEAR
        assert state.game_modes == frozenset({"multiplayer", "coop"})
        assert state.exclude_tags == frozenset({"Massively Multiplayer"})
        assert state.include_tags == frozenset()
        assert state.search_query == "valheim"
