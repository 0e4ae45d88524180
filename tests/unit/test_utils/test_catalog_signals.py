"""Tests for derived catalog signals."""

from __future__ import annotations

import pytest

from gamenight.utils.catalog_signals import (
    infer_max_players,
    is_multiplayer,
    price_fields,
    review_label,
    round_half_up,
)


class TestReviewLabel:
    """Boundaries of the review label bands."""

    @pytest.mark.parametrize(
        ("positivity", "label"),
        [
            (100, "Overwhelmingly Positive"),
            (95, "Overwhelmingly Positive"),
            (94, "Very Positive"),
            (80, "Very Positive"),
            (79, "Mostly Positive"),
            (70, "Mostly Positive"),
            (69, "Mixed"),
            (40, "Mixed"),
            (39, "Mostly Negative"),
            (20, "Mostly Negative"),
            (19, "Overwhelmingly Negative"),
            (0, "Overwhelmingly Negative"),
        ],
    )
    def test_label(self, positivity: int, label: str) -> None:
        assert review_label(positivity) == label


class TestInferMaxPlayers:
    """First matching rule wins."""

    def test_single_player_only(self) -> None:
        assert infer_max_players(["Single-player"], []) == 1

    def test_coop_without_online_multiplayer(self) -> None:
        assert infer_max_players(["Co-op", "Online Co-op"], []) == 4

    def test_mmo_tag(self) -> None:
        assert infer_max_players(["Multi-player"], ["Massively Multiplayer"]) == 999

    def test_mmo_category_prefix(self) -> None:
        assert infer_max_players(["MMO"], []) == 999

    def test_word_inside_other_word_is_not_mmo(self) -> None:
        assert infer_max_players(["Multi-player"], ["Hammock Simulator"]) == 16

    def test_battle_royale(self) -> None:
        assert infer_max_players(["Multi-player"], ["Battle Royale"]) == 100

    def test_local_only(self) -> None:
        assert infer_max_players(["Single-player", "Shared/Split Screen"], []) == 4

    def test_online_with_coop(self) -> None:
        assert infer_max_players(["Online Multi-Player", "Online Co-op"], []) == 8

    def test_online_only(self) -> None:
        assert infer_max_players(["Multi-player"], []) == 16

    def test_nothing_known(self) -> None:
        assert infer_max_players([], ["Puzzle"]) is None


class TestIsMultiplayer:
    def test_whitelisted_category(self) -> None:
        assert is_multiplayer(["Single-player", "Online Co-op"])

    def test_single_player(self) -> None:
        assert not is_multiplayer(["Single-player", "Steam Achievements"])


class TestPriceFields:
    def test_free(self) -> None:
        assert price_fields(True, {"final": 999, "discount_percent": 50}) == {
            "steam_price_cents": 0,
            "is_on_sale": False,
            "sale_percent": None,
        }

    def test_discounted(self) -> None:
        fields = price_fields(False, {"final": 999, "discount_percent": 50})
        assert fields == {"steam_price_cents": 999, "is_on_sale": True, "sale_percent": 50}

    def test_full_price(self) -> None:
        fields = price_fields(False, {"final": 1999, "discount_percent": 0})
        assert fields["is_on_sale"] is False
        assert fields["sale_percent"] is None

    def test_no_price_block(self) -> None:
        assert price_fields(False, None)["steam_price_cents"] is None


class TestRoundHalfUp:
    @pytest.mark.parametrize(("value", "expected"), [(42.5, 43), (62.5, 63), (0.5, 1), (42.4, 42), (0.0, 0)])
    def test_rounding(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected
