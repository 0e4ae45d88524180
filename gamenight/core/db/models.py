"""Table definitions and row conversion functions.

Each table has a column whitelist; list columns are stored as JSON text
and boolean columns as integers. Rows travel through the store as plain
dicts and are converted to the domain dataclasses at the edges.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, fields
from typing import Any

from gamenight.core.game import Game
from gamenight.core.player import Player, PlayerGame
from gamenight.core.sync_log import SyncLog

logger = logging.getLogger("gamenight.database")

__all__ = [
    "BOOL_COLUMNS",
    "JSON_COLUMNS",
    "TABLE_COLUMNS",
    "decode_row",
    "encode_row",
    "game_to_row",
    "row_to_game",
    "row_to_player",
    "row_to_player_game",
    "row_to_sync_log",
]

TABLE_COLUMNS: dict[str, frozenset[str]] = {
    "games": frozenset(f.name for f in fields(Game)),
    "players": frozenset(f.name for f in fields(Player)),
    "player_games": frozenset(f.name for f in fields(PlayerGame)),
    "sync_log": frozenset(f.name for f in fields(SyncLog)),
}

JSON_COLUMNS: dict[str, frozenset[str]] = {
    "games": frozenset({"steam_tags", "categories"}),
}

BOOL_COLUMNS: dict[str, frozenset[str]] = {
    "games": frozenset(
        {
            "is_multiplayer",
            "supports_linux",
            "has_active_servers",
            "servers_deprecated",
            "is_free",
            "is_on_sale",
            "is_coming_soon",
        }
    ),
    "players": frozenset({"is_primary"}),
}


def encode_row(table: str, row: dict[str, Any]) -> dict[str, Any]:
    """Converts a row dict into SQLite-ready values.

    Args:
        table: Target table name.
        row: Column/value pairs. Unknown columns are dropped.

    Returns:
        A new dict with JSON-encoded lists and integer booleans.
    """
    columns = TABLE_COLUMNS[table]
    json_columns = JSON_COLUMNS.get(table, frozenset())
    bool_columns = BOOL_COLUMNS.get(table, frozenset())

    encoded: dict[str, Any] = {}
    for key, value in row.items():
        if key not in columns:
            logger.debug("Dropping unknown column %s.%s", table, key)
            continue
        if key in json_columns and value is not None:
            value = json.dumps(list(value))
        elif key in bool_columns and value is not None:
            value = int(bool(value))
        encoded[key] = value
    return encoded


def decode_row(table: str, row: Any) -> dict[str, Any]:
    """Converts a sqlite3.Row (or mapping) back into Python values."""
    json_columns = JSON_COLUMNS.get(table, frozenset())
    bool_columns = BOOL_COLUMNS.get(table, frozenset())

    decoded = dict(row)
    for key in json_columns & decoded.keys():
        raw = decoded[key]
        try:
            decoded[key] = json.loads(raw) if raw else []
        except (TypeError, ValueError):
            decoded[key] = []
    for key in bool_columns & decoded.keys():
        if decoded[key] is not None:
            decoded[key] = bool(decoded[key])
    return decoded


def _pick(cls: type, row: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in row.items() if key in names}


def row_to_game(row: dict[str, Any]) -> Game:
    return Game(**_pick(Game, row))


def game_to_row(game: Game) -> dict[str, Any]:
    """Full row for a game; the surrogate id is omitted when unassigned."""
    row = asdict(game)
    if not row["id"]:
        row.pop("id")
    return row


def row_to_player(row: dict[str, Any]) -> Player:
    return Player(**_pick(Player, row))


def row_to_player_game(row: dict[str, Any]) -> PlayerGame:
    return PlayerGame(**_pick(PlayerGame, row))


def row_to_sync_log(row: dict[str, Any]) -> SyncLog:
    return SyncLog(**_pick(SyncLog, row))
