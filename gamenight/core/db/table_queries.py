"""Generic table operations: select, insert, upsert, update.

These are the only primitives the ingestion jobs and the data-access layer
use. Filters are ``(column, op, value)`` triples, orders are
``(column, ascending[, nulls_first])`` tuples. Column names are checked
against the table whitelist before they reach SQL.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from collections.abc import Iterable, Sequence
from typing import Any

from gamenight.core.db.models import BOOL_COLUMNS, TABLE_COLUMNS, decode_row, encode_row
from gamenight.utils.date_utils import utc_now_iso

logger = logging.getLogger("gamenight.database")

__all__ = ["CONFLICT_KEYS", "MAX_PAGE_SIZE", "StoreError", "TableQueryMixin"]

# Per-call row cap, paginated reads must loop
MAX_PAGE_SIZE = 1000

CONFLICT_KEYS: dict[str, tuple[str, ...]] = {
    "games": ("steam_app_id",),
    "players": ("steam_id",),
    "player_games": ("player_id", "game_id"),
    "sync_log": ("id",),
}

_OPERATORS: dict[str, str] = {
    "eq": "=",
    "neq": "!=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}


class StoreError(Exception):
    """An operation against the canonical store failed."""


class TableQueryMixin:
    """Mixin providing whitelisted CRUD primitives over every table.

    Requires ConnectionBase attributes: conn, lock, _notify.
    """

    # ── Helpers ──────────────────────────────────────────────────────────

    @staticmethod
    def _check_columns(table: str, names: Iterable[str]) -> None:
        if table not in TABLE_COLUMNS:
            raise ValueError(f"Unknown table: {table}")
        unknown = set(names) - TABLE_COLUMNS[table]
        if unknown:
            raise ValueError(f"Unknown column(s) for {table}: {', '.join(sorted(unknown))}")

    @staticmethod
    def _sql_value(table: str, column: str, value: Any) -> Any:
        if column in BOOL_COLUMNS.get(table, frozenset()) and isinstance(value, bool):
            return int(value)
        return value

    def _where(self, table: str, filters: Sequence[tuple[str, str, Any]]) -> tuple[str, list[Any]]:
        """Builds a WHERE clause from filter triples."""
        self._check_columns(table, (column for column, _, _ in filters))

        clauses: list[str] = []
        params: list[Any] = []
        for column, op, value in filters:
            if op == "is_null":
                clauses.append(f"{column} IS NULL")
            elif op == "not_null":
                clauses.append(f"{column} IS NOT NULL")
            elif op == "in":
                values = [self._sql_value(table, column, v) for v in value]
                if not values:
                    clauses.append("0")
                    continue
                clauses.append(f"{column} IN ({', '.join('?' for _ in values)})")
                params.extend(values)
            elif op in _OPERATORS:
                clauses.append(f"{column} {_OPERATORS[op]} ?")
                params.append(self._sql_value(table, column, value))
            else:
                raise ValueError(f"Unknown filter operator: {op}")

        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def _order_by(self, table: str, order: Sequence[tuple]) -> str:
        self._check_columns(table, (entry[0] for entry in order))

        terms: list[str] = []
        for entry in order:
            column, ascending = entry[0], entry[1]
            nulls_first = entry[2] if len(entry) > 2 else None
            if nulls_first is not None:
                terms.append(f"({column} IS NULL) {'DESC' if nulls_first else 'ASC'}")
            terms.append(f"{column} {'ASC' if ascending else 'DESC'}")

        return " ORDER BY " + ", ".join(terms) if terms else ""

    # ── Reads ────────────────────────────────────────────────────────────

    def select(
        self,
        table: str,
        filters: Sequence[tuple[str, str, Any]] = (),
        order: Sequence[tuple] = (),
        range_: tuple[int, int] | None = None,
    ) -> list[dict[str, Any]]:
        """Selects rows from a table.

        Args:
            table: Table name.
            filters: ``(column, op, value)`` triples combined with AND.
            order: ``(column, ascending[, nulls_first])`` tuples.
            range_: Inclusive ``(start, end)`` row range.

        Returns:
            Decoded row dicts, never more than MAX_PAGE_SIZE.

        Raises:
            StoreError: If the query fails.
        """
        where, params = self._where(table, filters)
        order_by = self._order_by(table, order)

        offset = 0
        limit = MAX_PAGE_SIZE
        if range_ is not None:
            start, end = range_
            offset = max(0, start)
            limit = max(0, min(MAX_PAGE_SIZE, end - start + 1))

        sql = f"SELECT * FROM {table}{where}{order_by} LIMIT ? OFFSET ?"
        with self.lock:
            try:
                rows = self.conn.execute(sql, [*params, limit, offset]).fetchall()
            except sqlite3.Error as exc:
                raise StoreError(f"select from {table} failed: {exc}") from exc
        return [decode_row(table, row) for row in rows]

    def select_all(
        self,
        table: str,
        filters: Sequence[tuple[str, str, Any]] = (),
        order: Sequence[tuple] = (),
    ) -> list[dict[str, Any]]:
        """Selects every matching row by paging through MAX_PAGE_SIZE windows.

        An order should be given so pages are stable; the surrogate ``id`` is
        used when none is.
        """
        order = tuple(order) or (("id", True),)
        rows: list[dict[str, Any]] = []
        start = 0
        while True:
            page = self.select(table, filters, order, (start, start + MAX_PAGE_SIZE - 1))
            rows.extend(page)
            if len(page) < MAX_PAGE_SIZE:
                return rows
            start += MAX_PAGE_SIZE

    def count(self, table: str, filters: Sequence[tuple[str, str, Any]] = ()) -> int:
        where, params = self._where(table, filters)
        with self.lock:
            return self.conn.execute(f"SELECT COUNT(*) FROM {table}{where}", params).fetchone()[0]

    # ── Writes ───────────────────────────────────────────────────────────

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Inserts a single row and commits.

        Args:
            table: Table name.
            row: Column/value pairs; ``id`` is generated if missing.

        Returns:
            The stored row.

        Raises:
            StoreError: If the insert fails.
        """
        self._check_columns(table, row)
        encoded = encode_row(table, row)
        encoded.setdefault("id", uuid.uuid4().hex)
        if "created_at" in TABLE_COLUMNS[table]:
            encoded.setdefault("created_at", utc_now_iso())

        columns = list(encoded)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})"

        with self.lock:
            try:
                self.conn.execute(sql, [encoded[c] for c in columns])
                self.conn.commit()
            except sqlite3.Error as exc:
                self.conn.rollback()
                raise StoreError(f"insert into {table} failed: {exc}") from exc
            stored = self.conn.execute(f"SELECT * FROM {table} WHERE id = ?", (encoded["id"],)).fetchone()

        self._notify(table, "INSERT")
        return decode_row(table, stored)

    def upsert(
        self,
        table: str,
        row: dict[str, Any],
        on_conflict: tuple[str, ...] | None = None,
    ) -> dict[str, Any]:
        """Inserts a row or, on a key conflict, updates the supplied columns.

        Columns absent from ``row`` keep their stored value. Pass ``None``
        explicitly to clear a column. The surrogate ``id`` and
        ``created_at`` are only set on insert.

        Args:
            table: Table name.
            row: Column/value pairs including the conflict key columns.
            on_conflict: Conflict key, defaults to the table's natural key.

        Returns:
            The stored row after the write.

        Raises:
            StoreError: If the write fails (constraint violation, I/O error).
        """
        conflict = on_conflict or CONFLICT_KEYS[table]
        self._check_columns(table, row)
        self._check_columns(table, conflict)
        missing = [c for c in conflict if row.get(c) is None]
        if missing:
            raise StoreError(f"upsert into {table} is missing conflict key(s): {', '.join(missing)}")

        encoded = encode_row(table, row)
        insert_row = dict(encoded)
        insert_row.setdefault("id", uuid.uuid4().hex)
        if "created_at" in TABLE_COLUMNS[table]:
            insert_row.setdefault("created_at", utc_now_iso())

        columns = list(insert_row)
        update_columns = [c for c in encoded if c not in conflict and c not in ("id", "created_at")]

        sql = (
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)}) "
            f"ON CONFLICT({', '.join(conflict)}) DO "
        )
        if update_columns:
            sql += "UPDATE SET " + ", ".join(f"{c} = excluded.{c}" for c in update_columns)
        else:
            sql += "NOTHING"

        key_where = " AND ".join(f"{c} = ?" for c in conflict)
        key_params = [encoded[c] for c in conflict]

        with self.lock:
            try:
                existed = (
                    self.conn.execute(f"SELECT 1 FROM {table} WHERE {key_where}", key_params).fetchone() is not None
                )
                self.conn.execute(sql, [insert_row[c] for c in columns])
                self.conn.commit()
            except sqlite3.Error as exc:
                self.conn.rollback()
                raise StoreError(f"upsert into {table} failed: {exc}") from exc
            stored = self.conn.execute(f"SELECT * FROM {table} WHERE {key_where}", key_params).fetchone()

        self._notify(table, "UPDATE" if existed else "INSERT")
        return decode_row(table, stored)

    def update(
        self,
        table: str,
        patch: dict[str, Any],
        filters: Sequence[tuple[str, str, Any]],
    ) -> int:
        """Updates the given columns on every row matching the filters.

        Args:
            table: Table name.
            patch: Column/value pairs to write.
            filters: Row selection; an empty filter list is rejected.

        Returns:
            Number of rows changed.

        Raises:
            StoreError: If the update fails.
            ValueError: If no filters are given.
        """
        if not filters:
            raise ValueError("update() requires at least one filter")
        if not patch:
            return 0

        self._check_columns(table, patch)
        encoded = encode_row(table, patch)
        set_clause = ", ".join(f"{c} = ?" for c in encoded)
        where, params = self._where(table, filters)

        with self.lock:
            try:
                cursor = self.conn.execute(f"UPDATE {table} SET {set_clause}{where}", [*encoded.values(), *params])
                self.conn.commit()
            except sqlite3.Error as exc:
                self.conn.rollback()
                raise StoreError(f"update of {table} failed: {exc}") from exc

        if cursor.rowcount:
            self._notify(table, "UPDATE")
        return cursor.rowcount
