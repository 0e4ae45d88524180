"""Canonical store for the catalog, players, ownership edges and sync log.

All mixins compose into the Database class via multiple inheritance.
The MRO ensures ConnectionBase.__init__ runs first, then
SchemaMixin._ensure_schema() creates/migrates the schema.
"""

from __future__ import annotations

from gamenight.core.db.connection import ConnectionBase
from gamenight.core.db.player_queries import PlayerQueryMixin
from gamenight.core.db.schema import SchemaMixin
from gamenight.core.db.sync_log_queries import SyncLogQueryMixin
from gamenight.core.db.table_queries import MAX_PAGE_SIZE, StoreError, TableQueryMixin

__all__ = [
    "Database",
    "MAX_PAGE_SIZE",
    "StoreError",
]


class Database(
    SchemaMixin,
    PlayerQueryMixin,
    SyncLogQueryMixin,
    TableQueryMixin,
    ConnectionBase,
):
    """Main database class composing all query mixins.

    Inherits connection management from ConnectionBase,
    schema handling from SchemaMixin, and all query methods
    from the remaining mixins.
    """

    pass
