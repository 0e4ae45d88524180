# gamenight/core/game.py

"""Game dataclasses and compatibility constants for the game night dashboard.

``Game`` mirrors one row of the canonical catalog. ``GameWithOwnership``
is the per-selection view the client engine works on: the catalog row
plus who of the currently selected players owns it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from gamenight.core.player import Player, PlayerGame

__all__ = [
    "COMPAT_TIERS",
    "Game",
    "GameWithOwnership",
    "LINUX_OK_TIERS",
    "MMO_MAX_PLAYERS",
    "is_linux_ok",
]

# Ordered best to worst. "native" means a first-party Linux build.
COMPAT_TIERS: tuple[str, ...] = ("native", "platinum", "gold", "silver", "bronze", "borked", "pending")

LINUX_OK_TIERS: frozenset[str] = frozenset({"native", "platinum", "gold", "silver"})

# Sentinel for "effectively unbounded" group size.
MMO_MAX_PLAYERS: int = 999


@dataclass
class Game:
    """Represents a single catalog entry with all its enrichment data.

    ``steam_app_id`` is the natural key; ``id`` is the surrogate assigned by
    the store on first insert. Every enrichment field may be absent until
    the job that owns it has run.
    """

    steam_app_id: int
    name: str
    id: str = ""
    header_image_url: str | None = None
    description: str | None = None

    # Group play
    is_multiplayer: bool = False
    max_players: int | None = None
    min_players: int | None = None

    # Linux compatibility
    supports_linux: bool = False
    protondb_rating: str | None = None

    # Server status
    has_active_servers: bool = True
    servers_deprecated: bool = False

    # Reviews
    steam_review_score: int | None = None
    steam_review_desc: str | None = None
    steam_review_count: int | None = None
    opencritic_score: int | None = None
    opencritic_tier: str | None = None

    # Pricing (minor currency units)
    steam_price_cents: int | None = None
    best_price_cents: int | None = None
    best_price_store: str | None = None
    best_price_url: str | None = None
    is_free: bool = False
    is_on_sale: bool = False
    sale_percent: int | None = None

    # Release
    release_date: str | None = None
    is_coming_soon: bool = False

    steam_tags: list[str] = None
    categories: list[str] = None

    # Popularity
    trending_score: int | None = None
    current_players: int | None = None

    # Bookkeeping (ISO-8601 UTC)
    player_count_updated_at: str | None = None
    price_checked_at: str | None = None
    last_updated_at: str | None = None
    created_at: str | None = None

    def __post_init__(self):
        """Initializes default lists."""
        if self.steam_tags is None:
            self.steam_tags = []
        if self.categories is None:
            self.categories = []

    @property
    def price_cents(self) -> int | None:
        """Best known price: third-party first, then the storefront."""
        if self.best_price_cents is not None:
            return self.best_price_cents
        return self.steam_price_cents

    @property
    def all_tags(self) -> list[str]:
        """Community tags followed by store categories."""
        return [*self.steam_tags, *self.categories]


def is_linux_ok(game: Game) -> bool:
    """Checks whether a game is playable on Linux.

    Args:
        game: The catalog entry.

    Returns:
        True for a native build or a ProtonDB tier of silver or better.
    """
    return game.supports_linux or (game.protondb_rating or "").lower() in LINUX_OK_TIERS


@dataclass
class GameWithOwnership:
    """A catalog entry joined with the ownership of the selected players.

    Attributes:
        game: The catalog entry.
        owners: Ownership edges belonging to selected players only.
        owner_count: Number of selected players owning the game.
        all_selected_own: True when every selected player owns it (vacuously
            true for an empty selection).
        missing_players: Selected players who do not own it.
    """

    game: Game
    owners: list[PlayerGame] = field(default_factory=list)
    owner_count: int = 0
    all_selected_own: bool = False
    missing_players: list[Player] = field(default_factory=list)

    @property
    def effective_all_own(self) -> bool:
        """Free games count as owned by everyone for filtering purposes."""
        return self.game.is_free or self.all_selected_own

    @property
    def total_playtime_hours(self) -> float:
        return sum(edge.playtime_hours for edge in self.owners)
