# gamenight/services/theme_service.py

"""Persisted colour theme preference."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gamenight.core.local_store import LocalStore

logger = logging.getLogger("gamenight.theme")

__all__ = ["DEFAULT_THEME", "THEMES", "ThemeOption", "ThemeService"]

THEME_NAMESPACE = "theme"


@dataclass(frozen=True)
class ThemeOption:
    """A selectable theme and its preview swatch colour."""

    id: str
    label: str
    swatch: str


THEMES: tuple[ThemeOption, ...] = (
    ThemeOption("indigo", "Indigo", "#6366f1"),
    ThemeOption("cyberpunk", "Cyberpunk", "#ff0080"),
    ThemeOption("midnight", "Midnight", "#3884ff"),
    ThemeOption("ember", "Ember", "#f5821e"),
    ThemeOption("emerald", "Emerald", "#10b981"),
)

DEFAULT_THEME = "indigo"

_THEME_IDS = frozenset(theme.id for theme in THEMES)


class ThemeService:
    """Reads and writes the theme under ``gaming-decisions-theme``."""

    def __init__(self, store: LocalStore) -> None:
        self._store = store
        saved = store.get(THEME_NAMESPACE)
        if saved not in _THEME_IDS:
            if saved is not None:
                logger.warning("Unknown theme %r, using %s", saved, DEFAULT_THEME)
            saved = DEFAULT_THEME
        self._theme: str = saved

    @property
    def theme(self) -> str:
        return self._theme

    def set_theme(self, theme_id: str) -> None:
        """Switches theme and persists it.

        Raises:
            ValueError: If the theme is unknown.
        """
        if theme_id not in _THEME_IDS:
            raise ValueError(f"Unknown theme: {theme_id}")
        self._theme = theme_id
        self._store.set(THEME_NAMESPACE, theme_id)
