from __future__ import annotations

from gamenight.web.app import create_app

__all__: list[str] = ["create_app"]
