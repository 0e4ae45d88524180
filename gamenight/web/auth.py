"""Bearer-token protection for the job trigger endpoints."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import current_app, jsonify, request

logger = logging.getLogger("gamenight.web.auth")

__all__ = ["bearer_required", "is_authorized"]


def is_authorized(header: str | None, secret: str | None) -> bool:
    """Checks an Authorization header against the configured secret.

    Without a configured secret every request is authorized, which keeps
    local development free of setup.
    """
    if not secret:
        return True
    if not header:
        return False
    return hmac.compare_digest(header.encode("utf-8"), f"Bearer {secret}".encode("utf-8"))


def bearer_required(f: Callable[..., Any]) -> Callable[..., Any]:
    """Rejects the request with 401 unless it carries the cron secret."""

    @wraps(f)
    def decorated_function(*args: Any, **kwargs: Any) -> Any:
        if not is_authorized(request.headers.get("Authorization"), current_app.config.get("CRON_SECRET")):
            logger.warning("Unauthorized request to %s from %s", request.path, request.remote_addr)
            return jsonify({"error": "Unauthorized"}), 401
        return f(*args, **kwargs)

    return decorated_function
