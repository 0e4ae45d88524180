"""
Job trigger routes - scheduled cron endpoints, the admin discovery
endpoint with its continuation body, and the sync status read.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from flask import Blueprint, current_app, jsonify, request

from gamenight.core.db import StoreError
from gamenight.core.sync_log import STATUS_SUCCESS
from gamenight.services.sync.base_job import JobResult
from gamenight.services.sync.discovery_job import DiscoveryJob, parse_pending_app_ids
from gamenight.services.sync.registry import JobFactory
from gamenight.web.auth import bearer_required

logger = logging.getLogger("gamenight.web.routes")

__all__ = ["jobs_bp"]

jobs_bp = Blueprint("jobs", __name__, url_prefix="/api")


def _jobs() -> JobFactory:
    return current_app.extensions["gamenight"]["jobs"]


def _json_body() -> dict[str, Any] | None:
    """The request's JSON object; {} when there is no body, None when it is not an object."""
    if not request.get_data():
        return {}
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else None


def _bad_request(message: str):
    return jsonify({"error": message}), 400


def _respond(result: JobResult):
    return jsonify(result.body), result.status_code


@jobs_bp.route("/cron/sync-libraries", methods=["GET", "POST"])
@bearer_required
def sync_libraries():
    return _respond(_jobs().create("sync-libraries").run())


@jobs_bp.route("/cron/sync-prices", methods=["GET", "POST"])
@bearer_required
def sync_prices():
    return _respond(_jobs().create("sync-prices").run())


@jobs_bp.route("/cron/sync-trending", methods=["GET", "POST"])
@bearer_required
def sync_trending():
    return _respond(_jobs().create("sync-trending").run())


@jobs_bp.route("/cron/sync-player-counts", methods=["GET", "POST"])
@bearer_required
def sync_player_counts():
    return _respond(_jobs().create("sync-player-counts").run())


@jobs_bp.route("/cron/discover-games", methods=["GET", "POST"])
@bearer_required
def discover_games_scheduled():
    """Discovers and enriches a capped number of new games in one call."""
    job: DiscoveryJob = _jobs().create("discover-games")
    return _respond(job.run_scheduled())


@jobs_bp.route("/cron/backfill-max-players", methods=["GET", "POST"])
@bearer_required
def backfill_max_players():
    """Processes one slice; ``afterAppId`` (body or query) continues a walk."""
    body = _json_body()
    if body is None:
        return _bad_request("Request body must be a JSON object")

    after = body.get("afterAppId", request.args.get("afterAppId"))
    if after is not None:
        try:
            after = int(after)
        except (TypeError, ValueError):
            return _bad_request("afterAppId must be an integer")

    return _respond(_jobs().create("backfill-max-players").run({"afterAppId": after}))


@jobs_bp.route("/admin/discover-games", methods=["POST"])
@bearer_required
def discover_games():
    """Continuation endpoint.

    Without ``pendingAppIds`` the discovery phase runs and returns the
    worklist; with it a slice is enriched and the remainder returned.
    """
    body = _json_body()
    if body is None:
        return _bad_request("Request body must be a JSON object")
    try:
        parse_pending_app_ids(body)
    except ValueError as e:
        return _bad_request(str(e))

    return _respond(_jobs().create("discover-games").run(body))


@jobs_bp.route("/sync/status", methods=["GET"])
@bearer_required
def sync_status():
    """Latest sync run and latest successful run."""
    db = current_app.extensions["gamenight"]["db"]
    try:
        latest = db.latest_sync_log()
        latest_success = db.latest_sync_log(STATUS_SUCCESS)
    except StoreError as e:
        logger.error("Could not read sync status: %s", e)
        return jsonify({"error": str(e)}), 500

    return jsonify(
        {
            "latest": asdict(latest) if latest else None,
            "latestSuccessful": asdict(latest_success) if latest_success else None,
        }
    )
