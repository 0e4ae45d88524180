"""Flask application factory for the job trigger surface."""

from __future__ import annotations

import logging

from flask import Flask, jsonify

from gamenight.config import Config
from gamenight.core.db import Database
from gamenight.services.sync.registry import JobFactory
from gamenight.version import __version__
from gamenight.web.routes import jobs_bp

logger = logging.getLogger("gamenight.web")

__all__ = ["create_app"]


def create_app(
    config: Config | None = None,
    db: Database | None = None,
    job_factory: JobFactory | None = None,
) -> Flask:
    """Creates the app.

    Args:
        config: Configuration; the module-level config when omitted.
        db: Store; opened from ``config.DATABASE_FILE`` when omitted.
        job_factory: Job factory; built from db and config when omitted.

    Returns:
        The configured Flask app.
    """
    if config is None:
        from gamenight.config import config as default_config

        config = default_config

    db = db or Database(config.DATABASE_FILE)
    job_factory = job_factory or JobFactory(db, config)

    app = Flask(__name__)
    app.config["CRON_SECRET"] = config.CRON_SECRET
    app.config["JSON_SORT_KEYS"] = False
    app.extensions["gamenight"] = {"config": config, "db": db, "jobs": job_factory}

    app.register_blueprint(jobs_bp)

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "version": __version__})

    @app.errorhandler(404)
    def not_found(_error):
        return jsonify({"error": "Not found"}), 404

    if not config.CRON_SECRET:
        logger.warning("CRON_SECRET is not set, job endpoints are open")

    return app
