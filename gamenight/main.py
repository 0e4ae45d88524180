"""Steam Game Night - command line entry point.

Subcommands:
    serve                  Run the job trigger HTTP surface.
    run <job>              Run one ingestion job once and print its result.
    seed-players           Write the configured players to the store.
    discover               Drive catalog discovery until nothing is pending.
    backfill-max-players   Walk the whole catalog refining group sizes.
    picks                  Print tonight's quick picks for the default group.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from gamenight.config import config
from gamenight.core.db import Database
from gamenight.core.local_store import LocalStore
from gamenight.core.logging import logger, setup_logging
from gamenight.services.dashboard import Dashboard
from gamenight.services.data_access import DataAccess
from gamenight.services.recommendation import calculate_recommendation_score
from gamenight.services.sync.discovery_job import drain_discovery
from gamenight.services.sync.registry import JOB_NAMES, JobFactory
from gamenight.version import __app_name__, __version__


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gamenight", description=__app_name__)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, ...)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the job trigger HTTP surface")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8080)

    run = sub.add_parser("run", help="Run one ingestion job once")
    run.add_argument("job", choices=JOB_NAMES)
    run.add_argument("--payload", default=None, help="JSON request body for the job")

    sub.add_parser("seed-players", help="Write the configured players to the store")
    sub.add_parser("discover", help="Discover and enrich until nothing is pending")
    sub.add_parser("backfill-max-players", help="Refine max players for the whole catalog")

    picks = sub.add_parser("picks", help="Print quick picks for the default group")
    picks.add_argument("--limit", type=int, default=5)
    return parser


def _cmd_serve(args: argparse.Namespace, db: Database) -> int:
    from gamenight.web.app import create_app

    app = create_app(config, db=db)
    app.run(host=args.host, port=args.port)
    return 0


def _cmd_run(args: argparse.Namespace, jobs: JobFactory) -> int:
    try:
        payload = json.loads(args.payload) if args.payload else None
    except json.JSONDecodeError as e:
        logger.error("Invalid --payload: %s", e)
        return 2

    result = jobs.create(args.job).run(payload)
    _print_json(result.body)
    return 0 if result.ok else 1


def _cmd_discover(jobs: JobFactory) -> int:
    def on_round(body: dict[str, Any]) -> None:
        logger.info("Added %d, skipped %d, %d remaining", body["added"], body["skipped"], body["remaining"])

    try:
        totals = drain_discovery(jobs.create("discover-games"), on_round)
    except RuntimeError as e:
        logger.error("Discovery failed: %s", e)
        return 1
    _print_json(totals)
    return 0


def _cmd_backfill(jobs: JobFactory) -> int:
    job = jobs.create("backfill-max-players")
    after: int | None = None
    updated = 0
    while True:
        result = job.run({"afterAppId": after})
        if not result.ok:
            logger.error("Backfill failed after app %s: %s", after, result.body.get("error"))
            return 1
        updated += result.body["gamesUpdated"]
        after = result.body["nextAfterAppId"]
        if after is None:
            break
        logger.info("Backfilled up to app %d", after)
    _print_json({"gamesUpdated": updated})
    return 0


def _cmd_picks(args: argparse.Namespace, db: Database) -> int:
    dashboard = Dashboard(DataAccess(db), LocalStore(config.LOCAL_STATE_FILE))
    if not dashboard.refresh():
        logger.error("Could not load dashboard data: %s", dashboard.error)
        return 1

    selected = len(dashboard.selected_player_ids)
    for entry in dashboard.quick_picks(args.limit):
        score = calculate_recommendation_score(entry, selected)
        missing = ", ".join(p.name for p in entry.missing_players) or "-"
        print(f"{score:>4}  {entry.game.name}  (missing: {missing})")

    stats = dashboard.library_stats()
    print(f"\n{stats.total_games} games, {stats.owned_by_all} owned by everyone, {stats.free_games} free")
    return 0


def main() -> None:
    """Main application execution flow."""
    args = _build_parser().parse_args()
    setup_logging(args.log_level or config.LOG_LEVEL, config.LOG_FILE)

    logger.debug("%s %s, data in %s", __app_name__, __version__, config.DATA_DIR)

    db = Database(config.DATABASE_FILE)
    try:
        if args.command == "serve":
            code = _cmd_serve(args, db)
        elif args.command == "seed-players":
            written = db.seed_players(config.PLAYERS)
            logger.info("Seeded %d player(s)", written)
            code = 0
        elif args.command == "picks":
            code = _cmd_picks(args, db)
        else:
            jobs = JobFactory(db, config)
            if args.command == "run":
                code = _cmd_run(args, jobs)
            elif args.command == "discover":
                code = _cmd_discover(jobs)
            else:
                code = _cmd_backfill(jobs)
    finally:
        db.close()

    sys.exit(code)


if __name__ == "__main__":
    main()
