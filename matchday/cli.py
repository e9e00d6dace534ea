"""
Command-line entry point.

Usage:
    matchday serve [--host HOST] [--port PORT] [--reload]
    matchday sync-today
    matchday sync-events FIXTURE_ID
    matchday init-db
"""

import argparse
import asyncio
import json
import logging
import sys

from matchday.config import get_settings

logger = logging.getLogger("matchday.cli")


def _configure_logging() -> None:
    from matchday.main import configure_logging

    configure_logging()


async def _sync_today() -> dict:
    from matchday.database import AsyncSessionLocal, close_db, init_db
    from matchday.etl.api_football import APIFootballClient
    from matchday.etl.pipeline import sync_today_fixtures

    await init_db()
    try:
        async with AsyncSessionLocal() as session:
            async with APIFootballClient() as client:
                return await sync_today_fixtures(session, client)
    finally:
        await close_db()


async def _sync_events(fixture_id: int) -> list[dict]:
    from matchday.database import AsyncSessionLocal, close_db, init_db
    from matchday.etl.api_football import APIFootballClient
    from matchday.etl.pipeline import ETLPipeline

    await init_db()
    try:
        async with AsyncSessionLocal() as session:
            async with APIFootballClient() as client:
                return await ETLPipeline(client, session).sync_fixture_events(fixture_id)
    finally:
        await close_db()


async def _init_db() -> None:
    from matchday.database import close_db, init_db

    await init_db()
    await close_db()


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "matchday.main:app",
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        reload=args.reload,
    )
    return 0


def cmd_sync_today(args: argparse.Namespace) -> int:
    _configure_logging()
    result = asyncio.run(_sync_today())
    print(json.dumps(result, indent=2))
    return 1 if result.get("error") else 0


def cmd_sync_events(args: argparse.Namespace) -> int:
    from matchday.errors import MatchdayError

    _configure_logging()
    try:
        events = asyncio.run(_sync_events(args.fixture_id))
    except MatchdayError as e:
        logger.error(f"Events sync for fixture {args.fixture_id} failed: {e}")
        return 1
    print(json.dumps({"fixture_id": args.fixture_id, "events": len(events)}, indent=2))
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    _configure_logging()
    asyncio.run(_init_db())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="matchday",
        description="Matchday dashboard: API server and sync jobs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, help="Port (default: PORT setting)")
    serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    serve.set_defaults(func=cmd_serve)

    sync_today = subparsers.add_parser("sync-today", help="Sync today's fixtures once")
    sync_today.set_defaults(func=cmd_sync_today)

    sync_events = subparsers.add_parser("sync-events", help="Refresh the cached events of one fixture")
    sync_events.add_argument("fixture_id", type=int, help="API-Football fixture ID")
    sync_events.set_defaults(func=cmd_sync_events)

    init_db = subparsers.add_parser("init-db", help="Create database tables")
    init_db.set_defaults(func=cmd_init_db)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
