#!/usr/bin/env python3
"""
Manual Game Sync Script.

Command-line interface for previewing, syncing and finding games in the
SQL document store at DATABASE_URL (the store filled by seed_sync_data.py).
"""
import os
import sys
import asyncio
import argparse
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.database import build_engine, init_db
from app.core.exceptions import StoreUnavailableError
from app.core.logging import configure_logging
from app.services.store.sql import SqlDocumentStore
from app.services.sync import formatting
from app.services.sync.lookup import GameLookupService
from app.services.sync.orchestrator import SyncOrchestrator


def open_store() -> SqlDocumentStore:
    """Open the SQL store at DATABASE_URL, creating the table if needed."""
    engine = build_engine(os.getenv("DATABASE_URL") or settings.DATABASE_URL)
    init_db(engine)
    return SqlDocumentStore(sessionmaker(bind=engine), settings.environments)


async def preview(game_id: str, source: str):
    orchestrator = SyncOrchestrator(open_store())
    report = await orchestrator.preview_game(game_id, source)
    print(formatting.format_preview(report))


async def sync(game_id: str, source: str, target: str):
    orchestrator = SyncOrchestrator(open_store())
    report = await orchestrator.sync_game(game_id, source, target)
    print(formatting.format_commit(report))


async def find(team_name: str, start_date: str, end_date: str, environment: str):
    lookup = GameLookupService(open_store())
    games = await lookup.find_by_team_name_and_date_range(
        environment, team_name, start_date=start_date, end_date=end_date
    )
    print(formatting.format_games(games, team_name, environment))


async def main():
    parser = argparse.ArgumentParser(
        description="Preview, sync or find games across environments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview what syncing a game would copy
  python scripts/sync_game.py --preview 90a1b2c3d4e5f6789abcdef0

  # Sync a game from Production to Local
  python scripts/sync_game.py --sync 90a1b2c3d4e5f6789abcdef0

  # Find Liverpool games in January 2024
  python scripts/sync_game.py --find Liverpool --start 2024-01-01 --end 2024-01-31
        """
    )

    parser.add_argument('--preview', metavar='GAME_ID', help='Preview a game sync (dry run)')
    parser.add_argument('--sync', metavar='GAME_ID', help='Sync a game and its dependencies')
    parser.add_argument('--find', metavar='TEAM', help='Find games by team name')
    parser.add_argument('--start', default=None, help='Start date for --find (YYYY-MM-DD)')
    parser.add_argument('--end', default=None, help='End date for --find (YYYY-MM-DD)')
    parser.add_argument(
        '--source',
        default=settings.DEFAULT_SOURCE_ENVIRONMENT,
        help=f'Source environment (default: {settings.DEFAULT_SOURCE_ENVIRONMENT})'
    )
    parser.add_argument(
        '--target',
        default=settings.DEFAULT_TARGET_ENVIRONMENT,
        help=f'Target environment (default: {settings.DEFAULT_TARGET_ENVIRONMENT})'
    )

    args = parser.parse_args()
    configure_logging(level=settings.LOG_LEVEL, json_output=False)

    try:
        if args.preview:
            await preview(args.preview, args.source)
        elif args.sync:
            await sync(args.sync, args.source, args.target)
        elif args.find:
            await find(args.find, args.start, args.end, args.source)
        else:
            parser.print_help()
    except (StoreUnavailableError, ValueError) as e:
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
