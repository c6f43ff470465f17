#!/usr/bin/env python3
"""
Seed the SQL document store with sample data.

Seeds every configured environment that has no teams yet:
- Production: full sample data set plus extra teams, games and players
- Local: 2 teams, 1 game, 3 players
"""
import os
import sys
import asyncio
import argparse
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import logging
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.database import build_engine, init_db
from app.services.sample_data import SampleDataInitializer
from app.services.store.sql import SqlDocumentStore

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def get_database_url():
    """Get database URL from environment or settings."""
    return os.getenv("DATABASE_URL") or settings.DATABASE_URL


async def seed(reset: bool) -> None:
    db_url = get_database_url()
    logger.info(f"Connecting to database: {db_url[:30]}...")

    engine = build_engine(db_url)
    init_db(engine)
    store = SqlDocumentStore(sessionmaker(bind=engine), settings.environments)

    try:
        if reset:
            for environment in store.list_environments():
                await store.clear_environment(environment)

        results = await SampleDataInitializer(store).initialize()

        logger.info("\n" + "=" * 50)
        if results:
            logger.info(f"Seeding completed successfully for {', '.join(results)} ✓")
        else:
            logger.info("Nothing to seed, every environment already has data ✓")
        logger.info("=" * 50)
    finally:
        engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Seed the SQL document store with sample data")
    parser.add_argument(
        '--reset',
        action='store_true',
        help='Clear every environment before seeding'
    )
    args = parser.parse_args()

    logger.info("Starting data seeding...")
    try:
        asyncio.run(seed(args.reset))
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
