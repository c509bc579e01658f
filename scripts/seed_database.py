#!/usr/bin/env python
"""
Seed the BlogHub database.

Usage:
    python scripts/seed_database.py                 # admin, settings and demo data
    python scripts/seed_database.py --no-demo       # admin and settings only
    python scripts/seed_database.py --export data/  # also write the demo dataset to files
"""

import argparse
import asyncio

import structlog

from bloghub.config.logging import configure_logging
from bloghub.data.generators import DataGenerator
from bloghub.database.connection import close_database, get_db, init_database
from bloghub.ingestion.seed_db import seed_database

logger = structlog.get_logger("seed_database")


async def main(args: argparse.Namespace) -> None:
    await init_database(create_tables=True)
    try:
        async with get_db() as db:
            await seed_database(
                db,
                with_demo_data=not args.no_demo,
                n_users=args.users,
                n_blogs=args.blogs,
                seed=args.seed,
            )
    finally:
        await close_database()

    if args.export:
        DataGenerator(seed=args.seed, output_dir=args.export).generate_all(
            n_users=args.users, n_blogs=args.blogs, save=True
        )
        logger.info("Demo dataset exported", output_dir=args.export)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the BlogHub database")
    parser.add_argument("--no-demo", action="store_true", help="Skip the generated demo dataset")
    parser.add_argument("--users", type=int, default=100, help="Demo users to generate (default: 100)")
    parser.add_argument("--blogs", type=int, default=300, help="Demo blogs to generate (default: 300)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--export", metavar="DIR", help="Also write the demo dataset as Parquet and CSV")

    configure_logging()
    asyncio.run(main(parser.parse_args()))
