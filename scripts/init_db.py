#!/usr/bin/env python3
"""
Create the SkinInsight schema on a fresh database.

    python scripts/init_db.py           # create missing tables
    python scripts/init_db.py --drop    # wipe and recreate (local dev only)

Databases created this way should be marked as current for alembic with
`alembic stamp head` so later revisions apply cleanly.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import get_settings
from app.database import engine, init_db

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("init_db")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--drop", action="store_true", help="drop every SkinInsight table before creating")
    return parser.parse_args(argv)


async def main(argv=None) -> None:
    args = parse_args(argv)
    # only the host part; credentials stay out of the log
    logger.info(f"Target database: {get_settings().database_url.rsplit('@', 1)[-1]}")
    try:
        tables = await init_db(drop_existing=args.drop)
    finally:
        await engine.dispose()

    for name in tables:
        logger.info(f"  - {name}")
    logger.info(f"{len(tables)} tables ready. Run `alembic stamp head` to mark the schema current.")


if __name__ == "__main__":
    asyncio.run(main())
