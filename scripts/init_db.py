# scripts/init_db.py
"""
Script to initialize database tables. Run from project root:
    python scripts/init_db.py [--reset]
"""
import asyncio
import sys

from classgroups.infrastructure import models  # noqa: F401
from classgroups.infrastructure.db.session import create_tables, drop_tables, engine


async def init(reset: bool = False):
    if reset:
        await drop_tables()
    await create_tables()
    await engine.dispose()
    print("DB reset and initialized" if reset else "DB initialized")


if __name__ == "__main__":
    asyncio.run(init(reset="--reset" in sys.argv[1:]))
