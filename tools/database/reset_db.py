#!/usr/bin/env python
"""Reset database by dropping all tables."""
import asyncio
import sys
import os

# Add repository root to Python path
repo_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, repo_root)

from shared.database.config import DatabaseConfig
from shared.database.connection import open_connection


async def reset_db():
    config = DatabaseConfig.from_env()
    conn = await open_connection(config)

    print(f"Dropping all tables in {config.database}...")
    await conn.execute("DROP TABLE IF EXISTS users CASCADE")
    await conn.execute("DROP TABLE IF EXISTS shops CASCADE")

    await conn.close()
    print("Database reset complete! Run tools/database/init_schema.py to recreate.")


if __name__ == "__main__":
    asyncio.run(reset_db())
