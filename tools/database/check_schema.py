#!/usr/bin/env python
"""Check database schema."""
import asyncio
import sys
import os

# Add repository root to Python path
repo_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, repo_root)

from shared.database.config import DatabaseConfig
from shared.database.connection import open_connection

TABLES = ("shops", "users")


async def check_schema():
    conn = await open_connection(DatabaseConfig.from_env())

    for table in TABLES:
        print(f"=== {table} table columns ===")
        result = await conn.fetch("""
            SELECT column_name, data_type, is_nullable
            FROM information_schema.columns
            WHERE table_name = $1
            ORDER BY ordinal_position
        """, table)
        if not result:
            print("  (missing)")
        for row in result:
            nullable = "" if row["is_nullable"] == "YES" else " NOT NULL"
            print(f"  {row['column_name']}: {row['data_type']}{nullable}")
        print()

    await conn.close()


if __name__ == "__main__":
    asyncio.run(check_schema())
