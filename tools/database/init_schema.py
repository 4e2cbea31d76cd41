#!/usr/bin/env python
"""Create the shops and users tables if they do not exist."""
import asyncio
import sys
import os

# Add repository root to Python path
repo_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, repo_root)

from shared.database.config import DatabaseConfig
from shared.database.connection import open_connection

SCHEMA = [
    "CREATE EXTENSION IF NOT EXISTS pgcrypto",
    """
    CREATE TABLE IF NOT EXISTS shops (
        id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
        name VARCHAR(255) NOT NULL,
        address TEXT NOT NULL,
        phone VARCHAR(50),
        latitude DOUBLE PRECISION NOT NULL CHECK (latitude BETWEEN -90 AND 90),
        longitude DOUBLE PRECISION NOT NULL CHECK (longitude BETWEEN -180 AND 180),
        region VARCHAR(100) NOT NULL DEFAULT '',
        spiciness INTEGER NOT NULL DEFAULT 50 CHECK (spiciness BETWEEN 0 AND 100),
        stimulation INTEGER NOT NULL DEFAULT 50 CHECK (stimulation BETWEEN 0 AND 100),
        aroma INTEGER NOT NULL DEFAULT 50 CHECK (aroma BETWEEN 0 AND 100),
        rating DOUBLE PRECISION NOT NULL DEFAULT 0 CHECK (rating BETWEEN 0 AND 5),
        description TEXT,
        image_url TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_shops_region ON shops (region)",
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
        username VARCHAR(100) NOT NULL UNIQUE,
        email VARCHAR(255) NOT NULL UNIQUE,
        display_name VARCHAR(255) NOT NULL,
        bio TEXT,
        pref_spiciness INTEGER CHECK (pref_spiciness BETWEEN 0 AND 100),
        pref_stimulation INTEGER CHECK (pref_stimulation BETWEEN 0 AND 100),
        pref_aroma INTEGER CHECK (pref_aroma BETWEEN 0 AND 100),
        is_public BOOLEAN NOT NULL DEFAULT TRUE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
]


async def init_schema():
    conn = await open_connection(DatabaseConfig.from_env())

    print("Creating tables...")
    for statement in SCHEMA:
        await conn.execute(statement)

    await conn.close()
    print("Schema ready!")


if __name__ == "__main__":
    asyncio.run(init_schema())
