#!/usr/bin/env python3
"""
Exercise the connection pool with concurrent workers against a real database.

Each worker loops acquire -> SELECT 1 -> short sleep -> release. At the end the
pool must be back at full capacity with nothing checked out.

Usage:
    python scripts/pool_stress.py [workers] [iterations]

Database connection details come from DB_HOST, DB_PORT, DB_NAME, DB_USER and
DB_PASSWORD; the pool size from DB_POOL_SIZE.
"""

import sys
import asyncio
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import get_settings
from shared.database.errors import AcquisitionTimeoutError, DeadConnectionError
from shared.database.pool import create_pool, close_pool
from shared.observability.logger import get_logger

logger = get_logger("scripts.pool_stress")


async def worker(pool, worker_id: int, iterations: int, timeout: float, counters: dict):
    for _ in range(iterations):
        try:
            async with pool.connection(timeout) as conn:
                await conn.execute("SELECT 1")
                await asyncio.sleep(0.01)
            counters["ok"] += 1
        except AcquisitionTimeoutError:
            counters["timeouts"] += 1
        except DeadConnectionError:
            counters["dead"] += 1
            logger.warning("Worker got a dead connection", data={"worker": worker_id})


async def run(workers: int, iterations: int):
    settings = get_settings()
    pool = await create_pool(settings)
    counters = {"ok": 0, "timeouts": 0, "dead": 0}
    loop = asyncio.get_running_loop()

    try:
        started = loop.time()
        await asyncio.gather(*(
            worker(pool, n, iterations, settings.db_acquire_timeout, counters)
            for n in range(workers)
        ))
        elapsed = loop.time() - started
        stats = pool.stats()
    finally:
        await close_pool(pool)

    print(f"\n{'='*60}")
    print(f"Workers: {workers}  Iterations: {iterations}  Pool size: {stats['pool_size']}")
    print(f"{'='*60}")
    print(f"Completed:  {counters['ok']}")
    print(f"Timeouts:   {counters['timeouts']}")
    print(f"Dead:       {counters['dead']}")
    print(f"Elapsed:    {elapsed:.2f}s")
    print(f"Final pool: active={stats['active']} available={stats['available']} "
          f"discarded={stats['discarded']}")
    print(f"\n{'='*60}\n")

    return stats["active"] == 0 and stats["available"] == stats["pool_size"] - stats["discarded"]


if __name__ == "__main__":
    workers = int(sys.argv[1]) if len(sys.argv) > 1 else 5
    iterations = int(sys.argv[2]) if len(sys.argv) > 2 else 10

    healthy = asyncio.run(run(workers, iterations))
    sys.exit(0 if healthy else 1)
