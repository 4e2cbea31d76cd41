"""Base repository with connection pooling."""
from .connection import Connection
from .pool import DEFAULT_ACQUIRE_TIMEOUT, ConnectionPool


class BaseRepository:
    """Base repository with connection pooling.

    Every method that talks to the database borrows one connection and gives
    it back in a ``finally`` block:

        conn = await self.get_connection()
        try:
            rows = await conn.execute("SELECT ...")
        finally:
            await self.release_connection(conn)
    """

    def __init__(self, pool: ConnectionPool, acquire_timeout: float = DEFAULT_ACQUIRE_TIMEOUT):
        """Initialize repository with connection pool.

        Args:
            pool: Shared connection pool
            acquire_timeout: Seconds to wait for a free connection
        """
        self.pool = pool
        self.acquire_timeout = acquire_timeout

    async def get_connection(self) -> Connection:
        """Get connection from pool.

        Raises:
            AcquisitionTimeoutError: If the pool stays exhausted past the timeout
            DeadConnectionError: If the connection taken was already closed
        """
        return await self.pool.acquire(self.acquire_timeout)

    async def release_connection(self, conn: Connection):
        """Release connection back to pool."""
        await self.pool.release(conn)
