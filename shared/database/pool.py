"""Database connection pool management.

ConnectionPool keeps a fixed number of connections to one backend. Callers
check a connection out with acquire(), which waits up to a timeout when every
connection is busy, and hand it back with release() (or by leaving an
``async with`` block). One asyncio.Condition guards the idle queue and the
active counter together.
"""
import asyncio
from collections import deque
from contextlib import asynccontextmanager
from functools import partial
from typing import Any, AsyncIterator, Awaitable, Callable, Deque, Dict, Optional

import asyncpg

from config.settings import Settings
from shared.observability.logger import get_logger
from .config import DatabaseConfig
from .connection import Connection, open_connection
from .errors import (
    AcquisitionTimeoutError,
    ConfigurationError,
    ConnectionCreationError,
    DeadConnectionError,
    PoolClosedError,
)

logger = get_logger("shared.database.pool")

DEFAULT_ACQUIRE_TIMEOUT = 5.0

ConnectionFactory = Callable[[DatabaseConfig], Awaitable[asyncpg.Connection]]


class _PoolState:
    """Mutable pool state. Every field is guarded by ``condition``."""

    def __init__(self, pool_size: int, closed: bool = False):
        self.pool_size = pool_size
        self.active = 0
        self.discarded = 0
        self.closed = closed
        self.available: Deque[asyncpg.Connection] = deque()
        self.condition = asyncio.Condition()


class ConnectionPool:
    """Fixed-size pool of connections with timed, exclusive checkout.

    Build it with ``await ConnectionPool.create(config, pool_size)``; all
    connections are opened up front. A connection found dead at checkout is
    discarded and not replaced, so capacity shrinks by one for each.
    """

    def __init__(
        self,
        config: DatabaseConfig,
        pool_size: int,
        connect: Optional[ConnectionFactory] = None,
    ):
        self._config = config
        self._connect = connect or open_connection
        self._state = _PoolState(pool_size)

    @classmethod
    async def create(
        cls,
        config: DatabaseConfig,
        pool_size: int,
        connect: Optional[ConnectionFactory] = None,
    ) -> "ConnectionPool":
        """Create a fully populated pool.

        Args:
            config: Database connection target
            pool_size: Number of connections to open (must be positive)
            connect: Raw connection factory, defaults to open_connection

        Returns:
            Pool with pool_size idle connections and none active

        Raises:
            ConfigurationError: If pool_size is not positive
            ConnectionCreationError: If any connection fails to open. Connections
                opened before the failure are closed again.
        """
        if pool_size <= 0:
            raise ConfigurationError("Pool size must be greater than 0")

        pool = cls(config, pool_size, connect)
        await pool._initialize()
        return pool

    async def _initialize(self) -> None:
        state = self._state
        opened = []
        try:
            for _ in range(state.pool_size):
                raw = await self._connect(self._config)
                opened.append(raw)
                if raw.is_closed():
                    raise ConnectionCreationError("Failed to open database connection")
        except Exception as e:
            logger.error("Connection pool initialization failed", data={
                "host": self._config.host,
                "port": self._config.port,
                "database": self._config.database,
                "opened": len(opened),
                "error": str(e),
            })
            await _close_all(opened)
            raise ConnectionCreationError(
                f"Failed to initialize connection pool: {e}"
            ) from e

        async with state.condition:
            state.available.extend(opened)

        logger.info("Connection pool initialized", data={
            "pool_size": state.pool_size,
            "host": self._config.host,
            "database": self._config.database,
        })

    async def acquire(self, timeout: float = DEFAULT_ACQUIRE_TIMEOUT) -> Connection:
        """Check out an idle connection, waiting up to ``timeout`` seconds.

        Returns:
            Connection owned exclusively by the caller until released

        Raises:
            AcquisitionTimeoutError: If nothing became free before the deadline
            DeadConnectionError: If the connection taken was already closed;
                it is dropped from the pool and the caller may retry
            PoolClosedError: If the pool is closed
        """
        state = self._state
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        async with state.condition:
            while not state.available:
                if state.closed:
                    raise PoolClosedError("Connection pool is closed")
                remaining = deadline - loop.time()
                if remaining <= 0:
                    logger.warning("Connection acquisition timeout", data={
                        "timeout_seconds": timeout,
                        "pool_size": state.pool_size,
                        "active": state.active,
                    })
                    raise AcquisitionTimeoutError(
                        f"Connection acquisition timeout after {timeout}s"
                    )
                try:
                    await asyncio.wait_for(state.condition.wait(), remaining)
                except asyncio.TimeoutError:
                    # Deadline is re-checked at the top of the loop
                    continue

            raw = state.available.popleft()
            state.active += 1

            if raw.is_closed():
                state.active -= 1
                state.discarded += 1
                logger.warning("Discarded dead pooled connection", data={
                    "pool_size": state.pool_size,
                    "discarded": state.discarded,
                })
                raise DeadConnectionError("Retrieved connection is not open")

        return Connection(raw, release=partial(_release, state))

    async def release(self, connection: Connection) -> None:
        """Return a checked-out connection to the pool it came from."""
        await connection.release()

    @asynccontextmanager
    async def connection(
        self, timeout: float = DEFAULT_ACQUIRE_TIMEOUT
    ) -> AsyncIterator[Connection]:
        """Acquire a connection for the duration of an ``async with`` block."""
        conn = await self.acquire(timeout)
        try:
            yield conn
        finally:
            await conn.release()

    async def move(self) -> "ConnectionPool":
        """Transfer this pool's state to a new pool object.

        Outstanding connections keep working and return to the new owner.
        This object is left as an empty, closed pool.
        """
        state = self._state
        async with state.condition:
            moved = type(self)(self._config, state.pool_size, self._connect)
            moved._state = state
            self._state = _PoolState(0, closed=True)
        return moved

    async def close(self) -> None:
        """Close every idle connection and refuse further checkouts.

        Does not wait for checked-out connections; they are closed when their
        holders release them. Calling close() again is a no-op.
        """
        state = self._state
        async with state.condition:
            if state.closed:
                return
            state.closed = True
            idle = list(state.available)
            state.available.clear()
            outstanding = state.active
            state.condition.notify_all()

        await _close_all(idle)
        logger.info("Connection pool closed", data={
            "closed_idle": len(idle),
            "outstanding": outstanding,
        })

    @property
    def pool_size(self) -> int:
        return self._state.pool_size

    @property
    def active_connections(self) -> int:
        return self._state.active

    @property
    def available_connections(self) -> int:
        return len(self._state.available)

    @property
    def closed(self) -> bool:
        return self._state.closed

    def stats(self) -> Dict[str, Any]:
        """Return a point-in-time snapshot for monitoring."""
        state = self._state
        return {
            "pool_size": state.pool_size,
            "active": state.active,
            "available": len(state.available),
            "discarded": state.discarded,
            "closed": state.closed,
        }

    async def __aenter__(self) -> "ConnectionPool":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


async def _release(state: _PoolState, raw: asyncpg.Connection) -> None:
    """Give a slot back to ``state`` and wake one waiter."""
    reusable = not raw.is_closed()
    async with state.condition:
        keep = reusable and not state.closed
        if keep:
            state.available.append(raw)
        elif not reusable:
            state.discarded += 1
        state.active -= 1
        state.condition.notify(1)

    if reusable and not keep:
        await _close_all([raw])


async def _close_all(connections) -> None:
    for raw in connections:
        try:
            await raw.close()
        except Exception as e:
            logger.warning("Failed to close connection", data={"error": str(e)})


async def create_pool(
    settings: Settings,
    config: Optional[DatabaseConfig] = None,
    connect: Optional[ConnectionFactory] = None,
) -> ConnectionPool:
    """Create database connection pool.

    Args:
        settings: Application settings with pool sizing
        config: Database target, loaded from the environment when omitted
        connect: Raw connection factory override

    Returns:
        Fully populated connection pool
    """
    config = config or DatabaseConfig.from_env()
    if connect is None:
        connect = partial(open_connection, timeout=settings.db_connect_timeout)
    return await ConnectionPool.create(config, settings.db_pool_size, connect)


async def close_pool(pool: ConnectionPool):
    """Close database connection pool.

    Args:
        pool: Connection pool to close
    """
    await pool.close()
