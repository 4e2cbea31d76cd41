"""Exclusive wrapper around one live backend connection."""
import asyncio
from typing import Any, Awaitable, Callable, List, Optional

import asyncpg

from shared.observability.logger import get_logger
from .config import DatabaseConfig
from .errors import (
    ConnectionCreationError,
    ConnectionReleasedError,
    QueryExecutionError,
    TransactionError,
)

logger = get_logger("shared.database.connection")

DEFAULT_CONNECT_TIMEOUT = 10.0

# Driver errors that mean the statement or the session failed
DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

ReleaseCallback = Callable[[asyncpg.Connection], Awaitable[None]]


async def open_connection(
    config: DatabaseConfig,
    timeout: float = DEFAULT_CONNECT_TIMEOUT,
) -> asyncpg.Connection:
    """Open one raw connection to the configured backend.

    Args:
        config: Resolved database configuration
        timeout: Seconds to wait for the connection handshake

    Returns:
        Live asyncpg connection

    Raises:
        ConnectionCreationError: If the backend cannot be reached or refuses
            the session
    """
    try:
        return await asyncpg.connect(
            host=config.host,
            port=config.port,
            user=config.user,
            password=config.password.get_secret_value(),
            database=config.database,
            timeout=timeout,
        )
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as e:
        raise ConnectionCreationError(f"Connection creation failed: {e}") from e


class Transaction:
    """A started transaction scope on a checked-out connection.

    Use as an async context manager to commit on success and roll back
    when the block raises:

        tx = await conn.begin_transaction()
        async with tx:
            await tx.execute("UPDATE shops SET rating = $1 WHERE id = $2", 4.5, shop_id)
    """

    def __init__(self, raw: asyncpg.Connection, tx: Any):
        self._raw = raw
        self._tx = tx
        self._finished = False

    @property
    def is_active(self) -> bool:
        return not self._finished

    async def execute(self, query: str, *args: Any) -> List[asyncpg.Record]:
        """Run a statement inside the transaction and return its rows."""
        if self._finished:
            raise TransactionError("Transaction is already finished")
        try:
            return await self._raw.fetch(query, *args)
        except DRIVER_ERRORS as e:
            raise QueryExecutionError(f"Query execution failed: {e}") from e

    async def commit(self) -> None:
        if self._finished:
            raise TransactionError("Transaction is already finished")
        try:
            await self._tx.commit()
        except DRIVER_ERRORS as e:
            raise TransactionError(f"Transaction commit failed: {e}") from e
        finally:
            self._finished = True

    async def rollback(self) -> None:
        if self._finished:
            return
        try:
            await self._tx.rollback()
        except DRIVER_ERRORS as e:
            raise TransactionError(f"Transaction rollback failed: {e}") from e
        finally:
            self._finished = True

    async def __aenter__(self) -> "Transaction":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            if not self._finished:
                await self.commit()
            return
        try:
            await self.rollback()
        except TransactionError as e:
            # The error that aborted the block is the one callers need
            logger.error("Transaction rollback failed", data={
                "error": str(e),
                "cause": repr(exc),
            })


class Connection:
    """Owns one live backend session for exactly one caller at a time.

    A Connection handed out by a pool goes back to that pool when released,
    either explicitly with release() or on leaving an ``async with`` block.
    A single instance must never be used from two tasks concurrently.
    """

    def __init__(self, raw: asyncpg.Connection, release: Optional[ReleaseCallback] = None):
        self._raw: Optional[asyncpg.Connection] = raw
        self._release = release

    def _require_raw(self) -> asyncpg.Connection:
        if self._raw is None:
            raise ConnectionReleasedError("Connection has already been returned to the pool")
        return self._raw

    async def execute(self, query: str, *args: Any) -> List[asyncpg.Record]:
        """Run a statement outside any explicit transaction.

        Args:
            query: SQL text, with $1..$n placeholders for args
            *args: Query parameters

        Returns:
            Result rows (empty for statements that return none)

        Raises:
            QueryExecutionError: If the backend rejects the statement or the
                session drops
        """
        raw = self._require_raw()
        try:
            return await raw.fetch(query, *args)
        except DRIVER_ERRORS as e:
            raise QueryExecutionError(f"Query execution failed: {e}") from e

    async def begin_transaction(self) -> Transaction:
        """Start a transaction on this connection.

        Raises:
            TransactionError: If a transaction is already open or the
                session cannot start one
        """
        raw = self._require_raw()
        if raw.is_in_transaction():
            raise TransactionError("Transaction start failed: connection is already in a transaction")
        tx = raw.transaction()
        try:
            await tx.start()
        except DRIVER_ERRORS as e:
            raise TransactionError(f"Transaction start failed: {e}") from e
        return Transaction(raw, tx)

    def is_connected(self) -> bool:
        """Report whether a live handle is held. Does not round-trip."""
        return self._raw is not None and not self._raw.is_closed()

    @property
    def raw_connection(self) -> asyncpg.Connection:
        return self._require_raw()

    async def release(self) -> None:
        """End this caller's ownership. Safe to call more than once."""
        raw, self._raw = self._raw, None
        release, self._release = self._release, None
        if raw is None:
            return
        if release is not None:
            await release(raw)
        elif not raw.is_closed():
            await raw.close()

    async def __aenter__(self) -> "Connection":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()
