"""In-memory stand-ins for asyncpg connections used by the pool tests."""
from typing import List, Optional

import pytest

from shared.database.config import DatabaseConfig
from shared.database.errors import ConnectionCreationError


class FakeTransaction:
    def __init__(self, raw: "FakeRawConnection"):
        self.raw = raw
        self.state = "new"

    async def start(self):
        self.raw.in_transaction = True
        self.state = "started"

    async def commit(self):
        self.raw.in_transaction = False
        self.state = "committed"

    async def rollback(self):
        self.raw.in_transaction = False
        if self.raw.rollback_error is not None:
            raise self.raw.rollback_error
        self.state = "rolled_back"


class FakeRawConnection:
    """Just enough of asyncpg.Connection for Connection and ConnectionPool."""

    def __init__(self, name: str):
        self.name = name
        self.closed = False
        self.in_transaction = False
        self.rows: list = []
        self.error: Optional[Exception] = None
        self.rollback_error: Optional[Exception] = None
        self.queries: list = []
        self.transactions: List[FakeTransaction] = []

    def is_closed(self) -> bool:
        return self.closed

    async def close(self):
        self.closed = True

    async def fetch(self, query, *args):
        self.queries.append((query, args))
        if self.error is not None:
            raise self.error
        return list(self.rows)

    def is_in_transaction(self) -> bool:
        return self.in_transaction

    def transaction(self) -> FakeTransaction:
        tx = FakeTransaction(self)
        self.transactions.append(tx)
        return tx


class FakeConnector:
    """Connection factory that records every connection it opens.

    fail_on is the 1-based attempt that raises; dead_on returns an already
    closed connection on that attempt.
    """

    def __init__(self, fail_on: Optional[int] = None, dead_on: Optional[int] = None):
        self.fail_on = fail_on
        self.dead_on = dead_on
        self.attempts = 0
        self.opened: List[FakeRawConnection] = []

    async def __call__(self, config: DatabaseConfig) -> FakeRawConnection:
        self.attempts += 1
        if self.attempts == self.fail_on:
            raise ConnectionCreationError("Connection creation failed: connection refused")
        raw = FakeRawConnection(f"conn-{self.attempts}")
        raw.closed = self.attempts == self.dead_on
        self.opened.append(raw)
        return raw


@pytest.fixture
def db_config() -> DatabaseConfig:
    return DatabaseConfig(
        host="localhost",
        port=5432,
        database="spice",
        user="spice",
        password="secret",
        _env_file=None,
    )


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def raw_conn() -> FakeRawConnection:
    return FakeRawConnection("raw")


@pytest.fixture
def make_connector():
    return FakeConnector


@pytest.fixture
def mock_pool(raw_conn):
    """Pool double that always hands out a Connection over raw_conn."""
    from unittest.mock import AsyncMock, MagicMock
    from shared.database.connection import Connection

    pool = MagicMock()
    pool.acquire = AsyncMock(side_effect=lambda timeout: Connection(raw_conn))
    pool.release = AsyncMock()
    return pool
