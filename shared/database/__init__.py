"""Database infrastructure."""
from .base_repository import BaseRepository
from .config import DatabaseConfig, load_database_config
from .connection import Connection, Transaction, open_connection
from .errors import (
    AcquisitionTimeoutError,
    ConfigurationError,
    ConnectionCreationError,
    ConnectionReleasedError,
    DatabaseError,
    DeadConnectionError,
    PoolClosedError,
    QueryExecutionError,
    TransactionError,
)
from .pool import ConnectionPool, close_pool, create_pool

__all__ = [
    "BaseRepository",
    "DatabaseConfig",
    "load_database_config",
    "Connection",
    "Transaction",
    "open_connection",
    "ConnectionPool",
    "create_pool",
    "close_pool",
    "DatabaseError",
    "ConfigurationError",
    "ConnectionCreationError",
    "AcquisitionTimeoutError",
    "DeadConnectionError",
    "PoolClosedError",
    "ConnectionReleasedError",
    "QueryExecutionError",
    "TransactionError",
]
