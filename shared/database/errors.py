"""Database error taxonomy.

Every failure in the connection layer surfaces as a subclass of
DatabaseError so callers can catch the whole family or one kind.
"""


class DatabaseError(Exception):
    """Base exception for connection, pool and query failures."""

    pass


class ConfigurationError(DatabaseError):
    """Required database settings are missing or invalid."""

    pass


class ConnectionCreationError(DatabaseError):
    """The backend refused or failed to open a connection."""

    pass


class AcquisitionTimeoutError(DatabaseError):
    """No pooled connection became free within the caller's timeout."""

    pass


class DeadConnectionError(DatabaseError):
    """A pooled connection was found closed at checkout time."""

    pass


class PoolClosedError(DatabaseError):
    """The pool has been torn down."""

    pass


class ConnectionReleasedError(DatabaseError):
    """A connection wrapper was used after being returned to its pool."""

    pass


class QueryExecutionError(DatabaseError):
    """The backend reported a failure while running a statement."""

    pass


class TransactionError(DatabaseError):
    """A transaction could not be started, committed or rolled back."""

    pass
