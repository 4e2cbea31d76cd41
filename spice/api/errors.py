"""Translate service and database errors into HTTP errors."""

from fastapi import HTTPException, status

from shared.database.errors import (
    AcquisitionTimeoutError,
    DatabaseError,
    DeadConnectionError,
    PoolClosedError,
)
from shared.observability.logger import get_logger
from spice.errors import ConflictError, NotFoundError, ReadOnlyRepositoryError

logger = get_logger("spice.api.errors")


def error_response(status_code: int, code: str, message: str, details: dict = None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "error": {
                "code": code,
                "message": message,
                "details": details or {}
            }
        }
    )


def to_http_exception(exc: Exception, operation: str) -> HTTPException:
    """Map an exception raised while serving ``operation`` to an HTTPException.

    Pool backpressure (timeout, dead connection, closed pool) becomes 503 so
    clients can retry; other database failures are 500.
    """
    if isinstance(exc, NotFoundError):
        return error_response(status.HTTP_404_NOT_FOUND, "NOT_FOUND", str(exc))
    if isinstance(exc, ConflictError):
        return error_response(status.HTTP_409_CONFLICT, "CONFLICT", str(exc))
    if isinstance(exc, ReadOnlyRepositoryError):
        return error_response(status.HTTP_501_NOT_IMPLEMENTED, "NOT_SUPPORTED", str(exc))
    if isinstance(exc, (AcquisitionTimeoutError, DeadConnectionError, PoolClosedError)):
        logger.warning("Database unavailable", data={"operation": operation, "error": str(exc)})
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "DATABASE_UNAVAILABLE",
            "Database is busy, retry later",
        )
    if isinstance(exc, DatabaseError):
        logger.error("Database error", data={"operation": operation, "error": str(exc)})
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "DATABASE_ERROR",
            f"Failed to {operation}",
        )

    logger.error("Unexpected error", data={"operation": operation, "error": str(exc)})
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
    )
