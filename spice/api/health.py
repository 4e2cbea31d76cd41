"""Liveness and pool metrics endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from shared.database.errors import DatabaseError
from shared.database.pool import ConnectionPool
from shared.observability.logger import get_logger
from .deps import get_db_pool

logger = get_logger("spice.api.health")
router = APIRouter(tags=["health"])


@router.get("/health")
@router.get("/api/health")
async def health(request: Request, pool: Optional[ConnectionPool] = Depends(get_db_pool)):
    data_source = request.app.state.settings.data_source
    if pool is None:
        return {"status": "ok", "dataSource": data_source}

    try:
        async with pool.connection(timeout=1.0) as conn:
            await conn.execute("SELECT 1")
    except DatabaseError as e:
        logger.warning("Health check failed", data={"error": str(e)})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "degraded", "dataSource": data_source, "database": "unavailable"},
        )
    return {"status": "ok", "dataSource": data_source, "database": "ok"}


@router.get("/metrics")
@router.get("/api/metrics")
async def metrics(pool: Optional[ConnectionPool] = Depends(get_db_pool)):
    if pool is None:
        return {"pool": None}
    return {"pool": pool.stats()}
