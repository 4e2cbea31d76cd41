"""FastAPI dependencies resolving shared objects from app.state."""
from typing import Optional

from fastapi import Request

from shared.database.pool import ConnectionPool
from spice.services import ShopService, UserService


def get_shop_service(request: Request) -> ShopService:
    return request.app.state.shop_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_db_pool(request: Request) -> Optional[ConnectionPool]:
    """Pool of the postgres data source; None in json mode."""
    return getattr(request.app.state, "pool", None)
