from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import Settings, get_settings
from shared.database.pool import close_pool, create_pool
from shared.observability.access_log_middleware import AccessLogMiddleware
from shared.observability.logger import get_logger, set_log_level
from shared.observability.middleware import ContextMiddleware
from spice.api import health_router, recommendations_router, shops_router, users_router
from spice.repositories import (
    JsonShopRepository,
    JsonUserRepository,
    PostgresShopRepository,
    PostgresUserRepository,
)
from spice.services import ShopService, UserService

logger = get_logger("spice")

DEFAULT_CORS_ORIGINS = ["*"]
CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


async def init_state(app: FastAPI, settings: Settings) -> None:
    """Build repositories and services for the configured data source."""
    app.state.settings = settings
    app.state.pool = None

    if settings.data_source == "json":
        data_dir = Path(settings.data_dir)
        shops = JsonShopRepository.from_file(data_dir / "shops.json")
        users = JsonUserRepository.from_file(data_dir / "users.json")
        logger.info("Using JSON data source", data={"data_dir": str(data_dir)})
    else:
        pool = await create_pool(settings)
        app.state.pool = pool
        shops = PostgresShopRepository(pool, acquire_timeout=settings.db_acquire_timeout)
        users = PostgresUserRepository(pool, acquire_timeout=settings.db_acquire_timeout)
        logger.info("Database pool created", data={
            "pool_size": pool.pool_size,
            "acquire_timeout": settings.db_acquire_timeout,
        })

    app.state.shop_service = ShopService(shops, users)
    app.state.user_service = UserService(users)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan (startup/shutdown)."""
    # Startup
    settings = get_settings()
    set_log_level(settings.log_level)
    await init_state(app, settings)

    yield

    # Shutdown
    if app.state.pool is not None:
        await close_pool(app.state.pool)
        logger.info("Database pool closed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app. Without settings, CORS allows any origin."""
    origins = settings.cors_origins if settings is not None else DEFAULT_CORS_ORIGINS
    app = FastAPI(
        title="Spice Backend",
        description="Spice shop directory and user profiles",
        lifespan=lifespan,
    )
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(ContextMiddleware, service_name="spice")
    # Outermost, so preflights are answered before routing
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=CORS_METHODS,
        allow_headers=["*"],
        expose_headers=["X-Trace-Id", "X-Request-Id", "X-Span-Id"],
    )

    app.include_router(health_router)
    app.include_router(shops_router)
    app.include_router(users_router)
    app.include_router(recommendations_router)
    return app
