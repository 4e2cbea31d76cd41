from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for spice-backend.

    Common defaults live here; environment variables override per environment.

    This module is intentionally simple: no YAML/JSON files, only env vars.
    Database connection details (DB_HOST, DB_PORT, DB_NAME, DB_USER,
    DB_PASSWORD) are loaded separately by shared.database.config.DatabaseConfig.
    """

    # --- Core ---
    environment: str  # required
    service_name: str = "spice-backend"

    # --- HTTP server ---
    app_host: str  # required
    app_port: int  # required
    cors_origins: List[str] = ["*"]  # JSON list in env, e.g. CORS_ORIGINS='["https://spice.example"]'

    # --- Logging ---
    log_level: str  # required

    # --- Data source ---
    data_source: Literal["postgres", "json"] = "postgres"
    data_dir: str = "database"  # shops.json / users.json for the json data source

    # --- Connection pool ---
    db_pool_size: int = Field(10, gt=0)
    db_acquire_timeout: float = Field(5.0, gt=0)  # seconds
    db_connect_timeout: float = Field(10.0, gt=0)  # seconds

    model_config = SettingsConfigDict(
        # Always try to load .env files if they exist
        # .env.common: shared defaults (committed)
        # .env.local: local overrides (gitignored)
        env_file=(".env.common", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance. Call this instead of instantiating Settings directly."""
    return Settings()


# For convenience, expose a function to get settings
# Usage: from config.settings import get_settings; settings = get_settings()
settings = get_settings
