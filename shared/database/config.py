"""Database connection settings."""
from typing import Optional
from urllib.parse import quote

from pydantic import AliasChoices, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class DatabaseConfig(BaseSettings):
    """Connection target for the PostgreSQL backend.

    Every field is required and comes from DB_HOST, DB_PORT, DB_NAME,
    DB_USER and DB_PASSWORD. Instances are immutable.
    """

    host: str = Field(..., min_length=1)
    port: int = Field(..., ge=1, le=65535)
    database: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("db_name", "database"),
    )
    user: str = Field(..., min_length=1)
    password: SecretStr

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=(".env.common", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Load the configuration from the environment.

        Raises:
            ConfigurationError: If a variable is missing or the port is
                outside 1-65535
        """
        try:
            return cls()
        except ValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            raise ConfigurationError(
                f"Invalid database configuration: {', '.join(fields)}"
            ) from e

    @property
    def dsn(self) -> str:
        """PostgreSQL connection URL."""
        return (
            f"postgresql://{quote(self.user, safe='')}:"
            f"{quote(self.password.get_secret_value(), safe='')}"
            f"@{self.host}:{self.port}/{quote(self.database, safe='')}"
        )


def load_database_config() -> Optional[DatabaseConfig]:
    """Return the environment configuration, or None when it is incomplete."""
    try:
        return DatabaseConfig.from_env()
    except ConfigurationError:
        return None
