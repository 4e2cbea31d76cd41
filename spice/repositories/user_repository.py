"""Repository for user operations."""
from typing import List, Mapping, Optional

import asyncpg

from shared.database.base_repository import BaseRepository
from shared.database.errors import DatabaseError, QueryExecutionError
from shared.observability.logger import get_logger
from spice.errors import ConflictError
from spice.models import SpiceParameters, User, UserPreferences
from .base import UserRepository

logger = get_logger("spice.repositories.user")

USER_COLUMNS = """
    id, username, email, display_name, bio,
    pref_spiciness, pref_stimulation, pref_aroma,
    is_public, created_at
"""


def row_to_user(row: Mapping) -> User:
    """Map a users table row to a User. NULL preferences fall back to defaults."""
    defaults = SpiceParameters()
    return User(
        id=str(row["id"]),
        username=row["username"],
        email=row["email"],
        display_name=row["display_name"],
        bio=row["bio"],
        preferences=UserPreferences(
            spice_parameters=SpiceParameters(
                spiciness=_or_default(row["pref_spiciness"], defaults.spiciness),
                stimulation=_or_default(row["pref_stimulation"], defaults.stimulation),
                aroma=_or_default(row["pref_aroma"], defaults.aroma),
            )
        ),
        is_public=row["is_public"],
        created_at=row["created_at"],
    )


def _or_default(value, default):
    return default if value is None else value


def _user_values(user: User) -> tuple:
    params = user.preferences.spice_parameters
    return (
        user.username,
        user.email,
        user.display_name,
        user.bio,
        params.spiciness,
        params.stimulation,
        params.aroma,
        user.is_public,
    )


def _is_unique_violation(error: DatabaseError) -> bool:
    return isinstance(error.__cause__, asyncpg.UniqueViolationError)


class PostgresUserRepository(BaseRepository, UserRepository):
    """User repository backed by the users table."""

    async def _find_one(self, column: str, value: str) -> Optional[User]:
        conn = await self.get_connection()
        try:
            rows = await conn.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE {column} = $1",
                value
            )
            return row_to_user(rows[0]) if rows else None
        except DatabaseError as e:
            logger.error("Failed to get user", data={"by": column, "error": str(e)})
            raise
        finally:
            await self.release_connection(conn)

    async def find_all(self) -> List[User]:
        conn = await self.get_connection()
        try:
            rows = await conn.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY id")
            return [row_to_user(row) for row in rows]
        except DatabaseError as e:
            logger.error("Failed to list users", data={"error": str(e)})
            raise
        finally:
            await self.release_connection(conn)

    async def find_by_id(self, entity_id: str) -> Optional[User]:
        return await self._find_one("id", entity_id)

    async def find_by_username(self, username: str) -> Optional[User]:
        return await self._find_one("username", username)

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self._find_one("email", email)

    async def add(self, entity: User) -> User:
        """Insert a user.

        Raises:
            ConflictError: If the username or email is already registered
            QueryExecutionError: For other database errors
        """
        conn = await self.get_connection()
        try:
            tx = await conn.begin_transaction()
            async with tx:
                rows = await tx.execute(
                    f"""
                    INSERT INTO users (
                        username, email, display_name, bio,
                        pref_spiciness, pref_stimulation, pref_aroma, is_public
                    )
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                    RETURNING {USER_COLUMNS}
                    """,
                    *_user_values(entity)
                )
            user = row_to_user(rows[0])
            logger.info("User created", user_id=user.id)
            return user
        except QueryExecutionError as e:
            if _is_unique_violation(e):
                logger.warning("Duplicate username or email", data={"username": entity.username})
                raise ConflictError("Username or email already exists") from e
            logger.error("Failed to create user", data={"error": str(e)})
            raise
        except DatabaseError as e:
            logger.error("Failed to create user", data={"error": str(e)})
            raise
        finally:
            await self.release_connection(conn)

    async def update(self, entity: User) -> Optional[User]:
        conn = await self.get_connection()
        try:
            tx = await conn.begin_transaction()
            async with tx:
                rows = await tx.execute(
                    f"""
                    UPDATE users
                    SET username = $2, email = $3, display_name = $4, bio = $5,
                        pref_spiciness = $6, pref_stimulation = $7, pref_aroma = $8,
                        is_public = $9, updated_at = CURRENT_TIMESTAMP
                    WHERE id = $1
                    RETURNING {USER_COLUMNS}
                    """,
                    entity.id,
                    *_user_values(entity)
                )
            if not rows:
                return None
            logger.info("User updated", user_id=entity.id)
            return row_to_user(rows[0])
        except QueryExecutionError as e:
            if _is_unique_violation(e):
                raise ConflictError("Username or email already exists") from e
            logger.error("Failed to update user", user_id=entity.id, data={"error": str(e)})
            raise
        except DatabaseError as e:
            logger.error("Failed to update user", user_id=entity.id, data={"error": str(e)})
            raise
        finally:
            await self.release_connection(conn)

    async def remove(self, entity_id: str) -> bool:
        conn = await self.get_connection()
        try:
            tx = await conn.begin_transaction()
            async with tx:
                rows = await tx.execute(
                    "DELETE FROM users WHERE id = $1 RETURNING id",
                    entity_id
                )
            if rows:
                logger.info("User deleted", user_id=entity_id)
            return bool(rows)
        except DatabaseError as e:
            logger.error("Failed to delete user", user_id=entity_id, data={"error": str(e)})
            raise
        finally:
            await self.release_connection(conn)
