"""User lookups and registration."""
from typing import List

from shared.observability.logger import get_logger
from spice.errors import ConflictError, NotFoundError
from spice.models import CreateUserRequest, User
from spice.repositories.base import UserRepository

logger = get_logger("spice.services.user")


class UserService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def list_users(self) -> List[User]:
        return await self.repository.find_all()

    async def get_user(self, user_id: str) -> User:
        user = await self.repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    async def get_by_username(self, username: str) -> User:
        user = await self.repository.find_by_username(username)
        if user is None:
            raise NotFoundError(f"User not found: {username}")
        return user

    async def get_by_email(self, email: str) -> User:
        user = await self.repository.find_by_email(email)
        if user is None:
            raise NotFoundError("User not found for email")
        return user

    async def create_user(self, request: CreateUserRequest) -> User:
        """Register a new user.

        The request is already validated by its model. Username and email
        uniqueness is checked up front and enforced again by the store.

        Raises:
            ConflictError: If the username or email is taken
            ReadOnlyRepositoryError: If the data source does not accept writes
        """
        if await self.repository.find_by_username(request.username) is not None:
            raise ConflictError(f"Username already exists: {request.username}")
        if await self.repository.find_by_email(request.email) is not None:
            raise ConflictError("Email already exists")

        user = User(
            id="",
            username=request.username,
            email=request.email,
            display_name=request.display_name or request.username,
            bio=request.bio,
            preferences=request.preferences,
            is_public=request.is_public,
        )
        created = await self.repository.add(user)
        logger.info("User registered", user_id=created.id)
        return created
