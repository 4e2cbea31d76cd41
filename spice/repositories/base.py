"""Repository capability interfaces.

Services depend on these interfaces only. PostgreSQL adapters borrow
connections from the pool; JSON adapters serve static files from memory.
"""
from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

from spice.models import Shop, User

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """CRUD capability shared by every storage adapter."""

    @abstractmethod
    async def find_all(self) -> List[T]:
        ...

    @abstractmethod
    async def find_by_id(self, entity_id: str) -> Optional[T]:
        ...

    @abstractmethod
    async def add(self, entity: T) -> T:
        """Persist a new entity and return it with its generated id."""

    @abstractmethod
    async def update(self, entity: T) -> Optional[T]:
        """Replace an entity by id; None when it does not exist."""

    @abstractmethod
    async def remove(self, entity_id: str) -> bool:
        """Delete by id; False when nothing was deleted."""


class ShopRepository(Repository[Shop]):
    pass


class UserRepository(Repository[User]):

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        ...
