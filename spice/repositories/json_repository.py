"""Read-only repositories over static JSON files.

Used when DATA_SOURCE=json. The files are loaded once at startup; write
operations are rejected.
"""
import json
from pathlib import Path
from typing import Generic, List, Optional, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from shared.observability.logger import get_logger
from spice.errors import ReadOnlyRepositoryError, RepositoryError
from spice.models import Shop, User
from .base import ShopRepository, UserRepository

logger = get_logger("spice.repositories.json")

T = TypeVar("T", Shop, User)


def load_json_file(path: Union[str, Path], model: type) -> list:
    """Parse a JSON array of ``model`` records from ``path``.

    A missing file yields an empty list.

    Raises:
        RepositoryError: If the file is not valid JSON or a record is invalid
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Data file not found, starting empty", data={"path": str(path)})
        return []
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        items = TypeAdapter(List[model]).validate_python(raw)
    except (json.JSONDecodeError, ValidationError) as e:
        raise RepositoryError(f"Failed to parse {path.name}: {e}") from e
    logger.info("Data file loaded", data={"path": str(path), "records": len(items)})
    return items


class _JsonRepository(Generic[T]):
    entity_name = "record"

    def __init__(self, items: List[T]):
        self._items = list(items)

    async def find_all(self) -> List[T]:
        return list(self._items)

    async def find_by_id(self, entity_id: str) -> Optional[T]:
        return next((item for item in self._items if item.id == entity_id), None)

    def _read_only(self, operation: str) -> ReadOnlyRepositoryError:
        return ReadOnlyRepositoryError(
            f"{operation} {self.entity_name} is not supported by the JSON data source"
        )

    async def add(self, entity: T) -> T:
        raise self._read_only("Add")

    async def update(self, entity: T) -> Optional[T]:
        raise self._read_only("Update")

    async def remove(self, entity_id: str) -> bool:
        raise self._read_only("Remove")


class JsonShopRepository(_JsonRepository[Shop], ShopRepository):
    entity_name = "shop"

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "JsonShopRepository":
        return cls(load_json_file(path, Shop))


class JsonUserRepository(_JsonRepository[User], UserRepository):
    entity_name = "user"

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "JsonUserRepository":
        return cls(load_json_file(path, User))

    async def find_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._items if u.username == username), None)

    async def find_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._items if u.email == email), None)
