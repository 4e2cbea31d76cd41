"""User endpoints."""
from typing import List

from fastapi import APIRouter, Depends, status

from shared.database.errors import DatabaseError
from shared.observability.logger import get_logger
from spice.errors import ServiceError
from spice.models import CreateUserRequest, User
from spice.services import UserService
from .deps import get_user_service
from .errors import to_http_exception

logger = get_logger("spice.api.users")
router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[User])
async def list_users(service: UserService = Depends(get_user_service)):
    try:
        return await service.list_users()
    except (ServiceError, DatabaseError) as e:
        raise to_http_exception(e, "list users")


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: CreateUserRequest,
    service: UserService = Depends(get_user_service),
):
    """Register a new user.

    Field validation (username charset and length, email format, 0-100
    preferences) is enforced by CreateUserRequest and answered with 422.
    """
    logger.info("Creating user", data={"username": user_data.username})
    try:
        return await service.create_user(user_data)
    except (ServiceError, DatabaseError) as e:
        raise to_http_exception(e, "create user")


@router.get("/username/{username}", response_model=User)
async def get_user_by_username(username: str, service: UserService = Depends(get_user_service)):
    try:
        return await service.get_by_username(username)
    except (ServiceError, DatabaseError) as e:
        raise to_http_exception(e, "get user")


@router.get("/{user_id}", response_model=User)
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    try:
        return await service.get_user(user_id)
    except (ServiceError, DatabaseError) as e:
        raise to_http_exception(e, "get user")
