"""Spice API models."""
from .common import CamelModel, ErrorDetail, ErrorResponse, SpiceParameters
from .shops import ScoredShop, Shop
from .users import CreateUserRequest, User, UserPreferences

__all__ = [
    "CamelModel",
    "ErrorDetail",
    "ErrorResponse",
    "SpiceParameters",
    "Shop",
    "ScoredShop",
    "User",
    "UserPreferences",
    "CreateUserRequest",
]
