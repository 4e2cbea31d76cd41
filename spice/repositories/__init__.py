"""Spice repositories."""
from .base import Repository, ShopRepository, UserRepository
from .json_repository import JsonShopRepository, JsonUserRepository, load_json_file
from .shop_repository import PostgresShopRepository
from .user_repository import PostgresUserRepository

__all__ = [
    "Repository",
    "ShopRepository",
    "UserRepository",
    "PostgresShopRepository",
    "PostgresUserRepository",
    "JsonShopRepository",
    "JsonUserRepository",
    "load_json_file",
]
