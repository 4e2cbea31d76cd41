"""Spice services."""
from .shop_service import ShopService, haversine_km, match_score
from .user_service import UserService

__all__ = ["ShopService", "UserService", "haversine_km", "match_score"]
