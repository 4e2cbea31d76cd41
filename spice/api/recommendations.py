"""Preference-matched shop recommendations."""
from typing import List

from fastapi import APIRouter, Depends

from shared.database.errors import DatabaseError
from spice.errors import ServiceError
from spice.models import ScoredShop
from spice.services import ShopService
from .deps import get_shop_service
from .errors import to_http_exception

router = APIRouter(prefix="/api/recommendations", tags=["recommendations"])


@router.get("/{user_id}", response_model=List[ScoredShop])
async def recommend_shops(user_id: str, service: ShopService = Depends(get_shop_service)):
    """Top matches for the user's spice preferences, disliked shops left out."""
    try:
        return await service.recommend(user_id)
    except (ServiceError, DatabaseError) as e:
        raise to_http_exception(e, "get recommendations")
