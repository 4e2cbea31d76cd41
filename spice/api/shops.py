"""Shop endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from shared.database.errors import DatabaseError
from shared.observability.logger import get_logger
from spice.errors import ServiceError
from spice.models import ScoredShop, Shop
from spice.services import ShopService
from .deps import get_shop_service
from .errors import to_http_exception

logger = get_logger("spice.api.shops")
router = APIRouter(prefix="/api/shops", tags=["shops"])


@router.get("", response_model=List[ScoredShop])
async def list_shops(
    region: Optional[str] = None,
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0, le=5),
    name: Optional[str] = None,
    spice_level: Optional[int] = Query(None, alias="spiceLevel", ge=0, le=100),
    search: Optional[str] = Query(None, description="Matches name, address or description"),
    user_id: Optional[str] = Query(None, alias="userId"),
    service: ShopService = Depends(get_shop_service),
):
    """List shops, optionally filtered, and ranked by matchScore when userId is given."""
    try:
        return await service.list_shops(
            region=region,
            min_rating=min_rating,
            name=name,
            min_spiciness=spice_level,
            search=search,
            user_id=user_id,
        )
    except (ServiceError, DatabaseError) as e:
        raise to_http_exception(e, "list shops")


@router.get("/nearby", response_model=List[Shop])
async def nearby_shops(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(5.0, alias="radiusKm", gt=0, le=500),
    service: ShopService = Depends(get_shop_service),
):
    """Shops within radiusKm of (lat, lng), nearest first."""
    try:
        return await service.find_nearby(lat, lng, radius_km)
    except (ServiceError, DatabaseError) as e:
        raise to_http_exception(e, "search nearby shops")


@router.get("/{shop_id}", response_model=Shop)
async def get_shop(shop_id: str, service: ShopService = Depends(get_shop_service)):
    try:
        return await service.get_shop(shop_id)
    except (ServiceError, DatabaseError) as e:
        raise to_http_exception(e, "get shop")
