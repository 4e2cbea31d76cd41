"""Shop queries: listing, filtering, nearby search and recommendations."""
import math
from typing import List, Optional, Sequence

from shared.observability.logger import get_logger
from spice.errors import NotFoundError, ServiceError
from spice.models import ScoredShop, Shop, SpiceParameters, User
from spice.repositories.base import ShopRepository, UserRepository

logger = get_logger("spice.services.shop")

EARTH_RADIUS_KM = 6371.0

# Axis weights of the match score; they sum to 1
MATCH_WEIGHTS = (("spiciness", 0.35), ("stimulation", 0.35), ("aroma", 0.30))
RECOMMENDATION_LIMIT = 10


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def match_score(preferred: SpiceParameters, offered: SpiceParameters) -> int:
    """How closely a shop's spice profile fits a user's, from 0 to 100.

    Each axis contributes (100 - |difference|) times its weight. The total is
    rounded half up, so 98.5 scores 99.
    """
    total = sum(
        (100 - abs(getattr(preferred, axis) - getattr(offered, axis))) * weight
        for axis, weight in MATCH_WEIGHTS
    )
    return math.floor(total + 0.5)


def rank_for_user(shops: Sequence[Shop], user: User) -> List[ScoredShop]:
    """Score every shop for ``user``, best match first. Ties keep input order."""
    preferred = user.preferences.spice_parameters
    scored = [
        ScoredShop(**shop.model_dump(), match_score=match_score(preferred, shop.spice_parameters))
        for shop in shops
    ]
    scored.sort(key=lambda s: s.match_score, reverse=True)
    return scored


class ShopService:
    """Read-side operations over a ShopRepository.

    Filtering happens in memory on top of find_all(); the directory is small.
    Matching against user preferences needs the optional UserRepository.
    """

    def __init__(self, repository: ShopRepository, users: Optional[UserRepository] = None):
        self.repository = repository
        self.users = users

    async def list_shops(
        self,
        region: Optional[str] = None,
        min_rating: Optional[float] = None,
        name: Optional[str] = None,
        min_spiciness: Optional[int] = None,
        search: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[Shop]:
        """List shops, narrowed by any filters given.

        ``search`` matches name, address or description, case-insensitively.
        With ``user_id`` of a known user the result is scored and sorted by
        match score; an unknown user id leaves the list unscored.
        """
        shops = await self.repository.find_all()
        if region:
            shops = [s for s in shops if s.region == region]
        if min_rating is not None:
            shops = [s for s in shops if s.rating >= min_rating]
        if name:
            needle = name.casefold()
            shops = [s for s in shops if needle in s.name.casefold()]
        if search:
            needle = search.casefold()
            shops = [s for s in shops if _matches_text(s, needle)]
        if min_spiciness is not None:
            shops = [s for s in shops if s.spice_parameters.spiciness >= min_spiciness]
        if user_id and self.users is not None:
            user = await self.users.find_by_id(user_id)
            if user is not None:
                return rank_for_user(shops, user)
            logger.debug("Unknown user for match scores", data={"user_id": user_id})
        return shops

    async def recommend(self, user_id: str) -> List[ScoredShop]:
        """Best matching shops for a user, excluding the ones they dislike.

        Raises:
            NotFoundError: If no user has this id
        """
        if self.users is None:
            raise ServiceError("Recommendations need a user repository")
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")

        disliked = set(user.preferences.dislikes)
        ranked = rank_for_user(await self.repository.find_all(), user)
        return [s for s in ranked if s.id not in disliked][:RECOMMENDATION_LIMIT]

    async def get_shop(self, shop_id: str) -> Shop:
        """Get one shop.

        Raises:
            NotFoundError: If no shop has this id
        """
        shop = await self.repository.find_by_id(shop_id)
        if shop is None:
            raise NotFoundError(f"Shop not found: {shop_id}")
        return shop

    async def search_by_name(self, name: str) -> List[Shop]:
        """Shops whose name contains ``name`` (case-insensitive)."""
        return await self.list_shops(name=name)

    async def search_by_spice_level(self, level: int) -> List[Shop]:
        """Shops at least as spicy as ``level``."""
        return await self.list_shops(min_spiciness=level)

    async def find_nearby(
        self, latitude: float, longitude: float, radius_km: float
    ) -> List[Shop]:
        """Shops within ``radius_km`` of a point, nearest first."""
        located = [
            (haversine_km(latitude, longitude, s.latitude, s.longitude), s)
            for s in await self.repository.find_all()
        ]
        nearby = sorted((pair for pair in located if pair[0] <= radius_km), key=lambda p: p[0])
        logger.debug("Nearby search", data={
            "latitude": latitude,
            "longitude": longitude,
            "radius_km": radius_km,
            "matches": len(nearby),
        })
        return [shop for _, shop in nearby]


def _matches_text(shop: Shop, needle: str) -> bool:
    fields = (shop.name, shop.address, shop.description or "")
    return any(needle in f.casefold() for f in fields)
