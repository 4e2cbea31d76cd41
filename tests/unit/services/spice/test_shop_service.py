"""Unit tests for ShopService."""
import pytest
from unittest.mock import AsyncMock

from spice.errors import NotFoundError
from spice.models import ScoredShop, Shop, SpiceParameters, User, UserPreferences
from spice.services.shop_service import RECOMMENDATION_LIMIT, ShopService, haversine_km, match_score

SHIMOKITAZAWA = (35.6613, 139.6680)
JIMBOCHO = (35.6958, 139.7577)
NAMBA = (34.6654, 135.5013)


def make_shop(shop_id, name, point, region, rating, spiciness):
    return Shop(
        id=shop_id,
        name=name,
        address="somewhere",
        latitude=point[0],
        longitude=point[1],
        region=region,
        rating=rating,
        spice_parameters=SpiceParameters(spiciness=spiciness),
    )


SHOPS = [
    make_shop("shop-1", "Shimokita Curry Lab", SHIMOKITAZAWA, "tokyo", 4.6, 80),
    make_shop("shop-2", "Kanda Masala House", JIMBOCHO, "tokyo", 4.1, 45),
    make_shop("shop-3", "Namba Spice Works", NAMBA, "osaka", 4.3, 95),
]


@pytest.fixture
def repository():
    repo = AsyncMock()
    repo.find_all.return_value = list(SHOPS)
    return repo


@pytest.fixture
def service(repository):
    return ShopService(repository)


def test_haversine_known_distance():
    # Tokyo Station to Osaka Station is roughly 400 km
    distance = haversine_km(35.6812, 139.7671, 34.7025, 135.4959)

    assert 395 < distance < 410
    assert haversine_km(*NAMBA, *NAMBA) == 0


@pytest.mark.asyncio
async def test_list_shops_without_filters(service):
    assert [s.id for s in await service.list_shops()] == ["shop-1", "shop-2", "shop-3"]


@pytest.mark.asyncio
async def test_list_shops_combines_filters(service):
    assert [s.id for s in await service.list_shops(region="tokyo")] == ["shop-1", "shop-2"]
    assert [s.id for s in await service.list_shops(min_rating=4.3)] == ["shop-1", "shop-3"]
    assert [s.id for s in await service.list_shops(region="tokyo", min_rating=4.3)] == ["shop-1"]


@pytest.mark.asyncio
async def test_search_by_name_is_case_insensitive(service):
    assert [s.id for s in await service.search_by_name("SPICE")] == ["shop-3"]
    assert await service.search_by_name("ramen") == []


@pytest.mark.asyncio
async def test_search_by_spice_level(service):
    assert [s.id for s in await service.search_by_spice_level(80)] == ["shop-1", "shop-3"]


@pytest.mark.asyncio
async def test_get_shop(service, repository):
    repository.find_by_id.return_value = SHOPS[1]

    assert (await service.get_shop("shop-2")).name == "Kanda Masala House"
    repository.find_by_id.assert_awaited_once_with("shop-2")


@pytest.mark.asyncio
async def test_get_shop_not_found(service, repository):
    repository.find_by_id.return_value = None

    with pytest.raises(NotFoundError):
        await service.get_shop("missing")


@pytest.mark.asyncio
async def test_find_nearby_sorted_by_distance(service):
    # From Jimbocho: Kanda (0 km) then Shimokitazawa (~9 km); Osaka is out of range
    nearby = await service.find_nearby(*JIMBOCHO, radius_km=20)

    assert [s.id for s in nearby] == ["shop-2", "shop-1"]


@pytest.mark.asyncio
async def test_find_nearby_small_radius(service):
    nearby = await service.find_nearby(*SHIMOKITAZAWA, radius_km=1)

    assert [s.id for s in nearby] == ["shop-1"]


@pytest.mark.asyncio
async def test_search_matches_address_and_description(repository):
    repository.find_all.return_value = [
        Shop(id="shop-4", name="Curry House Four", address="1-2 Dotonbori, Osaka"),
        Shop(id="shop-5", name="Spice Corner", address="3-4 Ginza",
             description="Dotonbori-style keema"),
        Shop(id="shop-6", name="Ramen Stop", address="5-6 Umeda"),
    ]
    service = ShopService(repository)

    assert [s.id for s in await service.list_shops(search="dotonbori")] == ["shop-4", "shop-5"]
    assert [s.id for s in await service.list_shops(search="UMEDA")] == ["shop-6"]


def spice(spiciness, stimulation, aroma):
    return SpiceParameters(spiciness=spiciness, stimulation=stimulation, aroma=aroma)


def test_match_score_identical_profiles():
    assert match_score(spice(80, 65, 90), spice(80, 65, 90)) == 100


def test_match_score_weights_aroma_below_spiciness():
    preferred = spice(80, 65, 90)

    # 20 points off on spiciness costs 35% of 20, on aroma 30% of 20
    assert match_score(preferred, spice(60, 65, 90)) == 93
    assert match_score(preferred, spice(80, 45, 90)) == 93
    assert match_score(preferred, spice(80, 65, 70)) == 94
    assert match_score(spice(0, 0, 0), spice(100, 100, 100)) == 0


def test_match_score_rounds_half_up():
    # 35 + 35 + 28.5
    assert match_score(spice(50, 50, 50), spice(50, 50, 55)) == 99


def make_user(preferred, dislikes=()):
    return User(
        id="user-1",
        username="curry_fan",
        email="curry_fan@example.com",
        preferences=UserPreferences(spice_parameters=preferred, dislikes=list(dislikes)),
    )


@pytest.fixture
def users():
    return AsyncMock()


@pytest.mark.asyncio
async def test_recommend_orders_by_match_and_drops_dislikes(repository, users):
    # Shop spiciness 80/45/95, other axes at the default 50
    users.find_by_id.return_value = make_user(spice(85, 50, 50), dislikes=["shop-3"])
    service = ShopService(repository, users)

    recommended = await service.recommend("user-1")

    assert [(s.id, s.match_score) for s in recommended] == [("shop-1", 98), ("shop-2", 86)]
    assert all(isinstance(s, ScoredShop) for s in recommended)
    users.find_by_id.assert_awaited_once_with("user-1")


@pytest.mark.asyncio
async def test_recommend_caps_at_limit(repository, users):
    repository.find_all.return_value = [
        Shop(id=f"shop-{n}", name=f"Shop {n}", address="somewhere",
             spice_parameters=spice(n * 5, 50, 50))
        for n in range(12)
    ]
    users.find_by_id.return_value = make_user(spice(100, 50, 50), dislikes=["shop-11"])
    service = ShopService(repository, users)

    recommended = await service.recommend("user-1")

    assert len(recommended) == RECOMMENDATION_LIMIT
    assert [s.id for s in recommended] == [f"shop-{n}" for n in range(10, 0, -1)]


@pytest.mark.asyncio
async def test_recommend_unknown_user(repository, users):
    users.find_by_id.return_value = None
    service = ShopService(repository, users)

    with pytest.raises(NotFoundError):
        await service.recommend("missing")
    repository.find_all.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_shops_with_user_sorts_by_match(repository, users):
    users.find_by_id.return_value = make_user(spice(100, 50, 50))
    service = ShopService(repository, users)

    shops = await service.list_shops(region="tokyo", user_id="user-1")

    assert [(s.id, s.match_score) for s in shops] == [("shop-1", 93), ("shop-2", 81)]


@pytest.mark.asyncio
async def test_list_shops_ignores_unknown_user(repository, users):
    users.find_by_id.return_value = None
    service = ShopService(repository, users)

    shops = await service.list_shops(user_id="missing")

    assert [s.id for s in shops] == ["shop-1", "shop-2", "shop-3"]
    assert not any(isinstance(s, ScoredShop) for s in shops)
