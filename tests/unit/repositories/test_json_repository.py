"""Unit tests for the read-only JSON repositories."""
import json

import pytest

from spice.errors import ReadOnlyRepositoryError, RepositoryError
from spice.models import Shop
from spice.repositories.json_repository import JsonShopRepository, JsonUserRepository

SHOPS = [
    {
        "id": "shop-1",
        "name": "Shimokita Curry Lab",
        "address": "2-14-3 Kitazawa",
        "latitude": 35.6613,
        "longitude": 139.668,
        "region": "tokyo",
        "spiceParameters": {"spiciness": 80, "stimulation": 65, "aroma": 90},
        "rating": 4.6,
    },
    {
        "id": "shop-2",
        "name": "Namba Spice Works",
        "address": "3-5-10 Namba",
        "latitude": 34.6654,
        "longitude": 135.5013,
        "region": "osaka",
    },
]

USERS = [
    {"id": "user-1", "username": "curry_fan", "email": "curry_fan@example.com", "displayName": "Curry Fan"},
]


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "shops.json").write_text(json.dumps(SHOPS), encoding="utf-8")
    (tmp_path / "users.json").write_text(json.dumps(USERS), encoding="utf-8")
    return tmp_path


@pytest.mark.asyncio
async def test_shops_loaded_from_camel_case_file(data_dir):
    repo = JsonShopRepository.from_file(data_dir / "shops.json")

    shops = await repo.find_all()
    assert [s.id for s in shops] == ["shop-1", "shop-2"]
    assert shops[0].spice_parameters.aroma == 90
    assert shops[1].spice_parameters.spiciness == 50  # default
    assert (await repo.find_by_id("shop-2")).region == "osaka"
    assert await repo.find_by_id("missing") is None


@pytest.mark.asyncio
async def test_user_lookups(data_dir):
    repo = JsonUserRepository.from_file(data_dir / "users.json")

    assert (await repo.find_by_username("curry_fan")).display_name == "Curry Fan"
    assert (await repo.find_by_email("curry_fan@example.com")).id == "user-1"
    assert await repo.find_by_username("nobody") is None


@pytest.mark.asyncio
async def test_missing_file_gives_empty_repository(tmp_path):
    repo = JsonShopRepository.from_file(tmp_path / "absent.json")

    assert await repo.find_all() == []


@pytest.mark.parametrize("content", ["not json", json.dumps([{"id": "shop-1"}])])
def test_malformed_file_raises_repository_error(tmp_path, content):
    path = tmp_path / "shops.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(RepositoryError):
        JsonShopRepository.from_file(path)


@pytest.mark.asyncio
async def test_writes_are_rejected(data_dir):
    repo = JsonShopRepository.from_file(data_dir / "shops.json")
    shop = Shop.model_validate(SHOPS[0])

    with pytest.raises(ReadOnlyRepositoryError):
        await repo.add(shop)
    with pytest.raises(ReadOnlyRepositoryError):
        await repo.update(shop)
    with pytest.raises(ReadOnlyRepositoryError):
        await repo.remove("shop-1")

    assert len(await repo.find_all()) == 2
