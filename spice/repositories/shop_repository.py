"""Repository for shop operations."""
from typing import List, Mapping, Optional

from shared.database.base_repository import BaseRepository
from shared.database.errors import DatabaseError
from shared.observability.logger import get_logger
from spice.models import Shop, SpiceParameters
from .base import ShopRepository

logger = get_logger("spice.repositories.shop")

SHOP_COLUMNS = """
    id, name, address, phone, latitude, longitude, region,
    spiciness, stimulation, aroma, rating, description, image_url
"""


def row_to_shop(row: Mapping) -> Shop:
    """Map a shops table row to a Shop."""
    return Shop(
        id=str(row["id"]),
        name=row["name"],
        address=row["address"],
        phone=row["phone"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        region=row["region"] or "",
        spice_parameters=SpiceParameters(
            spiciness=row["spiciness"],
            stimulation=row["stimulation"],
            aroma=row["aroma"],
        ),
        rating=row["rating"],
        description=row["description"],
        image_url=row["image_url"],
    )


def _shop_values(shop: Shop) -> tuple:
    params = shop.spice_parameters
    return (
        shop.name,
        shop.address,
        shop.phone,
        shop.latitude,
        shop.longitude,
        shop.region,
        params.spiciness,
        params.stimulation,
        params.aroma,
        shop.rating,
        shop.description,
        shop.image_url,
    )


class PostgresShopRepository(BaseRepository, ShopRepository):
    """Shop repository backed by the shops table.

    Reads run outside a transaction; writes run in one transaction each.
    """

    async def find_all(self) -> List[Shop]:
        """Get every shop ordered by id."""
        conn = await self.get_connection()
        try:
            rows = await conn.execute(f"SELECT {SHOP_COLUMNS} FROM shops ORDER BY id")
            return [row_to_shop(row) for row in rows]
        except DatabaseError as e:
            logger.error("Failed to list shops", data={"error": str(e)})
            raise
        finally:
            await self.release_connection(conn)

    async def find_by_id(self, entity_id: str) -> Optional[Shop]:
        """Get shop by ID.

        Returns:
            Shop, or None if not found
        """
        conn = await self.get_connection()
        try:
            rows = await conn.execute(
                f"SELECT {SHOP_COLUMNS} FROM shops WHERE id = $1",
                entity_id
            )
            if not rows:
                logger.warning("Shop not found", shop_id=entity_id)
                return None
            return row_to_shop(rows[0])
        except DatabaseError as e:
            logger.error("Failed to get shop", shop_id=entity_id, data={"error": str(e)})
            raise
        finally:
            await self.release_connection(conn)

    async def add(self, entity: Shop) -> Shop:
        """Insert a shop; the id on ``entity`` is ignored and generated."""
        conn = await self.get_connection()
        try:
            tx = await conn.begin_transaction()
            async with tx:
                rows = await tx.execute(
                    f"""
                    INSERT INTO shops (
                        name, address, phone, latitude, longitude, region,
                        spiciness, stimulation, aroma, rating, description, image_url
                    )
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12)
                    RETURNING {SHOP_COLUMNS}
                    """,
                    *_shop_values(entity)
                )
            shop = row_to_shop(rows[0])
            logger.info("Shop created", shop_id=shop.id)
            return shop
        except DatabaseError as e:
            logger.error("Failed to create shop", data={"error": str(e)})
            raise
        finally:
            await self.release_connection(conn)

    async def update(self, entity: Shop) -> Optional[Shop]:
        conn = await self.get_connection()
        try:
            tx = await conn.begin_transaction()
            async with tx:
                rows = await tx.execute(
                    f"""
                    UPDATE shops
                    SET name = $2, address = $3, phone = $4,
                        latitude = $5, longitude = $6, region = $7,
                        spiciness = $8, stimulation = $9, aroma = $10,
                        rating = $11, description = $12, image_url = $13,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = $1
                    RETURNING {SHOP_COLUMNS}
                    """,
                    entity.id,
                    *_shop_values(entity)
                )
            if not rows:
                logger.warning("Shop not found for update", shop_id=entity.id)
                return None
            logger.info("Shop updated", shop_id=entity.id)
            return row_to_shop(rows[0])
        except DatabaseError as e:
            logger.error("Failed to update shop", shop_id=entity.id, data={"error": str(e)})
            raise
        finally:
            await self.release_connection(conn)

    async def remove(self, entity_id: str) -> bool:
        conn = await self.get_connection()
        try:
            tx = await conn.begin_transaction()
            async with tx:
                rows = await tx.execute(
                    "DELETE FROM shops WHERE id = $1 RETURNING id",
                    entity_id
                )
            if rows:
                logger.info("Shop deleted", shop_id=entity_id)
            return bool(rows)
        except DatabaseError as e:
            logger.error("Failed to delete shop", shop_id=entity_id, data={"error": str(e)})
            raise
        finally:
            await self.release_connection(conn)
