"""Shop lookups."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFound
from app.models.shop import Shop


class ShopService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_one(self, shop_id: str) -> Shop:
        """Return the shop, skipping soft-deleted ones. Raises NotFound."""
        result = await self.db.execute(
            select(Shop).where(Shop.id == shop_id, Shop.deleted_at.is_(None))
        )
        shop = result.scalar_one_or_none()
        if not shop:
            raise NotFound("Shop", shop_id)
        return shop
