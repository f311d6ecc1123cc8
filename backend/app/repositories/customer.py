"""Customer persistence: lookups, filtered scans and writes over an AsyncSession."""

import logging

from sqlalchemy import Select, select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import DuplicateEntity
from app.models.customer import Customer, UQ_PLATFORM_EXTERNAL_ID

logger = logging.getLogger(__name__)


def _escape_like(s: str) -> str:
    """Escape SQL LIKE wildcards in user input."""
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _apply_filters(
    query: Select,
    *,
    platform: str | None = None,
    shop_id: str | None = None,
    channel_id: int | None = None,
    name: str | None = None,
) -> Select:
    if platform:
        query = query.where(Customer.platform == platform)
    if shop_id is not None:
        query = query.where(Customer.shop_id == shop_id)
    if channel_id is not None:
        query = query.where(Customer.channel_id == channel_id)
    if name:
        # LIKE is case-sensitive on PostgreSQL
        query = query.where(Customer.name.like(f"%{_escape_like(name)}%", escape="\\"))
    return query


class CustomerRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _select() -> Select:
        return select(Customer).options(
            selectinload(Customer.shop),
            selectinload(Customer.channel),
        )

    async def get(self, customer_id: int) -> Customer | None:
        result = await self.db.execute(self._select().where(Customer.id == customer_id))
        return result.scalar_one_or_none()

    async def get_by_external_id(
        self,
        platform: str,
        external_id: str,
        exclude_id: int | None = None,
    ) -> Customer | None:
        """Composite-key lookup. ``exclude_id`` skips the record being updated."""
        query = self._select().where(
            Customer.platform == platform,
            Customer.external_id == external_id,
        )
        if exclude_id is not None:
            query = query.where(Customer.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find(
        self,
        *,
        offset: int | None = None,
        limit: int | None = None,
        **filters,
    ) -> list[Customer]:
        """Newest first; equal timestamps fall back to insertion order."""
        query = _apply_filters(self._select(), **filters).order_by(
            Customer.created_at.desc(), Customer.id.desc()
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count(self, **filters) -> int:
        result = await self.db.execute(_apply_filters(select(func.count(Customer.id)), **filters))
        return result.scalar_one()

    async def page(self, *, page: int, limit: int, **filters) -> tuple[list[Customer], int]:
        """One 1-indexed page of matching customers plus the total match count."""
        total = await self.count(**filters)
        items = await self.find(offset=(page - 1) * limit, limit=limit, **filters)
        return items, total

    async def add(self, customer: Customer) -> Customer:
        self.db.add(customer)
        await self._commit(customer.platform, customer.external_id)
        await self.db.refresh(customer)
        return customer

    async def save(self, customer: Customer) -> Customer:
        await self._commit(customer.platform, customer.external_id)
        await self.db.refresh(customer)
        return customer

    async def delete(self, customer: Customer) -> None:
        await self.db.delete(customer)
        await self.db.commit()

    async def _commit(self, platform: str, external_id: str) -> None:
        # Passed in by value: the instance is expired after rollback.
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if UQ_PLATFORM_EXTERNAL_ID in str(exc.orig):
                logger.warning(
                    f"Unique constraint rejected customer {platform}:{external_id}"
                )
                raise DuplicateEntity(platform, external_id) from exc
            raise
