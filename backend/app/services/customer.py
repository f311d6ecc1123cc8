"""Customer lifecycle service.

Owns every write to the customers table and keeps two rules true after each
successful call:

- (platform, external_id) identifies at most one customer;
- a customer's shop and channel existed when it was created or last updated.

Shops and channels are reached through the narrow ``ShopDirectory`` /
``ChannelDirectory`` protocols so this module does not import their services.
"""

import logging
import math
from typing import Protocol

from app.core.exceptions import (
    DuplicateEntity,
    InvalidReference,
    NotFound,
    StorageFailure,
    ValidationFailure,
)
from app.models.channel import Channel
from app.models.customer import Customer
from app.models.shop import Shop
from app.repositories.customer import CustomerRepository
from app.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerListQuery,
    CustomerResponse,
    CustomerListResponse,
)

logger = logging.getLogger(__name__)


class ShopDirectory(Protocol):
    async def find_one(self, shop_id: str) -> Shop:
        """Return the shop or raise NotFound."""
        ...


class ChannelDirectory(Protocol):
    async def get_one(self, channel_id: int) -> Channel:
        """Return the channel or raise NotFound."""
        ...


class CustomerService:
    def __init__(
        self,
        customers: CustomerRepository,
        shops: ShopDirectory,
        channels: ChannelDirectory,
    ):
        self.customers = customers
        self.shops = shops
        self.channels = channels

    # ── Writes ─────────────────────────────────────

    async def create(self, data: CustomerCreate) -> CustomerResponse:
        try:
            shop = await self._resolve_shop(data.shop_id)
            channel = await self._resolve_channel(data.channel_id)

            if await self.customers.get_by_external_id(data.platform, data.external_id):
                logger.warning(f"Duplicate customer rejected: {data.platform}:{data.external_id}")
                raise DuplicateEntity(data.platform, data.external_id)

            customer = Customer(
                platform=data.platform,
                external_id=data.external_id,
                name=data.name,
                shop_id=shop.id,
                shop=shop,
                channel_id=channel.id,
                channel=channel,
            )
            customer = await self.customers.add(customer)
        except ValidationFailure:
            raise
        except Exception as exc:
            logger.exception("Failed to create customer")
            raise StorageFailure("create customer", exc) from exc

        logger.info(f"Customer {customer.id} created ({customer.platform}:{customer.external_id})")
        return self._to_view(customer)

    async def update(self, customer_id: int, data: CustomerUpdate) -> CustomerResponse:
        """Apply the fields present in ``data``; absent fields stay as they are."""
        try:
            customer = await self._get_or_404(customer_id)
            changes = data.model_dump(exclude_unset=True)

            shop_id = changes.pop("shop_id", None)
            shop = None
            if shop_id is not None and shop_id != customer.shop_id:
                shop = await self._resolve_shop(shop_id)

            channel_id = changes.pop("channel_id", None)
            channel = None
            if channel_id is not None and channel_id != customer.channel_id:
                channel = await self._resolve_channel(channel_id)

            if "platform" in changes or "external_id" in changes:
                platform = changes.get("platform", customer.platform)
                external_id = changes.get("external_id", customer.external_id)
                conflict = await self.customers.get_by_external_id(
                    platform, external_id, exclude_id=customer.id
                )
                if conflict:
                    logger.warning(
                        f"Customer {customer_id} update collides with customer {conflict.id} "
                        f"on {platform}:{external_id}"
                    )
                    raise DuplicateEntity(platform, external_id)

            # All checks passed; only now touch the instance
            if shop is not None:
                customer.shop_id = shop.id
                customer.shop = shop
            if channel is not None:
                customer.channel_id = channel.id
                customer.channel = channel
            for field, value in changes.items():
                setattr(customer, field, value)

            customer = await self.customers.save(customer)
        except ValidationFailure:
            raise
        except Exception as exc:
            logger.exception(f"Failed to update customer {customer_id}")
            raise StorageFailure(f"update customer with ID {customer_id}", exc) from exc

        logger.info(f"Customer {customer_id} updated")
        return self._to_view(customer)

    async def remove(self, customer_id: int) -> None:
        """Hard delete. Customers have no soft-delete tombstone."""
        customer = await self._get_or_404(customer_id)
        await self.customers.delete(customer)
        logger.info(f"Customer {customer_id} deleted")

    # ── Reads ──────────────────────────────────────

    async def find_one(self, customer_id: int) -> CustomerResponse:
        return self._to_view(await self._get_or_404(customer_id))

    async def find_all(self, query: CustomerListQuery) -> CustomerListResponse:
        # A missing shop/channel is reported, not turned into an empty page
        if query.shop_id is not None:
            await self.shops.find_one(query.shop_id)
        if query.channel_id is not None:
            await self.channels.get_one(query.channel_id)

        items, total = await self.customers.page(
            page=query.page,
            limit=query.limit,
            platform=query.platform,
            shop_id=query.shop_id,
            channel_id=query.channel_id,
            name=query.name,
        )
        return CustomerListResponse(
            data=[self._to_view(c) for c in items],
            total=total,
            page=query.page,
            limit=query.limit,
            total_pages=math.ceil(total / query.limit),
        )

    async def find_by_external_id(self, platform: str, external_id: str) -> CustomerResponse:
        customer = await self.customers.get_by_external_id(platform, external_id)
        if not customer:
            raise NotFound("Customer", f"{platform}:{external_id}")
        return self._to_view(customer)

    async def find_by_platform(self, platform: str) -> list[CustomerResponse]:
        return self._to_views(await self.customers.find(platform=platform))

    async def find_by_shop_id(self, shop_id: str) -> list[CustomerResponse]:
        await self.shops.find_one(shop_id)
        return self._to_views(await self.customers.find(shop_id=shop_id))

    async def find_by_channel_id(self, channel_id: int) -> list[CustomerResponse]:
        await self.channels.get_one(channel_id)
        return self._to_views(await self.customers.find(channel_id=channel_id))

    async def search_by_name(self, term: str) -> list[CustomerResponse]:
        return self._to_views(await self.customers.find(name=term))

    # ── Helpers ────────────────────────────────────

    async def _get_or_404(self, customer_id: int) -> Customer:
        customer = await self.customers.get(customer_id)
        if not customer:
            raise NotFound("Customer", customer_id)
        return customer

    async def _resolve_shop(self, shop_id: str) -> Shop:
        try:
            return await self.shops.find_one(shop_id)
        except NotFound as exc:
            logger.warning(f"Rejected reference to unknown shop {shop_id}")
            raise InvalidReference("shop", shop_id) from exc

    async def _resolve_channel(self, channel_id: int) -> Channel:
        try:
            return await self.channels.get_one(channel_id)
        except NotFound as exc:
            logger.warning(f"Rejected reference to unknown channel {channel_id}")
            raise InvalidReference("channel", channel_id) from exc

    @staticmethod
    def _to_view(customer: Customer) -> CustomerResponse:
        return CustomerResponse.model_validate(customer)

    @classmethod
    def _to_views(cls, customers: list[Customer]) -> list[CustomerResponse]:
        return [cls._to_view(c) for c in customers]
