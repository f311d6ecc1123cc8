"""Dependency injection: builds the customer service graph per request."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db
from app.repositories.customer import CustomerRepository
from app.services.channel import ChannelService
from app.services.customer import CustomerService
from app.services.shop import ShopService


async def get_customer_service(db: AsyncSession = Depends(get_db)) -> CustomerService:
    """All collaborators share the request's session."""
    return CustomerService(
        customers=CustomerRepository(db),
        shops=ShopService(db),
        channels=ChannelService(db),
    )
