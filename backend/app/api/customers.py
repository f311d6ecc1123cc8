"""Customer endpoints.

Thin translation onto ``CustomerService``; domain errors become HTTP
responses through the handlers in ``app.api.errors``.
"""

from fastapi import APIRouter, Depends, Query, status

from app.core.config import settings
from app.core.deps import get_customer_service
from app.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerListQuery,
    CustomerResponse,
    CustomerListResponse,
)
from app.services.customer import CustomerService

router = APIRouter(prefix="/api/v1/customers", tags=["customers"])


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(
    body: CustomerCreate,
    service: CustomerService = Depends(get_customer_service),
):
    return await service.create(body)


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    platform: str | None = None,
    shop_id: str | None = Query(None, alias="shopId"),
    channel_id: int | None = Query(None, alias="channelId"),
    name: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: CustomerService = Depends(get_customer_service),
):
    """List customers, newest first, with optional filters."""
    query = CustomerListQuery(
        platform=platform,
        shop_id=shop_id,
        channel_id=channel_id,
        name=name,
        page=page,
        limit=limit,
    )
    return await service.find_all(query)


@router.get("/search", response_model=list[CustomerResponse])
async def search_customers(
    q: str = Query(..., min_length=1, description="Substring of the customer name"),
    service: CustomerService = Depends(get_customer_service),
):
    return await service.search_by_name(q)


@router.get("/platform/{platform}", response_model=list[CustomerResponse])
async def list_customers_by_platform(
    platform: str,
    service: CustomerService = Depends(get_customer_service),
):
    return await service.find_by_platform(platform)


@router.get("/shop/{shop_id}", response_model=list[CustomerResponse])
async def list_customers_by_shop(
    shop_id: str,
    service: CustomerService = Depends(get_customer_service),
):
    return await service.find_by_shop_id(shop_id)


@router.get("/channel/{channel_id}", response_model=list[CustomerResponse])
async def list_customers_by_channel(
    channel_id: int,
    service: CustomerService = Depends(get_customer_service),
):
    return await service.find_by_channel_id(channel_id)


@router.get("/external/{platform}/{external_id}", response_model=CustomerResponse)
async def get_customer_by_external_id(
    platform: str,
    external_id: str,
    service: CustomerService = Depends(get_customer_service),
):
    """Look up a customer by its identity on the originating platform."""
    return await service.find_by_external_id(platform, external_id)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: int,
    service: CustomerService = Depends(get_customer_service),
):
    return await service.find_one(customer_id)


@router.patch("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: int,
    body: CustomerUpdate,
    service: CustomerService = Depends(get_customer_service),
):
    """Partial update; fields left out of the body are not changed."""
    return await service.update(customer_id, body)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: int,
    service: CustomerService = Depends(get_customer_service),
):
    await service.remove(customer_id)
