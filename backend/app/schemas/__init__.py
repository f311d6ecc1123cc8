from app.schemas.customer import (
    CustomerCreate, CustomerUpdate, CustomerListQuery,
    CustomerResponse, CustomerListResponse, ShopSummary, ChannelSummary,
)

__all__ = [
    "CustomerCreate", "CustomerUpdate", "CustomerListQuery",
    "CustomerResponse", "CustomerListResponse", "ShopSummary", "ChannelSummary",
]
