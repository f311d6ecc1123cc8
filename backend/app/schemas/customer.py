"""Customer schemas for API request/response."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.core.config import settings


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; accepts both on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Linked entity summaries ────────────────────────
class ShopSummary(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class ChannelSummary(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


# ── Requests ───────────────────────────────────────
class CustomerCreate(CamelModel):
    platform: str = Field(..., min_length=1, max_length=50)
    external_id: str = Field(..., min_length=1, max_length=255)
    name: str | None = Field(None, max_length=255)
    shop_id: str = Field(..., min_length=1, max_length=64)
    channel_id: int = Field(..., ge=1)


class CustomerUpdate(CamelModel):
    """Partial update.

    A field left out of the request is not in ``model_fields_set`` and is
    not touched. ``name`` may be sent as null or "" to clear it; the other
    fields may be omitted but not nulled.
    """

    platform: str | None = Field(None, min_length=1, max_length=50)
    external_id: str | None = Field(None, min_length=1, max_length=255)
    name: str | None = Field(None, max_length=255)
    shop_id: str | None = Field(None, min_length=1, max_length=64)
    channel_id: int | None = Field(None, ge=1)

    @field_validator("platform", "external_id", "shop_id", "channel_id")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class CustomerListQuery(CamelModel):
    platform: str | None = None
    shop_id: str | None = None
    channel_id: int | None = None
    name: str | None = None
    page: int = Field(1, ge=1)
    limit: int = Field(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)


# ── Responses ──────────────────────────────────────
class CustomerResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    platform: str
    external_id: str
    name: str | None = None
    shop_id: str | None = None
    channel_id: int | None = None
    shop: ShopSummary | None = None
    channel: ChannelSummary | None = None
    created_at: datetime
    updated_at: datetime


class CustomerListResponse(CamelModel):
    data: list[CustomerResponse]
    total: int
    page: int
    limit: int
    total_pages: int
