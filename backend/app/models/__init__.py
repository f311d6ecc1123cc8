"""SQLAlchemy models for Shop CRM."""

from app.models.shop import Shop
from app.models.channel import Channel
from app.models.category import Category
from app.models.item import Item, Sku
from app.models.customer import Customer

__all__ = [
    "Shop",
    "Channel",
    "Category",
    "Item",
    "Sku",
    "Customer",
]
