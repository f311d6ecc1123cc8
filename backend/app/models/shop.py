"""Shop model - the tenant that owns catalog and customers."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import SoftDeleteMixin, TimestampMixin


class Shop(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "shops"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str | None] = mapped_column(String(50))

    # Relationships
    channels = relationship("Channel", back_populates="shop")
    categories = relationship("Category", back_populates="shop")
    items = relationship("Item", back_populates="shop")
    customers = relationship("Customer", back_populates="shop")

    def __repr__(self) -> str:
        return f"<Shop {self.id}: {self.name}>"
