"""Category model - groups a shop's items."""

from sqlalchemy import String, ForeignKey
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import SoftDeleteMixin, TimestampMixin


class Category(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(String(500))
    images: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
    status: Mapped[str | None] = mapped_column(String(50))

    # Foreign keys
    shop_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships
    shop = relationship("Shop", back_populates="categories")
    items = relationship("Item", back_populates="category")

    def __repr__(self) -> str:
        return f"<Category {self.id}: {self.name}>"
