"""Customer model - a shop's contact on one messaging platform."""

from sqlalchemy import String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import TimestampMixin

UQ_PLATFORM_EXTERNAL_ID = "uq_customers_platform_external_id"


class Customer(TimestampMixin, Base):
    __tablename__ = "customers"
    __table_args__ = (
        # Authoritative guard against concurrent creates of the same identity
        UniqueConstraint("platform", "external_id", name=UQ_PLATFORM_EXTERNAL_ID),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    platform: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))

    # Foreign keys
    shop_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("shops.id"), nullable=False, index=True
    )
    channel_id: Mapped[int] = mapped_column(
        ForeignKey("channels.id"), nullable=False, index=True
    )

    # Relationships
    shop = relationship("Shop", back_populates="customers", lazy="selectin")
    channel = relationship("Channel", back_populates="customers", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Customer {self.platform}:{self.external_id}>"
