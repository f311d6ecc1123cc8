"""Channel model - an inbound messaging/sales channel of a shop."""

from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import TimestampMixin


class Channel(TimestampMixin, Base):
    __tablename__ = "channels"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Platform code of the channel, e.g. "zalo", "fb"
    type: Mapped[str] = mapped_column(String(50), nullable=False)

    # Foreign keys
    shop_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships
    shop = relationship("Shop", back_populates="channels")
    customers = relationship("Customer", back_populates="channel")

    def __repr__(self) -> str:
        return f"<Channel {self.id}: {self.name}>"
