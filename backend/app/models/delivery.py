"""DeliveryRecord ORM — recipient contact and address, 1:1 with an order."""

from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.domain_types import DELIVERY_STRING_LIMITS
from app.db.base import Base


class DeliveryRecord(Base):
    """Delivery row, back-referenced by order_id."""
    __tablename__ = "delivery"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    name: Mapped[str] = mapped_column(
        String(DELIVERY_STRING_LIMITS["name"]), nullable=False, default="",
    )
    phone: Mapped[str] = mapped_column(
        String(DELIVERY_STRING_LIMITS["phone"]), nullable=False, default="",
    )
    zip: Mapped[str] = mapped_column(
        String(DELIVERY_STRING_LIMITS["zip"]), nullable=False, default="",
    )
    city: Mapped[str] = mapped_column(
        String(DELIVERY_STRING_LIMITS["city"]), nullable=False, default="",
    )
    address: Mapped[str] = mapped_column(
        String(DELIVERY_STRING_LIMITS["address"]), nullable=False, default="",
    )
    region: Mapped[str] = mapped_column(
        String(DELIVERY_STRING_LIMITS["region"]), nullable=False, default="",
    )
    email: Mapped[str] = mapped_column(
        String(DELIVERY_STRING_LIMITS["email"]), nullable=False, default="",
    )

    order: Mapped["OrderRecord"] = relationship(
        "OrderRecord", back_populates="delivery",
    )
