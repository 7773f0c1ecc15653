"""PaymentRecord ORM — payment transaction, 1:1 with an order.

Design Decisions:
    - payment_dt as BigInteger: unix seconds from the source system, not a DB timestamp
"""

from sqlalchemy import BigInteger, String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.domain_types import PAYMENT_STRING_LIMITS
from app.db.base import Base


class PaymentRecord(Base):
    """Payment row, back-referenced by order_id."""
    __tablename__ = "payment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False, unique=True,
    )
    transaction: Mapped[str] = mapped_column(
        String(PAYMENT_STRING_LIMITS["transaction"]), nullable=False, default="",
    )
    request_id: Mapped[str] = mapped_column(
        String(PAYMENT_STRING_LIMITS["request_id"]), nullable=False, default="",
    )
    currency: Mapped[str] = mapped_column(
        String(PAYMENT_STRING_LIMITS["currency"]), nullable=False, default="",
    )
    provider: Mapped[str] = mapped_column(
        String(PAYMENT_STRING_LIMITS["provider"]), nullable=False, default="",
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    payment_dt: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    bank: Mapped[str] = mapped_column(
        String(PAYMENT_STRING_LIMITS["bank"]), nullable=False, default="",
    )
    delivery_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    goods_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    custom_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    order: Mapped["OrderRecord"] = relationship(
        "OrderRecord", back_populates="payment",
    )
