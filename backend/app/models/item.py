"""ItemRecord ORM — one line item of an order.

Invariants:
    - Always belongs to an order (order_id FK)
    - chrt_id is NOT unique at the table level; uniqueness within an order is a
      property maintained by the merge engine

Design Decisions:
    - Rows replaced wholesale on update (delete-orphan cascade): the merged item
      list is the source of truth, no per-row diffing in SQL
"""

from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.domain_types import ITEM_STRING_LIMITS
from app.db.base import Base


class ItemRecord(Base):
    """Item row."""
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    chrt_id: Mapped[int] = mapped_column(Integer, nullable=False)
    track_number: Mapped[str] = mapped_column(
        String(ITEM_STRING_LIMITS["track_number"]), nullable=False, default="",
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rid: Mapped[str] = mapped_column(
        String(ITEM_STRING_LIMITS["rid"]), nullable=False, default="",
    )
    name: Mapped[str] = mapped_column(
        String(ITEM_STRING_LIMITS["name"]), nullable=False, default="",
    )
    sale: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    size: Mapped[str] = mapped_column(
        String(ITEM_STRING_LIMITS["size"]), nullable=False, default="",
    )
    total_price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    nm_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    brand: Mapped[str] = mapped_column(
        String(ITEM_STRING_LIMITS["brand"]), nullable=False, default="",
    )
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    order: Mapped["OrderRecord"] = relationship(
        "OrderRecord", back_populates="items",
    )
