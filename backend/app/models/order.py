"""OrderRecord ORM — persists the order aggregate root.

Invariants:
    - order_uid is unique (the store's only backstop against duplicate inserts)
    - Owns exactly one DeliveryRecord and one PaymentRecord, and >= 1 ItemRecord
    - created_at set once on insert; updated_at rewritten by every update

Design Decisions:
    - Integer surrogate id + unique order_uid: sub-tables join on the small key
    - cascade delete-orphan on all children: replacing `items` deletes dropped rows
      inside the same transaction
    - lazy="selectin" on every relationship: async sessions cannot lazy-load
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.domain_types import ORDER_STRING_LIMITS, ORDER_UID_MAX_LENGTH
from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderRecord(Base):
    """Order row — scalar order fields plus relationships to its sub-entities."""
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_uid: Mapped[str] = mapped_column(
        String(ORDER_UID_MAX_LENGTH), nullable=False, unique=True, index=True,
    )
    track_number: Mapped[str] = mapped_column(
        String(ORDER_STRING_LIMITS["track_number"]), nullable=False, default="",
    )
    entry: Mapped[str] = mapped_column(
        String(ORDER_STRING_LIMITS["entry"]), nullable=False, default="",
    )
    locale: Mapped[str] = mapped_column(
        String(ORDER_STRING_LIMITS["locale"]), nullable=False, default="",
    )
    internal_signature: Mapped[str] = mapped_column(
        String(ORDER_STRING_LIMITS["internal_signature"]), nullable=False, default="",
    )
    customer_id: Mapped[str] = mapped_column(
        String(ORDER_STRING_LIMITS["customer_id"]), nullable=False, default="",
    )
    delivery_service: Mapped[str] = mapped_column(
        String(ORDER_STRING_LIMITS["delivery_service"]), nullable=False, default="",
    )
    shardkey: Mapped[str] = mapped_column(
        String(ORDER_STRING_LIMITS["shardkey"]), nullable=False, default="",
    )
    sm_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    date_created: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    oof_shard: Mapped[str] = mapped_column(
        String(ORDER_STRING_LIMITS["oof_shard"]), nullable=False, default="",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )

    # Relationships
    delivery: Mapped["DeliveryRecord"] = relationship(
        "DeliveryRecord", back_populates="order", uselist=False,
        cascade="all, delete-orphan", lazy="selectin",
    )
    payment: Mapped["PaymentRecord"] = relationship(
        "PaymentRecord", back_populates="order", uselist=False,
        cascade="all, delete-orphan", lazy="selectin",
    )
    items: Mapped[list["ItemRecord"]] = relationship(
        "ItemRecord", back_populates="order",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="ItemRecord.id",
    )
