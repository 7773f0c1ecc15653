"""SQL Order Store — OrderStore implementation on SQLAlchemy async sessions.

Invariants:
    - Every write touches orders, delivery, payment and items in ONE transaction
    - create() re-labels the session manager's ConflictError with the order uid
    - update()/get_by_uid()/delete_by_uid() raise ResourceNotFoundError for unknown uids
    - Timestamps leave the store timezone-aware (UTC), whatever the backend returns

Design Decisions:
    - Records converted to core dataclasses at the boundary: services never hold ORM
      rows, so no session outlives a store call
    - update() replaces the item rows wholesale; the merged list is authoritative
    - Conversions walk dataclass fields: ORM column names mirror the core fields
"""

import logging
from dataclasses import fields
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, ResourceNotFoundError
from app.core.order import Delivery, Item, Order, Payment
from app.infrastructure.database import DatabaseSessionManager
from app.models.delivery import DeliveryRecord
from app.models.item import ItemRecord
from app.models.order import OrderRecord
from app.models.payment import PaymentRecord

logger = logging.getLogger(__name__)

ORDER_COLUMNS = (
    "track_number", "entry", "locale", "internal_signature", "customer_id",
    "delivery_service", "shardkey", "sm_id", "oof_shard",
)


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _copy_fields(source, target, names) -> None:
    for name in names:
        setattr(target, name, getattr(source, name))


def _field_names(cls) -> tuple[str, ...]:
    return tuple(f.name for f in fields(cls))


def record_to_order(record: OrderRecord) -> Order:
    """Convert a loaded OrderRecord (with children) into a core Order."""
    order = Order(
        order_uid=record.order_uid,
        id=record.id,
        date_created=_as_utc(record.date_created),
        created_at=_as_utc(record.created_at),
        updated_at=_as_utc(record.updated_at),
        delivery=Delivery(),
        payment=Payment(),
    )
    _copy_fields(record, order, ORDER_COLUMNS)
    if record.delivery is not None:
        _copy_fields(record.delivery, order.delivery, _field_names(Delivery))
    if record.payment is not None:
        _copy_fields(record.payment, order.payment, _field_names(Payment))
    for item_record in record.items:
        item = Item()
        _copy_fields(item_record, item, _field_names(Item))
        order.items.append(item)
    return order


def _apply_order(record: OrderRecord, order: Order) -> None:
    """Write every order-owned value of `order` onto `record`, children included."""
    _copy_fields(order, record, ORDER_COLUMNS)
    record.date_created = _as_utc(order.date_created)

    if record.delivery is None:
        record.delivery = DeliveryRecord()
    _copy_fields(order.delivery or Delivery(), record.delivery, _field_names(Delivery))

    if record.payment is None:
        record.payment = PaymentRecord()
    _copy_fields(order.payment or Payment(), record.payment, _field_names(Payment))

    item_records = []
    for item in order.items:
        item_record = ItemRecord()
        _copy_fields(item, item_record, _field_names(Item))
        item_records.append(item_record)
    record.items = item_records


async def _select_by_uid(db: AsyncSession, uid: str) -> OrderRecord | None:
    result = await db.execute(
        select(OrderRecord).where(OrderRecord.order_uid == uid),
    )
    return result.scalar_one_or_none()


class SqlOrderStore:
    """Durable order store backed by PostgreSQL (SQLite in tests)."""

    def __init__(self, db_manager: DatabaseSessionManager):
        self._db = db_manager

    async def get_by_uid(self, uid: str) -> Order:
        async with self._db.session() as db:
            record = await _select_by_uid(db, uid)
            if record is None:
                raise ResourceNotFoundError("Order", uid)
            return record_to_order(record)

    async def create(self, order: Order) -> Order:
        """Insert a new order; generated id and timestamps are in the returned copy."""
        try:
            async with self._db.session() as db:
                record = OrderRecord(
                    order_uid=order.order_uid,
                    delivery=DeliveryRecord(),
                    payment=PaymentRecord(),
                )
                _apply_order(record, order)
                db.add(record)
                await db.commit()
                return record_to_order(record)
        except ConflictError as e:
            logger.warning(
                "Order insert hit unique constraint",
                extra={"order_uid": order.order_uid},
            )
            raise ConflictError("Order", order.order_uid) from e

    async def update(self, order: Order) -> None:
        """Persist a full snapshot over the stored order with the same uid."""
        async with self._db.session() as db:
            record = await _select_by_uid(db, order.order_uid)
            if record is None:
                raise ResourceNotFoundError("Order", order.order_uid)
            _apply_order(record, order)
            record.updated_at = _as_utc(order.updated_at) or datetime.now(timezone.utc)
            await db.commit()

    async def exists_by_uid(self, uid: str) -> bool:
        async with self._db.session() as db:
            result = await db.execute(
                select(OrderRecord.id).where(OrderRecord.order_uid == uid).limit(1),
            )
            return result.scalar_one_or_none() is not None

    async def list_recent_for_cache_preload(self, limit: int) -> list[Order]:
        """Most recently created orders first, at most `limit` of them."""
        return await self.list_page(limit, 0)

    async def list_page(self, limit: int, offset: int) -> list[Order]:
        async with self._db.session() as db:
            result = await db.execute(
                select(OrderRecord)
                .order_by(OrderRecord.created_at.desc(), OrderRecord.id.desc())
                .limit(limit)
                .offset(offset),
            )
            return [record_to_order(r) for r in result.scalars().all()]

    async def delete_by_uid(self, uid: str) -> None:
        async with self._db.session() as db:
            record = await _select_by_uid(db, uid)
            if record is None:
                raise ResourceNotFoundError("Order", uid)
            await db.delete(record)
            await db.commit()
