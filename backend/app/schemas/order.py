"""Order Schemas — Pydantic models for the REST body, the feed payload and cache entries.

Invariants:
    - Field names match the wire JSON exactly (snake_case, e.g. "chrt_id", "oof_shard")
    - Schemas validate TYPES only; business rules live in core/validate_order.py
    - OrderSchema.from_domain(o).to_domain() == o for every core Order

Design Decisions:
    - One schema for API, feed and cache: all three carry the same JSON document
    - Missing scalars default to their "empty" value so partial feed updates parse
    - from_attributes=True: schemas read core dataclasses directly, no hand-written mapping
    - Unknown keys ignored (Pydantic default): upstream may add fields without breaking ingest
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.core.order import Delivery, Item, Order, Payment


class DeliverySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str = ""
    phone: str = ""
    zip: str = ""
    city: str = ""
    address: str = ""
    region: str = ""
    email: str = ""


class PaymentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    transaction: str = ""
    request_id: str = ""
    currency: str = ""
    provider: str = ""
    amount: int = 0
    payment_dt: int = 0
    bank: str = ""
    delivery_cost: int = 0
    goods_total: int = 0
    custom_fee: int = 0


class ItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    chrt_id: int = 0
    track_number: str = ""
    price: int = 0
    rid: str = ""
    name: str = ""
    sale: int = 0
    size: str = ""
    total_price: int = 0
    nm_id: int = 0
    brand: str = ""
    status: int = 0


class OrderSchema(BaseModel):
    """Order document as published on the feed and returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    order_uid: str = ""
    track_number: str = ""
    entry: str = ""
    locale: str = ""
    internal_signature: str = ""
    customer_id: str = ""
    delivery_service: str = ""
    shardkey: str = ""
    sm_id: int = 0
    date_created: datetime | None = None
    oof_shard: str = ""
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    delivery: DeliverySchema | None = None
    payment: PaymentSchema | None = None
    items: list[ItemSchema] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, order: Order) -> "OrderSchema":
        return cls.model_validate(order)

    def to_domain(self) -> Order:
        scalars = self.model_dump(exclude={"delivery", "payment", "items"})
        return Order(
            **scalars,
            delivery=Delivery(**self.delivery.model_dump()) if self.delivery else None,
            payment=Payment(**self.payment.model_dump()) if self.payment else None,
            items=[Item(**item.model_dump()) for item in self.items],
        )


class OrderListResponse(BaseModel):
    """Paginated order listing."""
    orders: list[OrderSchema]
    limit: int
    offset: int


class CacheStatsResponse(BaseModel):
    """Current cache occupancy against its configured bound."""
    cached_orders: int
    max_orders: int
