"""Order Aggregate — in-memory snapshot of one customer purchase.

Invariants:
    - "Empty" means "" for strings, 0 for numbers, None for timestamps/sub-records
    - A persisted Order always has non-None delivery and payment and >= 1 item
    - id, created_at, updated_at are assigned by the store, never by senders

Design Decisions:
    - Plain dataclasses over ORM rows: core stays free of IO and session state
      (ADR: functional core, imperative shell)
    - Mutable dataclasses: create_or_update copies the reconciled snapshot back
      into the caller's object, so callers observe the stored state
"""

from dataclasses import dataclass, field, fields
from datetime import datetime


@dataclass
class Delivery:
    """Recipient contact and address."""
    name: str = ""
    phone: str = ""
    zip: str = ""
    city: str = ""
    address: str = ""
    region: str = ""
    email: str = ""


@dataclass
class Payment:
    """Payment transaction attached to an order."""
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


@dataclass
class Item:
    """Line item. chrt_id identifies the item within its order."""
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


@dataclass
class Order:
    """Order aggregate root — owns Delivery, Payment and Items."""
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
    delivery: Delivery | None = None
    payment: Payment | None = None
    items: list[Item] = field(default_factory=list)


def assign_order(target: Order, source: Order) -> None:
    """Overwrite every field of target with the value from source, in place."""
    for f in fields(Order):
        setattr(target, f.name, getattr(source, f.name))
