"""Order Merge Engine — combines an existing snapshot with an incoming one, field by field.

Invariants:
    - All functions are PURE: inputs are never mutated, a new snapshot is returned
    - Incoming wins only on provided values; "", 0 and None mean "not provided"
    - merge_orders(x, x, now) == x except updated_at (idempotent replay)
    - Every chrt_id present in either input is present in the result
    - No item is dropped: len(result) >= max(len(existing), len(incoming))
    - Empty incoming items never delete existing items

Design Decisions:
    - Non-empty-wins over full replace: feed senders may publish partial updates
      without echoing unchanged fields (ADR: incremental feed)
    - Items paired by chrt_id in occurrence order: the n-th incoming item with a
      given chrt_id merges into the n-th existing one, so repeated ids survive replay
    - Result order is matched/new items in incoming order, then untouched existing
      items in existing order; deterministic for equal inputs
    - Explicit field tuples over reflection on the whole dataclass: identity and
      system fields (order_uid, id, created_at) are never overwritten by a sender
    - `now` injected by the caller: keeps the engine deterministic under test
"""

from dataclasses import fields, replace
from datetime import datetime
from typing import TypeVar

from app.core.order import Delivery, Item, Order, Payment

T = TypeVar("T", Delivery, Payment, Item)

ORDER_MERGE_FIELDS = (
    "track_number", "entry", "locale", "internal_signature", "customer_id",
    "delivery_service", "shardkey", "sm_id", "date_created", "oof_shard",
)


def is_provided(value: object) -> bool:
    """True unless value is the empty string, zero, or None."""
    return value is not None and value != "" and value != 0


def merge_record(existing: T, incoming: T | None) -> T:
    """Field-by-field non-empty-wins merge of two records of the same type."""
    if incoming is None:
        return replace(existing)
    changes = {
        f.name: getattr(incoming, f.name)
        for f in fields(existing)
        if is_provided(getattr(incoming, f.name))
    }
    return replace(existing, **changes)


def merge_delivery(existing: Delivery | None, incoming: Delivery | None) -> Delivery:
    """Merge deliveries; a missing existing record is treated as all-empty."""
    return merge_record(existing or Delivery(), incoming)


def merge_payment(existing: Payment | None, incoming: Payment | None) -> Payment:
    """Merge payments; a missing existing record is treated as all-empty."""
    return merge_record(existing or Payment(), incoming)


def merge_items(existing: list[Item], incoming: list[Item]) -> list[Item]:
    """Merge item lists keyed by chrt_id.

    Each incoming item is paired with the first not-yet-matched existing item
    of the same chrt_id and field-merged into it; incoming items without a
    partner are appended. Untouched existing items are retained after them.
    """
    if not incoming:
        return [replace(item) for item in existing]

    pending: dict[int, list[int]] = {}
    for index, item in enumerate(existing):
        pending.setdefault(item.chrt_id, []).append(index)

    matched: set[int] = set()
    merged = []
    for item in incoming:
        queue = pending.get(item.chrt_id)
        if queue:
            index = queue.pop(0)
            matched.add(index)
            merged.append(merge_record(existing[index], item))
        else:
            merged.append(replace(item))

    untouched = [
        replace(item) for index, item in enumerate(existing) if index not in matched
    ]
    return merged + untouched


def merge_orders(existing: Order, incoming: Order, now: datetime) -> Order:
    """Produce the reconciled snapshot of existing updated by incoming."""
    changes = {
        name: getattr(incoming, name)
        for name in ORDER_MERGE_FIELDS
        if is_provided(getattr(incoming, name))
    }
    return replace(
        existing,
        **changes,
        delivery=merge_delivery(existing.delivery, incoming.delivery),
        payment=merge_payment(existing.payment, incoming.payment),
        items=merge_items(existing.items, incoming.items),
        updated_at=now,
    )
