"""Order Reconciliation Service — verifies read-through lookups and create-or-merge upserts.

Invariants:
    - create → get round trip returns the stored order
    - Replaying identical input converges (one order, no duplicate items)
    - NotFound leaves the cache untouched; a cache hit never touches the store
    - Store failures other than NotFound surface as InternalError
    - Cache failures never fail a call
    - A ConflictError on insert is retried once as an update

Design Decisions:
    - Real SqlOrderStore on SQLite and RedisOrderCache on fakeredis; AsyncMock only
      where a collaborator has to fail or be observed
"""

from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from app.core.errors import (
    CacheError, ConflictError, DatabaseError, InternalError,
    ResourceNotFoundError, ValidationError,
)
from app.core.order import Delivery, Item, Order
from app.infrastructure.order_store import SqlOrderStore
from app.services.order_service import OrderReconciliationService

UID = "b563feb7b2b84b6test"


async def test_create_then_get_round_trip(order_service, order_cache, make_order):
    await order_service.create_or_update(make_order())

    from_cache = await order_service.get_by_uid(UID)
    await order_cache.delete(f"order:{UID}")
    from_store = await order_service.get_by_uid(UID)

    for found in (from_cache, from_store):
        assert found.id is not None
        assert replace(found, id=None, created_at=None, updated_at=None) == make_order()


async def test_create_copies_stored_state_into_argument(order_service, make_order):
    order = make_order()
    returned = await order_service.create_or_update(order)

    assert returned is order
    assert order.id is not None
    assert order.created_at is not None


async def test_created_order_is_cached(order_service, order_cache, make_order):
    await order_service.create_or_update(make_order())

    cached = await order_cache.get(UID)
    assert cached is not None
    assert cached.track_number == "WBILMTESTTRACK"


async def test_idempotent_replay(order_service, order_store, make_order):
    await order_service.create_or_update(make_order())
    await order_service.create_or_update(make_order())

    orders = await order_store.list_page(10, 0)
    assert len(orders) == 1
    assert len(orders[0].items) == 1


async def test_replay_keeps_items_with_repeated_chrt_id(order_service, order_store, make_order):
    def order_with_twin_items():
        return make_order(items=[
            Item(chrt_id=9934930, name="Mascaras", price=453, brand="Vivienne Sabo"),
            Item(chrt_id=9934930, name="Lipstick", price=200, brand="Vivienne Sabo"),
        ])

    await order_service.create_or_update(order_with_twin_items())
    after_one = await order_store.get_by_uid(UID)
    await order_service.create_or_update(order_with_twin_items())
    after_two = await order_store.get_by_uid(UID)

    assert [(i.name, i.price) for i in after_two.items] == [
        ("Mascaras", 453), ("Lipstick", 200),
    ]
    assert after_two.items == after_one.items


async def test_update_with_changed_track_number_keeps_items(
    order_service, order_store, order_cache, make_order,
):
    await order_service.create_or_update(make_order())

    incoming = Order(order_uid=UID, track_number="NEWTRACK")
    await order_service.create_or_update(incoming)

    stored = await order_store.get_by_uid(UID)
    cached = await order_cache.get(UID)
    for snapshot in (stored, cached):
        assert snapshot.track_number == "NEWTRACK"
        assert len(snapshot.items) == 1
        assert snapshot.items[0].chrt_id == 9934930
        assert snapshot.items[0].price == 453
        assert snapshot.items[0].brand == "Vivienne Sabo"
    assert incoming.items == stored.items


async def test_not_found_does_not_populate_cache(order_service, order_cache):
    with pytest.raises(ResourceNotFoundError):
        await order_service.get_by_uid("nonexistent-uid-1234")

    assert await order_cache.list_keys(order_cache.key_pattern) == []


async def test_malformed_uid_rejected_before_store(order_service, order_store):
    order_store.get_by_uid = AsyncMock()

    with pytest.raises(ValidationError) as exc_info:
        await order_service.get_by_uid("short")

    assert exc_info.value.field == "order_uid"
    order_store.get_by_uid.assert_not_awaited()


async def test_cache_hit_skips_store(order_service, order_store, make_order):
    await order_service.create_or_update(make_order())
    order_store.get_by_uid = AsyncMock()

    found = await order_service.get_by_uid(UID)

    assert found.order_uid == UID
    order_store.get_by_uid.assert_not_awaited()


async def test_store_hit_fills_cache(order_service, order_store, order_cache, make_order):
    await order_store.create(make_order())
    assert await order_cache.get(UID) is None

    await order_service.get_by_uid(UID)

    assert await order_cache.get(UID) is not None


@pytest.mark.parametrize("field, change", [
    ("order_uid", {"uid": "abcde"}),
    ("items", {"items": []}),
])
async def test_invalid_create_rejected(order_service, order_store, make_order, field, change):
    with pytest.raises(ValidationError) as exc_info:
        await order_service.create_or_update(make_order(**change))

    assert exc_info.value.field == field
    assert await order_store.list_page(10, 0) == []


async def test_zero_payment_amount_rejected(order_service, order_store, make_order):
    order = make_order()
    order.payment.amount = 0

    with pytest.raises(ValidationError) as exc_info:
        await order_service.create_or_update(order)

    assert exc_info.value.field == "payment.amount"
    assert not await order_store.exists_by_uid(UID)


async def test_invalid_merge_rejected_and_store_unchanged(
    order_service, order_store, make_order,
):
    await order_service.create_or_update(make_order())

    with pytest.raises(ValidationError) as exc_info:
        await order_service.create_or_update(
            Order(order_uid=UID, delivery=Delivery(email="not-an-email")),
        )

    assert exc_info.value.field == "delivery.email"
    stored = await order_store.get_by_uid(UID)
    assert stored.delivery.email == "test@gmail.com"


async def test_validation_can_be_disabled(order_store, order_cache, cache_policy, make_order):
    service = OrderReconciliationService(
        order_store, order_cache, cache_policy, validate_on_write=False,
    )

    await service.create_or_update(make_order(items=[]))

    assert await order_store.exists_by_uid(UID)


async def test_store_failure_becomes_internal_error(order_service, order_store):
    order_store.get_by_uid = AsyncMock(
        side_effect=DatabaseError("connection refused", "execute"),
    )

    with pytest.raises(InternalError) as exc_info:
        await order_service.get_by_uid(UID)

    assert "connection refused" not in exc_info.value.to_response()["error"]["message"]


async def test_create_failure_becomes_internal_error(order_service, order_store, make_order):
    order_store.create = AsyncMock(side_effect=DatabaseError("disk full", "commit"))

    with pytest.raises(InternalError):
        await order_service.create_or_update(make_order())


async def test_cache_write_failure_is_not_fatal(order_service, order_cache, order_store, make_order):
    order_cache.set_many = AsyncMock(return_value=0)

    order = await order_service.create_or_update(make_order())

    assert order.id is not None
    assert await order_store.exists_by_uid(UID)


async def test_cache_listing_failure_is_not_fatal(order_service, order_cache, make_order):
    order_cache.list_keys = AsyncMock(side_effect=CacheError("down", "list_keys"))

    order = await order_service.create_or_update(make_order())

    assert order.order_uid == UID


async def test_conflict_on_insert_retried_as_update(
    order_service, order_store, db_manager, make_order,
):
    await order_store.create(make_order())
    stored = await order_store.get_by_uid(UID)
    # Simulate a concurrent insert landing between the existence check and create
    order_store.get_by_uid = AsyncMock(
        side_effect=[ResourceNotFoundError("Order", UID), stored],
    )

    incoming = make_order(track_number="RACEDTRACK")
    await order_service.create_or_update(incoming)

    reread = await SqlOrderStore(db_manager).get_by_uid(UID)
    assert reread.track_number == "RACEDTRACK"
    assert len(await order_store.list_page(10, 0)) == 1


async def test_conflict_propagates_when_retry_disabled(
    order_store, order_cache, cache_policy, make_order,
):
    service = OrderReconciliationService(
        order_store, order_cache, cache_policy, retry_conflicts=False,
    )
    await order_store.create(make_order())
    order_store.get_by_uid = AsyncMock(side_effect=ResourceNotFoundError("Order", UID))

    with pytest.raises(ConflictError):
        await service.create_or_update(make_order())


async def test_list_orders_newest_first(order_service, make_order):
    await order_service.create_or_update(make_order("first-order-uid"))
    await order_service.create_or_update(make_order("second-order-uid"))

    orders = await order_service.list_orders(10, 0)

    assert [o.order_uid for o in orders] == ["second-order-uid", "first-order-uid"]
