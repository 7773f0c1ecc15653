"""Cache Population Policy — verifies the bounded cache never outgrows its limit.

Invariants:
    - Writes past the bound evict arbitrary entries, size stays <= max_entries
    - Startup preload loads the newest orders into free slots only
    - A failed single-key eviction is skipped, not raised

Design Decisions:
    - Bound of 5 (the smallest legal value) from the services conftest
"""

from unittest.mock import AsyncMock

import pytest

from app.core.errors import CacheError

CACHE_BOUND = 5


def _uid(n: int) -> str:
    return f"order-uid-{n:04d}"


async def test_add_one_respects_bound(cache_policy, make_order):
    for n in range(CACHE_BOUND + 3):
        await cache_policy.add_one(make_order(_uid(n)))

    assert await cache_policy.current_size() == CACHE_BOUND


async def test_latest_write_always_cached(cache_policy, order_cache, make_order):
    for n in range(CACHE_BOUND + 3):
        await cache_policy.add_one(make_order(_uid(n)))

    assert await order_cache.get(_uid(CACHE_BOUND + 2)) is not None


async def test_ensure_space_evicts_only_overflow(cache_policy, order_cache, make_order):
    await order_cache.set_many([make_order(_uid(n)) for n in range(4)])

    assert await cache_policy.ensure_space(1) == 0
    assert await cache_policy.ensure_space(3) == 2
    assert await cache_policy.current_size() == 2


async def test_add_one_raises_when_write_fails(cache_policy, order_cache, make_order):
    order_cache.set_many = AsyncMock(return_value=0)

    with pytest.raises(CacheError):
        await cache_policy.add_one(make_order())


async def test_add_one_sets_ttl(cache_policy, redis_client, make_order):
    await cache_policy.add_one(make_order())

    ttl = await redis_client.ttl("order:b563feb7b2b84b6test")
    assert 0 < ttl <= 60


async def test_preload_into_empty_cache(cache_policy, order_store, order_cache, make_order):
    for n in range(3):
        await order_store.create(make_order(_uid(n)))

    added = await cache_policy.populate_from_store()

    assert added == 3
    assert await order_cache.get(_uid(2)) is not None


async def test_preload_never_exceeds_bound(cache_policy, order_store, make_order):
    for n in range(CACHE_BOUND + 4):
        await order_store.create(make_order(_uid(n)))
    await cache_policy.populate_from_store()

    await cache_policy.populate_from_store()

    assert await cache_policy.current_size() <= CACHE_BOUND


async def test_preload_prefers_newest_orders(cache_policy, order_store, order_cache, make_order):
    for n in range(CACHE_BOUND + 2):
        await order_store.create(make_order(_uid(n)))

    await cache_policy.populate_from_store()

    assert await order_cache.get(_uid(CACHE_BOUND + 1)) is not None
    assert await order_cache.get(_uid(0)) is None


async def test_preload_with_limit(cache_policy, order_store, make_order):
    for n in range(4):
        await order_store.create(make_order(_uid(n)))

    assert await cache_policy.populate_from_store(limit=2) == 2


async def test_preload_from_empty_store(cache_policy):
    assert await cache_policy.populate_from_store() == 0


async def test_failed_eviction_is_skipped(cache_policy, order_cache, make_order):
    await order_cache.set_many([make_order(_uid(n)) for n in range(CACHE_BOUND)])
    order_cache.delete = AsyncMock(side_effect=CacheError("down", "delete"))

    assert await cache_policy.ensure_space(1) == 0
