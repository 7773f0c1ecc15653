"""Cache Population Policy — keeps the bounded order cache filled and within its bound.

Invariants:
    - After ensure_space(k) completes, current + k <= max_entries (if the cache cooperates)
    - add_one() raises CacheError when the order was not written; callers log and continue
    - populate_from_store() never loads more orders than there are free slots

Design Decisions:
    - Eviction picks an ARBITRARY subset of keys (SCAN order), not LRU. It is a capacity
      safety valve, not a recency guarantee (ADR: cheap eviction, documented weak point)
    - A failed single-key delete is logged and skipped: the bound may transiently be
      exceeded by that entry, TTL expiry reclaims it
    - Sizing arithmetic lives in core/cache_capacity.py; this module only does IO
"""

import logging

from app.core.cache_capacity import eviction_count, plan_preload
from app.core.errors import CacheError
from app.core.order import Order
from app.core.repository_protocols import OrderCache, OrderStore

logger = logging.getLogger(__name__)


class CachePopulationPolicy:
    """Bounded-cache admission and eviction around an OrderCache."""

    def __init__(
        self,
        cache: OrderCache,
        store: OrderStore,
        max_entries: int,
        key_pattern: str = "order:*",
        ttl_seconds: int | None = None,
        preload_ttl_seconds: int | None = None,
    ):
        self.cache = cache
        self.store = store
        self.max_entries = max_entries
        self.key_pattern = key_pattern
        self.ttl_seconds = ttl_seconds
        self.preload_ttl_seconds = preload_ttl_seconds

    async def current_size(self) -> int:
        return len(await self.cache.list_keys(self.key_pattern))

    async def ensure_space(self, incoming: int) -> int:
        """Evict enough entries to admit `incoming` new ones. Returns evictions done."""
        keys = await self.cache.list_keys(self.key_pattern)
        return await self._evict(keys, eviction_count(len(keys), incoming, self.max_entries))

    async def add_one(self, order: Order) -> None:
        await self.ensure_space(1)
        if await self.cache.set_many([order], self.ttl_seconds) == 0:
            raise CacheError("order was not stored", "add_one")
        logger.debug("Order added to cache", extra={"order_uid": order.order_uid})

    async def populate_from_store(self, limit: int | None = None) -> int:
        """Startup preload of the most recently created orders. Returns orders cached."""
        keys = await self.cache.list_keys(self.key_pattern)
        plan = plan_preload(len(keys), self.max_entries, limit)
        logger.info(
            f"Cache preload: {len(keys)}/{self.max_entries} entries, "
            f"evicting {plan.evict}, loading up to {plan.load}",
        )
        await self._evict(keys, plan.evict)
        if plan.load == 0:
            return 0

        orders = await self.store.list_recent_for_cache_preload(plan.load)
        if not orders:
            logger.info("No orders to load into cache")
            return 0
        added = await self.cache.set_many(orders, self.preload_ttl_seconds)
        logger.info(
            "Orders loaded into cache",
            extra={"count": added},
        )
        return added

    async def _evict(self, keys: list[str], count: int) -> int:
        if count <= 0:
            return 0
        evicted = 0
        for key in keys[:count]:
            try:
                await self.cache.delete(key)
                evicted += 1
            except CacheError as e:
                logger.error(f"Failed to evict cache key {key}: {e.message}")
        logger.info("Evicted cache entries", extra={"evicted": evicted})
        return evicted
