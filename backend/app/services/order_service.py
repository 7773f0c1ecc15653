"""Order Reconciliation Service — read-through lookups and create-or-merge upserts.

Invariants:
    - get_by_uid: cache first; a hit never touches the store
    - ResourceNotFoundError and ValidationError reach callers unchanged
    - Every other store failure becomes InternalError (details only in logs)
    - Cache failures are logged and swallowed; they never fail a call
    - create_or_update returns the reconciled order AND copies it into the argument
    - Replaying the same order converges: merge(x, x) == x

Design Decisions:
    - Holds no mutable state of its own: concurrent callers share one instance
    - No application-level lock around check-then-write; the store's unique constraint
      is the backstop. A ConflictError on insert is retried once as merge-then-update
      (retry_conflicts=False restores plain propagation)
    - validate_on_write checks the snapshot about to be persisted (incoming on create,
      merged on update) so partial feed updates of a valid order stay legal
"""

import logging
from datetime import datetime, timezone

from app.core.errors import (
    ConflictError, ErrorContext, InternalError, OrderServiceError,
    ResourceNotFoundError, ValidationError,
)
from app.core.merge_order import merge_orders
from app.core.order import Order, assign_order
from app.core.repository_protocols import OrderCache, OrderStore
from app.core.validate_order import check_order_uid, validate_order
from app.services.cache_population import CachePopulationPolicy

logger = logging.getLogger(__name__)


class OrderReconciliationService:
    """Cache-aside reconciliation of orders from the feed and the REST API."""

    def __init__(
        self,
        store: OrderStore,
        cache: OrderCache,
        cache_policy: CachePopulationPolicy,
        validate_on_write: bool = True,
        retry_conflicts: bool = True,
    ):
        self.store = store
        self.cache = cache
        self.cache_policy = cache_policy
        self.validate_on_write = validate_on_write
        self.retry_conflicts = retry_conflicts

    async def get_by_uid(self, uid: str) -> Order:
        """Return the order for uid, filling the cache on a store hit."""
        error = check_order_uid(uid)
        if error:
            logger.warning(f"Invalid order uid: {error.message}", extra={"order_uid": uid})
            raise error

        cached = await self.cache.get(uid)
        if cached is not None:
            logger.info("Order served from cache", extra={"order_uid": uid})
            return cached

        order = await self._fetch_from_store(uid)
        await self._cache_order(order)
        return order

    async def create_or_update(self, order: Order) -> Order:
        """Insert a new order or merge it into the stored one."""
        try:
            existing = await self.get_by_uid(order.order_uid)
        except ResourceNotFoundError:
            return await self._create(order)
        return await self._update(existing, order)

    async def list_orders(self, limit: int, offset: int) -> list[Order]:
        try:
            return await self.store.list_page(limit, offset)
        except OrderServiceError as e:
            logger.error(f"Failed to list orders: {e.message}")
            raise InternalError("list orders") from e

    # ─── Internals ──────────────────────────────────────────────

    async def _fetch_from_store(self, uid: str) -> Order:
        try:
            return await self.store.get_by_uid(uid)
        except ResourceNotFoundError:
            logger.info("Order not found", extra={"order_uid": uid})
            raise
        except Exception as e:
            logger.error(
                f"Failed to get order from store: {e}",
                extra={"order_uid": uid},
            )
            raise InternalError(
                "retrieve order", ErrorContext(order_uid=uid),
            ) from e

    async def _create(self, order: Order) -> Order:
        self._check_writable(order)
        logger.info("Creating new order", extra={"order_uid": order.order_uid})
        try:
            created = await self.store.create(order)
        except ConflictError:
            if not self.retry_conflicts:
                raise
            logger.warning(
                "Order inserted concurrently, retrying as update",
                extra={"order_uid": order.order_uid},
            )
            existing = await self._fetch_from_store(order.order_uid)
            return await self._update(existing, order)
        except Exception as e:
            logger.error(
                f"Failed to create order in store: {e}",
                extra={"order_uid": order.order_uid},
            )
            raise InternalError(
                "create order", ErrorContext(order_uid=order.order_uid),
            ) from e

        assign_order(order, created)
        await self._cache_order(created)
        logger.info("Order created", extra={"order_uid": order.order_uid})
        return order

    async def _update(self, existing: Order, incoming: Order) -> Order:
        logger.info(
            "Order exists, merging incoming data",
            extra={"order_uid": incoming.order_uid},
        )
        merged = merge_orders(existing, incoming, datetime.now(timezone.utc))
        self._check_writable(merged)
        try:
            await self.store.update(merged)
        except ResourceNotFoundError:
            raise
        except Exception as e:
            logger.error(
                f"Failed to update order in store: {e}",
                extra={"order_uid": incoming.order_uid},
            )
            raise InternalError(
                "update order", ErrorContext(order_uid=incoming.order_uid),
            ) from e

        assign_order(incoming, merged)
        await self._cache_order(merged)
        logger.info("Order updated", extra={"order_uid": incoming.order_uid})
        return incoming

    def _check_writable(self, order: Order) -> None:
        if not self.validate_on_write:
            return
        error: ValidationError | None = validate_order(order)
        if error:
            logger.warning(
                f"Order rejected: {error.message}",
                extra={"order_uid": order.order_uid, "error_code": error.code},
            )
            raise error

    async def _cache_order(self, order: Order) -> None:
        try:
            await self.cache_policy.add_one(order)
        except Exception as e:
            logger.warning(
                f"Failed to cache order: {e}",
                extra={"order_uid": order.order_uid},
            )
