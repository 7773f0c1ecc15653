"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions (merge, validation, capacity) are never async;
      the services layer orchestrates the async calls around the pure logic
    - Store methods raise typed errors (ResourceNotFoundError, ConflictError,
      DatabaseError); cache reads degrade to a miss instead of raising
"""

from typing import Protocol

from app.core.order import Order


class OrderStore(Protocol):
    """Contract for durable order persistence — implemented by shell.

    Every write spans orders, delivery, payment and items atomically.
    """
    async def get_by_uid(self, uid: str) -> Order: ...
    async def create(self, order: Order) -> Order: ...
    async def update(self, order: Order) -> None: ...
    async def exists_by_uid(self, uid: str) -> bool: ...
    async def list_recent_for_cache_preload(self, limit: int) -> list[Order]: ...
    async def list_page(self, limit: int, offset: int) -> list[Order]: ...
    async def delete_by_uid(self, uid: str) -> None: ...


class OrderCache(Protocol):
    """Contract for the key/value order cache — implemented by shell."""
    async def get(self, uid: str) -> Order | None: ...
    async def set_many(
        self, orders: list[Order], ttl_seconds: int | None = None,
    ) -> int: ...
    async def list_keys(self, pattern: str) -> list[str]: ...
    async def delete(self, key: str) -> None: ...
