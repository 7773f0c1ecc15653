"""Redis Order Cache — OrderCache implementation on redis.asyncio.

Invariants:
    - Keys are `<prefix><order_uid>`; values are OrderSchema JSON documents
    - get() never raises: connection errors and corrupt entries degrade to a miss
    - set_many() never raises: it reports how many orders were actually written
    - list_keys()/delete() raise CacheError so the population policy can decide

Design Decisions:
    - SCAN over KEYS: key listing does not block Redis on large keyspaces
    - Per-order SET with expiry: one failed write does not discard the rest
    - decode_responses=True: values are JSON text, keys come back as str
"""

import logging

import redis.asyncio as redis_async
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from app.core.domain_types import cache_key
from app.core.errors import CacheError
from app.core.order import Order
from app.schemas.order import OrderSchema

logger = logging.getLogger(__name__)


def create_async_redis(host: str, port: int, db: int) -> redis_async.Redis:
    """Create an async Redis client with decoded (str) responses."""
    return redis_async.Redis(
        host=host,
        port=port,
        db=db,
        decode_responses=True,
    )


class RedisOrderCache:
    """Order snapshots in Redis, one key per order."""

    def __init__(self, client: redis_async.Redis, key_prefix: str = "order:"):
        self._client = client
        self.key_prefix = key_prefix

    @property
    def key_pattern(self) -> str:
        return f"{self.key_prefix}*"

    async def get(self, uid: str) -> Order | None:
        key = cache_key(self.key_prefix, uid)
        try:
            raw = await self._client.get(key)
        except RedisError as e:
            logger.warning(f"Cache read failed: {e}", extra={"order_uid": uid})
            return None
        if raw is None:
            return None
        try:
            return OrderSchema.model_validate_json(raw).to_domain()
        except PydanticValidationError as e:
            logger.error(
                f"Corrupt cache entry ignored: {e}", extra={"order_uid": uid},
            )
            return None

    async def set_many(
        self, orders: list[Order], ttl_seconds: int | None = None,
    ) -> int:
        """Write orders; returns the number successfully stored."""
        stored = 0
        for order in orders:
            payload = OrderSchema.from_domain(order).model_dump_json()
            try:
                await self._client.set(
                    cache_key(self.key_prefix, order.order_uid),
                    payload,
                    ex=ttl_seconds,
                )
                stored += 1
            except RedisError as e:
                logger.warning(
                    f"Cache write failed: {e}",
                    extra={"order_uid": order.order_uid},
                )
        return stored

    async def list_keys(self, pattern: str) -> list[str]:
        try:
            return [key async for key in self._client.scan_iter(match=pattern)]
        except RedisError as e:
            raise CacheError(str(e), "list_keys")

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as e:
            raise CacheError(str(e), "delete")

    async def health_check(self) -> bool:
        """Ping Redis (for readiness probes)."""
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.error(f"Cache health check failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
