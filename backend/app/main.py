"""Order Service API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map OrderServiceError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Store, cache, population policy and service built once in the lifespan and
      published on app.state
    - A failed cache preload is logged; startup continues with a cold cache

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Feed consumer runs as a background task on the same event loop; a broker
      outage at startup disables the feed, not the HTTP API
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

from aiokafka.errors import KafkaError
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.error_handlers import register_error_handlers
from app.api.routes import health, orders
from app.config import Settings, get_settings
from app.infrastructure.database import init_db
from app.infrastructure.observability import setup_logging
from app.infrastructure.order_feed import OrderFeedConsumer
from app.infrastructure.order_store import SqlOrderStore
from app.infrastructure.redis_cache import RedisOrderCache, create_async_redis
from app.services.cache_population import CachePopulationPolicy
from app.services.order_service import OrderReconciliationService

logger = logging.getLogger(__name__)


async def _preload_cache(policy: CachePopulationPolicy) -> None:
    try:
        await policy.populate_from_store()
    except Exception as e:
        logger.warning(f"Cache preload failed, starting cold: {e}")


async def _start_feed(
    service: OrderReconciliationService, settings: Settings,
) -> tuple[OrderFeedConsumer | None, asyncio.Task | None]:
    if not settings.kafka_enabled:
        logger.info("Order feed disabled")
        return None, None
    consumer = OrderFeedConsumer(
        service,
        bootstrap_servers=settings.kafka_bootstrap_servers,
        topic=settings.kafka_topic,
        group_id=settings.kafka_group_id,
        retry_backoff_seconds=settings.kafka_retry_backoff_seconds,
    )
    try:
        await consumer.start()
    except KafkaError as e:
        logger.error(f"Order feed unavailable, continuing without it: {e}")
        return None, None
    return consumer, asyncio.create_task(consumer.run())


async def _stop_feed(
    consumer: OrderFeedConsumer | None, feed_task: asyncio.Task | None,
) -> None:
    if consumer:
        await consumer.stop()
    if feed_task is None:
        return
    feed_task.cancel()
    try:
        await feed_task
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.error(f"Order feed task ended with an error: {e}", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    cache = RedisOrderCache(
        create_async_redis(settings.redis_host, settings.redis_port, settings.redis_db),
        key_prefix=settings.cache_key_prefix,
    )
    store = SqlOrderStore(db)
    policy = CachePopulationPolicy(
        cache, store,
        max_entries=settings.cache_max_orders,
        key_pattern=cache.key_pattern,
        ttl_seconds=settings.cache_ttl_seconds,
        preload_ttl_seconds=settings.cache_preload_ttl_seconds,
    )
    service = OrderReconciliationService(
        store, cache, policy,
        validate_on_write=settings.reconcile_validate_on_write,
        retry_conflicts=settings.reconcile_retry_conflicts,
    )
    app.state.order_cache = cache
    app.state.cache_policy = policy
    app.state.order_service = service

    await _preload_cache(policy)
    consumer, feed_task = await _start_feed(service, settings)
    logger.info("Order service API started")
    try:
        yield
    finally:
        logger.info("Order service API shutting down")
        await _stop_feed(consumer, feed_task)
        await cache.close()
        await db.close()


app = FastAPI(
    title="Order Service API", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(orders.router)

register_error_handlers(app)

# Static files — serves the lookup page when a build is present
# ADR: mounted AFTER API routes so /order/* and /health/* take precedence
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
