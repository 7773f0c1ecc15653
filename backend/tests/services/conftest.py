"""Service test fixtures — real store on SQLite, real cache on fakeredis, app client.

Invariants:
    - Every test gets a fresh database and a private Redis server (root conftest)
    - The cache bound is the smallest legal one (5) so eviction is easy to observe
    - The client talks to the real FastAPI app with app.state populated by hand

Design Decisions:
    - httpx ASGITransport does not run the lifespan: the fixture publishes the
      service objects on app.state itself and removes them afterwards
    - db_module.db_manager patched so the readiness probe sees the test engine
"""

import pytest
from httpx import ASGITransport, AsyncClient

import app.infrastructure.database as db_module
from app.infrastructure.order_store import SqlOrderStore
from app.infrastructure.redis_cache import RedisOrderCache
from app.main import app
from app.services.cache_population import CachePopulationPolicy
from app.services.order_service import OrderReconciliationService

CACHE_BOUND = 5


@pytest.fixture
def order_store(db_manager):
    return SqlOrderStore(db_manager)


@pytest.fixture
def order_cache(redis_client):
    return RedisOrderCache(redis_client, key_prefix="order:")


@pytest.fixture
def cache_policy(order_cache, order_store):
    return CachePopulationPolicy(
        order_cache, order_store,
        max_entries=CACHE_BOUND,
        key_pattern=order_cache.key_pattern,
        ttl_seconds=60,
        preload_ttl_seconds=120,
    )


@pytest.fixture
def order_service(order_store, order_cache, cache_policy):
    return OrderReconciliationService(order_store, order_cache, cache_policy)


@pytest.fixture
async def client(db_manager, order_cache, cache_policy, order_service):
    """FastAPI test client wired to the test store and cache."""
    original_manager = db_module.db_manager
    db_module.db_manager = db_manager
    app.state.order_cache = order_cache
    app.state.cache_policy = cache_policy
    app.state.order_service = order_service

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    db_module.db_manager = original_manager
    for name in ("order_cache", "cache_policy", "order_service"):
        if hasattr(app.state, name):
            delattr(app.state, name)
