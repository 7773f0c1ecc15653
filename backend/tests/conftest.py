"""Root conftest — shared test configuration and order fixtures.

Invariants:
    - Environment defaults are set before any app module reads settings
    - Every test gets a fresh in-memory SQLite database and a private fake Redis server

Design Decisions:
    - SQLite in-memory with StaticPool: one connection shared by all sessions, so the
      schema created by the fixture is visible to the store
    - DatabaseSessionManager built via __new__: reuses the production session() wrapper
      (rollback + DatabaseError mapping) on top of the test engine
    - FakeServer per test: fakeredis clients otherwise share state across tests
"""

import os
from datetime import datetime, timezone

import pytest
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("KAFKA_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")

from app.core.order import Delivery, Item, Order, Payment  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.infrastructure.database import DatabaseSessionManager  # noqa: E402
import app.models  # noqa: E402,F401


def _build_order(uid: str = "b563feb7b2b84b6test", **overrides) -> Order:
    order = Order(
        order_uid=uid,
        track_number="WBILMTESTTRACK",
        entry="WBIL",
        locale="en",
        customer_id="test",
        delivery_service="meest",
        shardkey="9",
        sm_id=99,
        date_created=datetime(2021, 11, 26, 6, 22, 19, tzinfo=timezone.utc),
        oof_shard="1",
        delivery=Delivery(
            name="Test Testov",
            phone="+9720000000",
            zip="2639809",
            city="Kiryat Mozkin",
            address="Ploshad Mira 15",
            region="Kraiot",
            email="test@gmail.com",
        ),
        payment=Payment(
            transaction=uid,
            currency="USD",
            provider="wbpay",
            amount=1817,
            payment_dt=1637907727,
            bank="alpha",
            delivery_cost=1500,
            goods_total=317,
        ),
        items=[
            Item(
                chrt_id=9934930,
                track_number="WBILMTESTTRACK",
                price=453,
                rid="ab4219087a764ae0btest",
                name="Mascaras",
                sale=30,
                size="0",
                total_price=317,
                nm_id=2389212,
                brand="Vivienne Sabo",
                status=202,
            ),
        ],
    )
    for name, value in overrides.items():
        setattr(order, name, value)
    return order


@pytest.fixture
def make_order():
    """Factory for a fully valid order (the classic sample document)."""
    return _build_order


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_manager(test_engine):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    return manager


@pytest.fixture
async def redis_client():
    client = FakeRedis(server=FakeServer(), decode_responses=True)
    yield client
    await client.aclose()
