"""Order Feed Consumer — verifies per-message handling without a broker.

Invariants:
    - A valid JSON order is reconciled into the store
    - Undecodable, empty or rejected messages are skipped, never raised
    - stop() before start() is a no-op
    - run() keeps consuming after broker errors and handler failures

Design Decisions:
    - AIOKafkaConsumer is constructed but never started; run() is driven by a
      scripted async iterator swapped in for the consumer
"""

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

from aiokafka.errors import KafkaConnectionError

from app.infrastructure.order_feed import OrderFeedConsumer
from app.main import _stop_feed
from app.schemas.order import OrderSchema

UID = "b563feb7b2b84b6test"


def _consumer(service) -> OrderFeedConsumer:
    return OrderFeedConsumer(
        service, bootstrap_servers="localhost:9092", topic="orders", group_id="test",
    )


def _payload(order) -> bytes:
    return OrderSchema.from_domain(order).model_dump_json().encode()


async def test_valid_message_is_reconciled(order_service, order_store, make_order):
    consumer = _consumer(order_service)

    assert await consumer.handle_message(_payload(make_order())) is True
    assert await order_store.exists_by_uid(UID)


async def test_partial_message_updates_existing(order_service, order_store, make_order):
    consumer = _consumer(order_service)
    await consumer.handle_message(_payload(make_order()))

    update = json.dumps({"order_uid": UID, "track_number": "NEWTRACK"}).encode()
    assert await consumer.handle_message(update) is True

    stored = await order_store.get_by_uid(UID)
    assert stored.track_number == "NEWTRACK"
    assert len(stored.items) == 1


async def test_invalid_json_is_skipped(order_service, order_store):
    consumer = _consumer(order_service)

    assert await consumer.handle_message(b"{not json") is False
    assert await order_store.list_page(10, 0) == []


async def test_empty_message_is_skipped(order_service):
    assert await _consumer(order_service).handle_message(None) is False
    assert await _consumer(order_service).handle_message(b"") is False


async def test_rejected_order_is_skipped(order_service, order_store, make_order):
    consumer = _consumer(order_service)

    assert await consumer.handle_message(_payload(make_order(items=[]))) is False
    assert not await order_store.exists_by_uid(UID)


async def test_stop_without_start_is_noop(order_service):
    await _consumer(order_service).stop()


class _ScriptedStream:
    """Async-iterable stand-in for AIOKafkaConsumer: yields records, raises errors."""

    def __init__(self, events):
        self._events = list(events)
        self.reads = 0

    def __aiter__(self):
        return self

    async def __anext__(self):
        self.reads += 1
        if not self._events:
            raise StopAsyncIteration
        event = self._events.pop(0)
        if isinstance(event, Exception):
            raise event
        return event


def _record(value: bytes, offset: int = 0) -> SimpleNamespace:
    return SimpleNamespace(topic="orders", partition=0, offset=offset, value=value)


async def test_run_resumes_after_broker_error(order_service, order_store, make_order):
    consumer = _consumer(order_service)
    consumer.retry_backoff_seconds = 0
    consumer._consumer = _ScriptedStream([
        KafkaConnectionError(),
        _record(_payload(make_order())),
    ])

    await consumer.run()

    assert await order_store.exists_by_uid(UID)


async def test_run_survives_unexpected_handler_failure(order_service, make_order):
    consumer = _consumer(order_service)
    order_service.create_or_update = AsyncMock(
        side_effect=[RuntimeError("bug"), None],
    )
    consumer._consumer = _ScriptedStream([
        _record(_payload(make_order()), offset=0),
        _record(_payload(make_order()), offset=1),
    ])

    await consumer.run()

    assert order_service.create_or_update.await_count == 2


async def test_run_ends_when_stream_ends(order_service):
    consumer = _consumer(order_service)
    stream = _ScriptedStream([_record(b"{not json")])
    consumer._consumer = stream

    await consumer.run()

    assert stream.reads == 2


async def test_feed_shutdown_swallows_task_failure():
    async def crashed():
        raise RuntimeError("feed crashed")

    task = asyncio.create_task(crashed())
    await asyncio.sleep(0)

    await _stop_feed(None, task)

    assert task.done()
