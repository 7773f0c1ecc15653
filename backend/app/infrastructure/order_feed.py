"""Order Feed Consumer — reads raw order documents from Kafka into the reconciliation service.

Invariants:
    - One message = one JSON order document
    - Undecodable or rejected messages are logged and skipped (at-most-once, no retry,
      no dead-letter topic)
    - handle_message() never raises; the consume loop keeps running
    - A broker read error pauses the loop for retry_backoff_seconds, it never ends it
    - stop() is safe to call whether or not start() succeeded

Design Decisions:
    - handle_message() is transport-independent so it is testable without a broker
    - Offsets auto-committed by aiokafka: a crash mid-message may drop that message,
      which matches the at-most-once contract
    - Started as an asyncio task from the FastAPI lifespan; shares the event loop
      (and the service instance) with HTTP handlers
"""

import asyncio
import logging

from aiokafka import AIOKafkaConsumer
from aiokafka.errors import KafkaError
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import OrderServiceError
from app.schemas.order import OrderSchema
from app.services.order_service import OrderReconciliationService

logger = logging.getLogger(__name__)


class OrderFeedConsumer:
    """Kafka consumer loop feeding create_or_update."""

    def __init__(
        self,
        service: OrderReconciliationService,
        bootstrap_servers: str,
        topic: str,
        group_id: str,
        retry_backoff_seconds: float = 5.0,
    ):
        self.service = service
        self.topic = topic
        self.retry_backoff_seconds = retry_backoff_seconds
        self._consumer = AIOKafkaConsumer(
            topic,
            bootstrap_servers=bootstrap_servers,
            group_id=group_id,
            auto_offset_reset="latest",
            enable_auto_commit=True,
        )
        self._started = False

    async def start(self) -> None:
        await self._consumer.start()
        self._started = True
        logger.info("Order feed consumer started", extra={"topic": self.topic})

    async def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        await self._consumer.stop()
        logger.info("Order feed consumer stopped", extra={"topic": self.topic})

    async def run(self) -> None:
        """Consume until cancelled or the consumer is stopped.

        Broker errors are logged and iteration resumes after a pause; the loop
        only ends when the consumer stops yielding messages.
        """
        while True:
            try:
                async for message in self._consumer:
                    logger.debug(
                        "Order message received",
                        extra={
                            "topic": message.topic,
                            "partition": message.partition,
                            "offset": message.offset,
                        },
                    )
                    await self.handle_message(message.value)
                return
            except asyncio.CancelledError:
                logger.info("Order feed consume loop cancelled")
                raise
            except KafkaError as e:
                logger.error(
                    f"Order feed read failed, retrying in "
                    f"{self.retry_backoff_seconds}s: {e}",
                    extra={"topic": self.topic},
                )
                await asyncio.sleep(self.retry_backoff_seconds)

    async def handle_message(self, value: bytes | None) -> bool:
        """Decode and reconcile one payload. Returns True when the order was stored."""
        if not value:
            logger.warning("Skipping empty order message")
            return False
        try:
            order = OrderSchema.model_validate_json(value).to_domain()
        except PydanticValidationError as e:
            logger.error(f"Skipping undecodable order message: {e}")
            return False

        try:
            await self.service.create_or_update(order)
        except OrderServiceError as e:
            logger.error(
                f"Skipping order message: {e.message}",
                extra={"order_uid": order.order_uid, "error_code": e.code},
            )
            return False
        except Exception as e:
            logger.error(
                f"Skipping order message after unexpected failure: {e}",
                extra={"order_uid": order.order_uid},
                exc_info=True,
            )
            return False

        logger.info("Order message reconciled", extra={"order_uid": order.order_uid})
        return True
