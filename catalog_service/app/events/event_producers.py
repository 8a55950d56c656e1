"""
Catalog Service Event Producers
===============================

Publishes product lifecycle events. Each mutation produces one event that is
sent to the general product events topic first and to the notifications
topic second. Sends run as background tasks so the HTTP response never waits
on the broker; failures are logged and dropped.
"""

import asyncio
from typing import Any, Dict, List, Optional, Set

from ..core.setting import get_settings
from ..utils.logging import setup_product_logging as setup_logging
from .base import BaseEvent, EventPublisher
from .schemas import PRODUCT_EVENT_TYPES

settings = get_settings()
logger = setup_logging("catalog_service.events.producers", log_level=settings.LOG_LEVEL)


class ProductEventProducer:
    """Fans product events out to every configured topic."""

    def __init__(
        self,
        kafka_publisher: EventPublisher,
        topics: Optional[List[str]] = None,
    ):
        self.kafka_publisher = kafka_publisher
        self.topics = topics or [
            settings.KAFKA_TOPIC_PRODUCT_EVENTS,
            settings.KAFKA_TOPIC_PRODUCT_NOTIFICATIONS,
        ]
        self._pending: Set[asyncio.Task[None]] = set()

    def publish_product_event(
        self,
        event_type: str,
        product_data: Dict[str, Any],
        correlation_id: Optional[str] = None,
    ) -> BaseEvent:
        """Schedule ``event_type`` for every topic, in topic order, and return it."""
        if event_type not in PRODUCT_EVENT_TYPES:
            raise ValueError(f"Unknown product event type: {event_type}")

        event = BaseEvent(
            event_type=event_type,
            data=product_data,
            correlation_id=correlation_id,
        )

        for topic in self.topics:
            task = asyncio.create_task(self._safe_publish(event, topic))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        return event

    async def _safe_publish(self, event: BaseEvent, topic: str) -> None:
        try:
            await self.kafka_publisher.publish(event, topic=topic)
        except Exception as e:
            logger.error(
                f"Failed to publish {event.event_type} event: {e}",
                extra={
                    "event_id": event.event_id,
                    "event_type": event.event_type,
                    "topic": topic,
                    "product_id": event.data.get("id"),
                    "correlation_id": event.correlation_id,
                },
            )

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every in-flight publish to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
