import asyncio
import json
from typing import Any, Dict, Optional, Set

from aiokafka import AIOKafkaProducer  # type: ignore
from aiokafka.admin import AIOKafkaAdminClient, NewTopic  # type: ignore
from aiokafka.errors import KafkaConnectionError, KafkaError  # type: ignore

from ...core.exceptions import EventPublishError
from ...core.setting import get_settings
from ...utils.logging import setup_product_logging as setup_logging
from . import BaseEvent, EventPublisher

logger = setup_logging(
    "catalog_service.events.kafka", log_level=get_settings().LOG_LEVEL
)


def _serialize_value(value: Dict[str, Any]) -> bytes:
    return json.dumps(value, default=str).encode("utf-8")


def _serialize_key(key: Optional[str]) -> Optional[bytes]:
    return key.encode("utf-8") if key else None


class KafkaEventPublisher(EventPublisher):
    """
    Kafka publisher for product events.

    Connects with capped exponential backoff. With graceful degradation
    enabled, an unreachable broker turns every publish into a log line
    instead of an error.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        client_id: str,
        max_retries: int = 20,
        retry_delay: float = 2.0,
        max_retry_delay: float = 30.0,
        enable_graceful_degradation: bool = True,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.client_id = client_id
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay
        self.enable_graceful_degradation = enable_graceful_degradation
        self.producer: Optional[AIOKafkaProducer] = None
        self.is_connected = False
        self._connection_lock = asyncio.Lock()
        self._known_topics: Set[str] = set()

    def backoff_delay(self, attempt: int) -> float:
        return min(self.retry_delay * (2**attempt), self.max_retry_delay)

    def _build_producer(self) -> AIOKafkaProducer:
        return AIOKafkaProducer(
            bootstrap_servers=self.bootstrap_servers,
            client_id=self.client_id,
            value_serializer=_serialize_value,
            key_serializer=_serialize_key,
            acks="all",
            retry_backoff_ms=1000,
            request_timeout_ms=30000,
        )

    async def start(self, timeout: float = 30.0) -> None:
        """Connect the producer, retrying until ``max_retries`` is exhausted."""
        async with self._connection_lock:
            if self.producer and self.is_connected:
                return

            for attempt in range(1, self.max_retries + 1):
                producer = self._build_producer()
                try:
                    await asyncio.wait_for(producer.start(), timeout=timeout)  # type: ignore
                except (KafkaConnectionError, asyncio.TimeoutError) as e:
                    await self._discard_producer(producer)
                    if attempt == self.max_retries:
                        break
                    delay = self.backoff_delay(attempt - 1)
                    logger.warning(
                        f"Kafka connection attempt {attempt}/{self.max_retries} failed, "
                        f"retrying in {delay:.1f}s",
                        extra={"operation": "kafka_connect", "error": str(e)},
                    )
                    await asyncio.sleep(delay)
                    continue

                self.producer = producer
                self.is_connected = True
                logger.info(
                    "Connected to Kafka",
                    extra={"operation": "kafka_connect", "attempt": attempt},
                )
                return

            self.is_connected = False
            if not self.enable_graceful_degradation:
                raise EventPublishError(
                    "Could not connect to Kafka",
                    {"bootstrap_servers": self.bootstrap_servers},
                )
            logger.error(
                "Kafka unreachable, product events will be logged instead of published",
                extra={"operation": "kafka_connect", "attempts": self.max_retries},
            )

    async def _discard_producer(self, producer: AIOKafkaProducer) -> None:
        try:
            await producer.stop()  # type: ignore
        except Exception as e:
            logger.debug(
                "Ignoring error while discarding Kafka producer",
                extra={"operation": "kafka_discard", "error": str(e)},
            )

    async def stop(self) -> None:
        """Flush and stop the producer."""
        async with self._connection_lock:
            producer, self.producer = self.producer, None
            self.is_connected = False
            if producer is None:
                return
            try:
                await producer.stop()  # type: ignore
                logger.info("Kafka producer stopped")
            except KafkaError as e:
                logger.warning(
                    "Error stopping Kafka producer",
                    extra={"operation": "stop_producer", "error": str(e)},
                )

    async def _ensure_topic(self, topic: str) -> None:
        """Create ``topic`` on first use. Failures are left to the send."""
        if topic in self._known_topics:
            return

        admin_client = AIOKafkaAdminClient(bootstrap_servers=self.bootstrap_servers)
        try:
            await admin_client.start()  # type: ignore
            if topic not in await admin_client.list_topics():
                await admin_client.create_topics(
                    [NewTopic(name=topic, num_partitions=1, replication_factor=1)]
                )
                logger.info(
                    "Created Kafka topic",
                    extra={"operation": "create_topic", "topic": topic},
                )
            self._known_topics.add(topic)
        except KafkaError as e:
            logger.warning(
                "Could not verify Kafka topic",
                extra={"operation": "create_topic", "topic": topic, "error": str(e)},
            )
        finally:
            await admin_client.close()  # type: ignore

    def _degrade(
        self, event: BaseEvent, topic: str, reason: str, error: Optional[Exception] = None
    ) -> None:
        """Log the event in place of publishing it, or raise when degradation is off."""
        if not self.enable_graceful_degradation:
            details = {"topic": topic, "event_id": event.event_id}
            if error is not None:
                details["error"] = str(error)
            raise EventPublishError(reason, details)

        logger.warning(
            f"{reason}; logging {event.event_type} event instead",
            extra={
                "event_id": event.event_id,
                "event_type": event.event_type,
                "topic": topic,
                "correlation_id": event.correlation_id,
                "event_data": event.model_dump(mode="json"),
            },
        )

    async def publish(self, event: BaseEvent, topic: str) -> None:
        """Send ``event`` to ``topic`` keyed by product id."""
        if not self.is_connected or self.producer is None:
            self._degrade(event, topic, "Kafka producer not connected")
            return

        await self._ensure_topic(topic)

        product_id = event.data.get("id")
        try:
            await self.producer.send_and_wait(  # type: ignore
                topic,
                value=event.model_dump(mode="json"),
                key=str(product_id) if product_id is not None else None,
            )
        except KafkaError as e:
            self._degrade(event, topic, "Failed to publish event to Kafka", e)
            return

        logger.info(
            "Published product event",
            extra={
                "operation": "publish_event",
                "event_id": event.event_id,
                "event_type": event.event_type,
                "topic": topic,
                "product_id": product_id,
                "correlation_id": event.correlation_id,
            },
        )

    async def health_check(self) -> bool:
        """True when the producer is connected and sees at least one broker."""
        if self.producer is None or not self.is_connected:
            return False
        try:
            metadata = await self.producer.client.fetch_all_metadata()  # type: ignore
        except KafkaError as e:
            logger.warning(
                "Kafka health check failed",
                extra={"operation": "health_check", "error": str(e)},
            )
            return False
        return len(metadata.brokers()) > 0  # type: ignore
