"""
Catalog Service Event Management
Initializes and manages Kafka event publishing for the catalog service.
"""

from typing import Optional

from ..events.base.kafka_client import KafkaEventPublisher
from ..events.event_producers import ProductEventProducer
from ..utils.logging import setup_product_logging as setup_logging
from .setting import get_settings

logger = setup_logging("catalog_service.events", log_level=get_settings().LOG_LEVEL)

# Global instances
_kafka_publisher: Optional[KafkaEventPublisher] = None
_product_event_producer: Optional[ProductEventProducer] = None


async def init_events() -> None:
    """Initialize event publishing infrastructure"""
    global _kafka_publisher, _product_event_producer

    settings = get_settings()

    try:
        logger.info(
            "Initializing event publishing infrastructure",
            extra={
                "operation": "init_events",
                "kafka_servers": settings.KAFKA_BOOTSTRAP_SERVERS,
                "topics": [
                    settings.KAFKA_TOPIC_PRODUCT_EVENTS,
                    settings.KAFKA_TOPIC_PRODUCT_NOTIFICATIONS,
                ],
            },
        )

        _kafka_publisher = KafkaEventPublisher(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            client_id=f"{settings.SERVICE_NAME}-producer",
            max_retries=20,
            retry_delay=2.0,
            enable_graceful_degradation=True,
        )
        await _kafka_publisher.start(timeout=30.0)

        _product_event_producer = ProductEventProducer(
            _kafka_publisher,
            topics=[
                settings.KAFKA_TOPIC_PRODUCT_EVENTS,
                settings.KAFKA_TOPIC_PRODUCT_NOTIFICATIONS,
            ],
        )

        logger.info(
            "Event publishing infrastructure initialized successfully",
            extra={
                "operation": "init_events_complete",
                "kafka_client_id": f"{settings.SERVICE_NAME}-producer",
                "connected": _kafka_publisher.is_connected,
            },
        )

    except Exception as e:
        logger.warning(
            "Event publishing initialization failed - operating in degraded mode",
            extra={
                "operation": "init_events_failed",
                "error": str(e),
                "degraded_mode": True,
            },
        )


async def close_events() -> None:
    """Flush in-flight events and close the Kafka producer"""
    global _kafka_publisher, _product_event_producer

    try:
        if _product_event_producer:
            await _product_event_producer.drain()
        if _kafka_publisher:
            logger.info(
                "Closing event publishing infrastructure",
                extra={"operation": "close_events"},
            )
            await _kafka_publisher.stop()
    except Exception as e:
        logger.error(
            "Error closing event infrastructure",
            extra={"operation": "close_events_error", "error": str(e)},
        )
    finally:
        _kafka_publisher = None
        _product_event_producer = None


def get_event_producer() -> Optional[ProductEventProducer]:
    """Get the product event producer instance"""
    return _product_event_producer


async def health_check_events() -> bool:
    """Check if event publishing is healthy"""
    if _kafka_publisher:
        return await _kafka_publisher.health_check()
    return False
