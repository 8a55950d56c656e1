"""
Events module for the Catalog Service.

Every product mutation emits one event (product_created, product_updated or
product_deleted) carrying the denormalized product snapshot. The same event
goes to the general product events topic and to the notifications topic.
"""

from .event_producers import ProductEventProducer

__all__ = ["ProductEventProducer"]
