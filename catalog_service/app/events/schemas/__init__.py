"""
Catalog Service Event Schemas
"""

from .event_schemas import (
    PRODUCT_CREATED,
    PRODUCT_DELETED,
    PRODUCT_EVENT_TYPES,
    PRODUCT_UPDATED,
    ProductEventData,
    SellerEventData,
)

__all__ = [
    "ProductEventData",
    "SellerEventData",
    "PRODUCT_CREATED",
    "PRODUCT_UPDATED",
    "PRODUCT_DELETED",
    "PRODUCT_EVENT_TYPES",
]
