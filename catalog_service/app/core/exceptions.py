"""
Catalog Service exception hierarchy.

Not-found and ownership errors are raised before any durable write happens.
Search index, publish and blob errors are raised by the adapters; the product
service decides whether they reach the client.
"""

from typing import Any, Dict, Optional


class CatalogServiceError(Exception):
    """Base class for all Catalog Service errors"""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CategoryNotFoundError(CatalogServiceError):
    status_code = 404
    error_type = "category_not_found"

    def __init__(self, category_id: Any):
        super().__init__("Category not found", {"category_id": category_id})
        self.category_id = category_id


class ProductNotFoundError(CatalogServiceError):
    status_code = 404
    error_type = "product_not_found"

    def __init__(self, product_id: Any):
        super().__init__("Product not found", {"product_id": product_id})
        self.product_id = product_id


class NotProductOwnerError(CatalogServiceError):
    status_code = 403
    error_type = "not_product_owner"

    def __init__(self, product_id: Any, user_id: Any):
        super().__init__("Unauthorized", {"product_id": product_id})
        self.product_id = product_id
        self.user_id = user_id


class ProductStoreError(CatalogServiceError):
    error_type = "store_failure"


class SearchIndexSyncError(CatalogServiceError):
    status_code = 503
    error_type = "index_sync_failure"


class EventPublishError(CatalogServiceError):
    error_type = "publish_failure"


class BlobStoreError(CatalogServiceError):
    error_type = "blob_failure"


class BlobStoreNotReadyError(BlobStoreError):
    """Raised when the blob store is used before ``connect()`` succeeded"""

    error_type = "blob_store_not_ready"

    def __init__(self) -> None:
        super().__init__("Blob store is not connected")
