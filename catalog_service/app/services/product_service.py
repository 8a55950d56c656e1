"""Product service: coordinates the primary store, blob store, search index and events

Every mutation follows the same order: validation (not found, ownership),
durable write to the primary store, search index sync, then one event per
topic. Once the durable write has committed nothing rolls it back; index and
publish failures are logged and the caller still gets a success.
"""

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.blob_store import ProductBlobStore
from ..core.exceptions import (
    BlobStoreError,
    BlobStoreNotReadyError,
    CategoryNotFoundError,
    NotProductOwnerError,
    ProductNotFoundError,
    ProductStoreError,
    SearchIndexSyncError,
)
from ..core.search_index import ProductSearchIndex
from ..events.event_producers import ProductEventProducer
from ..events.schemas import PRODUCT_CREATED, PRODUCT_DELETED, PRODUCT_UPDATED
from ..models.blob import ProductBlob
from ..models.product import Product
from ..repository.category_repository import CategoryRepository
from ..repository.product_repository import ProductRepository
from ..schemas.product import (
    ImageUpload,
    ProductCreate,
    ProductDeleteResponse,
    ProductResponse,
    ProductUpdate,
)
from ..utils.logging import setup_product_logging as setup_logging
from .product_mapping import to_event_data, to_product_response, to_search_document

logger = setup_logging("catalog_service.product_service")


class ProductService:
    """Service class for product business logic"""

    def __init__(
        self,
        db: AsyncSession,
        blob_store: Optional[ProductBlobStore] = None,
        search_index: Optional[ProductSearchIndex] = None,
        event_producer: Optional[ProductEventProducer] = None,
    ):
        self.db = db
        self.repository = ProductRepository(db)
        self.category_repository = CategoryRepository(db)
        self.blob_store = blob_store
        self.search_index = search_index
        self.event_producer = event_producer

    # ==============================================
    # READS
    # ==============================================

    async def get_product(
        self, product_id: int, correlation_id: Optional[str] = None
    ) -> ProductResponse:
        """Get product by ID with its category name"""
        row = await self.repository.get_product_with_category(product_id)
        if row is None:
            raise ProductNotFoundError(product_id)

        product, category_name = row
        logger.info(
            "Product retrieved",
            extra={"product_id": product_id, "correlation_id": correlation_id},
        )
        return to_product_response(product, category_name)

    async def list_products(
        self, correlation_id: Optional[str] = None
    ) -> List[ProductResponse]:
        """Get every product with its category name"""
        rows = await self.repository.list_products_with_category()
        logger.info(
            "Products listed",
            extra={"count": len(rows), "correlation_id": correlation_id},
        )
        return [to_product_response(product, name) for product, name in rows]

    async def search_products(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 20,
    ) -> List[dict]:
        if self.search_index is None:
            raise SearchIndexSyncError("Search index is not available")
        return await self.search_index.search(query=query, category=category, limit=limit)

    async def get_product_image(self, product_id: int) -> ProductBlob:
        """Fetch the blob behind a product's uploaded image"""
        product = await self.repository.get_product_by_id(product_id)
        if product is None or not product.image_id:
            raise ProductNotFoundError(product_id)

        blob = await self._require_blob_store().get(product.image_id)
        if blob is None:
            raise ProductNotFoundError(product_id)
        return blob

    # ==============================================
    # MUTATIONS
    # ==============================================

    async def create_product(
        self,
        product_data: ProductCreate,
        user_id: str,
        image_file: Optional[ImageUpload] = None,
        profile_image_file: Optional[ImageUpload] = None,
        correlation_id: Optional[str] = None,
    ) -> ProductResponse:
        """Create a product owned by ``user_id``"""
        category_name = await self._resolve_category_name(product_data.category_id)

        # Never both; a product may also have no image at all
        image_url: Optional[str] = None
        image_id: Optional[str] = None
        if product_data.image_url:
            image_url = product_data.image_url
        elif image_file is not None:
            image_id = await self._store_upload(image_file)

        profile_image_id = None
        if profile_image_file is not None:
            profile_image_id = await self._store_upload(profile_image_file)

        try:
            product = await self.repository.create_product(
                title=product_data.title,
                description=product_data.description,
                category_id=product_data.category_id,
                price=product_data.price,
                quantity=product_data.quantity,
                image=image_url,
                image_id=image_id,
                seller_id=str(user_id),
                seller_profile_url=product_data.profile_url,
                seller_profile_image_id=profile_image_id,
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Failed to create product: {str(e)}",
                extra={"user_id": user_id, "correlation_id": correlation_id},
                exc_info=True,
            )
            for blob_ref in (image_id, profile_image_id):
                if blob_ref:
                    logger.warning(
                        "Product not created, uploaded blob left in storage",
                        extra={
                            "blob_ref": blob_ref,
                            "orphaned_blob_reference": True,
                            "user_id": user_id,
                            "correlation_id": correlation_id,
                        },
                    )
            raise ProductStoreError("Failed to create product") from e

        logger.info(
            "Product created successfully",
            extra={
                "product_id": product.id,
                "category_id": product.category_id,
                "user_id": user_id,
                "correlation_id": correlation_id,
            },
        )

        snapshot = to_product_response(product, category_name)
        await self._sync_search_index(snapshot, correlation_id)
        self._publish(PRODUCT_CREATED, snapshot, correlation_id)
        return snapshot

    async def update_product(
        self,
        product_id: int,
        product_data: ProductUpdate,
        user_id: str,
        image_file: Optional[ImageUpload] = None,
        correlation_id: Optional[str] = None,
    ) -> ProductResponse:
        """Update a product. Only the owning seller may do this."""
        product = await self._get_owned_product(product_id, user_id)

        if product_data.category_id and product_data.category_id != product.category_id:
            category_name = await self._resolve_category_name(product_data.category_id)
            product.category_id = product_data.category_id
        else:
            category_name = await self.category_repository.get_category_name(
                product.category_id
            )

        # Falsy values (empty string, 0) leave the stored value untouched
        product.title = product_data.title or product.title
        product.description = product_data.description or product.description
        product.price = product_data.price or product.price
        product.quantity = product_data.quantity or product.quantity
        product.seller_profile_url = (
            product_data.profile_url or product.seller_profile_url
        )

        if product_data.image_url:
            self._log_orphaned_blob(product, product.image_id, correlation_id)
            product.image = product_data.image_url
            product.image_id = None
        elif image_file is not None:
            new_image_id = await self._store_upload(image_file)
            self._log_orphaned_blob(product, product.image_id, correlation_id)
            product.image_id = new_image_id
            product.image = None

        try:
            product = await self.repository.save_product(product)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Failed to update product {product_id}: {str(e)}",
                extra={
                    "product_id": product_id,
                    "user_id": user_id,
                    "correlation_id": correlation_id,
                },
                exc_info=True,
            )
            raise ProductStoreError("Failed to update product") from e

        logger.info(
            "Product updated successfully",
            extra={
                "product_id": product_id,
                "user_id": user_id,
                "correlation_id": correlation_id,
            },
        )

        snapshot = to_product_response(product, category_name)
        await self._sync_search_index(snapshot, correlation_id)
        self._publish(PRODUCT_UPDATED, snapshot, correlation_id)
        return snapshot

    async def delete_product(
        self, product_id: int, user_id: str, correlation_id: Optional[str] = None
    ) -> ProductDeleteResponse:
        """Delete a product, its blobs and its index entry"""
        product = await self._get_owned_product(product_id, user_id)

        if product.image_id:
            await self._delete_blob(product.image_id, product_id, "product_image")
        if product.seller_profile_image_id:
            await self._delete_blob(
                product.seller_profile_image_id, product_id, "seller_profile_image"
            )

        category_name = await self.category_repository.get_category_name(
            product.category_id
        )
        snapshot = to_product_response(product, category_name)

        try:
            await self.repository.delete_product(product)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Failed to delete product {product_id}: {str(e)}",
                extra={
                    "product_id": product_id,
                    "user_id": user_id,
                    "correlation_id": correlation_id,
                },
                exc_info=True,
            )
            raise ProductStoreError("Failed to delete product") from e

        logger.info(
            "Product deleted successfully",
            extra={
                "product_id": product_id,
                "user_id": user_id,
                "correlation_id": correlation_id,
            },
        )

        await self._remove_from_search_index(product_id, correlation_id)
        self._publish(PRODUCT_DELETED, snapshot, correlation_id)
        return ProductDeleteResponse()

    # ==============================================
    # HELPERS
    # ==============================================

    async def _resolve_category_name(self, category_id: int) -> str:
        category_name = await self.category_repository.get_category_name(category_id)
        if category_name is None:
            raise CategoryNotFoundError(category_id)
        return category_name

    async def _get_owned_product(self, product_id: int, user_id: str) -> Product:
        product = await self.repository.get_product_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        if str(product.seller_id) != str(user_id):
            logger.warning(
                "Product mutation rejected: actor is not the seller",
                extra={"product_id": product_id, "user_id": user_id},
            )
            raise NotProductOwnerError(product_id, user_id)
        return product

    def _require_blob_store(self) -> ProductBlobStore:
        if self.blob_store is None:
            raise BlobStoreNotReadyError()
        return self.blob_store

    async def _store_upload(self, upload: Optional[ImageUpload]) -> Optional[str]:
        if upload is None:
            return None
        return await self._require_blob_store().store(
            upload.data, upload.filename, upload.content_type
        )

    async def _delete_blob(self, blob_ref: str, product_id: int, role: str) -> None:
        try:
            await self._require_blob_store().delete(blob_ref)
        except BlobStoreError as e:
            logger.error(
                f"Failed to delete {role} blob: {e.message}",
                extra={
                    "product_id": product_id,
                    "blob_ref": blob_ref,
                    "blob_role": role,
                },
            )

    def _log_orphaned_blob(
        self, product: Product, blob_ref: Optional[str], correlation_id: Optional[str]
    ) -> None:
        if not blob_ref:
            return
        # Replaced blobs are kept; cleanup happens out of band
        logger.warning(
            "Product image replaced, previous blob left in storage",
            extra={
                "product_id": product.id,
                "blob_ref": blob_ref,
                "orphaned_blob_reference": True,
                "correlation_id": correlation_id,
            },
        )

    async def _sync_search_index(
        self, snapshot: ProductResponse, correlation_id: Optional[str]
    ) -> None:
        if self.search_index is None:
            logger.warning(
                "Search index unavailable, product not synced",
                extra={"product_id": snapshot.id, "correlation_id": correlation_id},
            )
            return
        try:
            await self.search_index.upsert(snapshot.id, to_search_document(snapshot))
        except SearchIndexSyncError as e:
            logger.error(
                f"Search index sync failed: {e.message}",
                extra={
                    "product_id": snapshot.id,
                    "correlation_id": correlation_id,
                    "details": e.details,
                },
            )

    async def _remove_from_search_index(
        self, product_id: int, correlation_id: Optional[str]
    ) -> None:
        if self.search_index is None:
            logger.warning(
                "Search index unavailable, product not removed",
                extra={"product_id": product_id, "correlation_id": correlation_id},
            )
            return
        try:
            await self.search_index.remove(product_id)
        except SearchIndexSyncError as e:
            logger.error(
                f"Search index removal failed: {e.message}",
                extra={
                    "product_id": product_id,
                    "correlation_id": correlation_id,
                    "details": e.details,
                },
            )

    def _publish(
        self, event_type: str, snapshot: ProductResponse, correlation_id: Optional[str]
    ) -> None:
        if self.event_producer is None:
            logger.warning(
                f"Event producer unavailable, {event_type} not published",
                extra={"product_id": snapshot.id, "correlation_id": correlation_id},
            )
            return
        try:
            self.event_producer.publish_product_event(
                event_type, to_event_data(snapshot), correlation_id
            )
        except Exception as e:
            logger.error(
                f"Failed to schedule {event_type} event: {e}",
                extra={"product_id": snapshot.id, "correlation_id": correlation_id},
            )
