"""
Product image blob storage.

Blobs live in the ``product_blobs`` table of the primary database and are
addressed by an opaque 32-character hex reference. The store is constructed
explicitly at startup and must be connected before use: every operation
raises ``BlobStoreNotReadyError`` until ``connect()`` has succeeded.
"""

import uuid
from typing import Optional

from sqlalchemy import delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models.blob import ProductBlob
from ..utils.logging import setup_product_logging as setup_logging
from .exceptions import BlobStoreError, BlobStoreNotReadyError
from .setting import get_settings

logger = setup_logging("catalog_service.blob_store", log_level=get_settings().LOG_LEVEL)


class ProductBlobStore:
    """Stores, fetches and deletes binary image payloads."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker
        self.is_ready = False

    async def connect(self) -> None:
        """Verify the backing table is reachable and mark the store ready."""
        try:
            async with self.session_maker() as session:
                await session.execute(text("SELECT 1"))
                await session.execute(select(ProductBlob.id).limit(1))
        except SQLAlchemyError as e:
            self.is_ready = False
            logger.error(
                "Blob store connection failed",
                extra={"operation": "blob_store_connect", "error": str(e)},
            )
            raise BlobStoreError("Blob store connection failed") from e

        self.is_ready = True
        logger.info("Blob store ready", extra={"operation": "blob_store_connect"})

    async def close(self) -> None:
        self.is_ready = False

    def _ensure_ready(self) -> None:
        if not self.is_ready:
            raise BlobStoreNotReadyError()

    async def store(self, data: bytes, filename: str, content_type: str) -> str:
        """Persist a payload and return its blob reference."""
        self._ensure_ready()

        blob_ref = uuid.uuid4().hex
        blob = ProductBlob(
            id=blob_ref,
            filename=filename or "upload",
            content_type=content_type or "application/octet-stream",
            length=len(data),
            data=data,
        )

        try:
            async with self.session_maker() as session:
                session.add(blob)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to store blob",
                extra={
                    "operation": "blob_store",
                    "blob_filename": filename,
                    "error": str(e),
                },
            )
            raise BlobStoreError("Failed to store blob") from e

        logger.info(
            "Blob stored",
            extra={
                "operation": "blob_store",
                "blob_ref": blob_ref,
                "content_type": blob.content_type,
                "length": blob.length,
            },
        )
        return blob_ref

    async def get(self, blob_ref: str) -> Optional[ProductBlob]:
        self._ensure_ready()
        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    select(ProductBlob).where(ProductBlob.id == blob_ref)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise BlobStoreError("Failed to read blob", {"blob_ref": blob_ref}) from e

    async def delete(self, blob_ref: str) -> bool:
        """Delete a blob. Returns False when it was already absent."""
        self._ensure_ready()
        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    delete(ProductBlob).where(ProductBlob.id == blob_ref)
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise BlobStoreError(
                "Failed to delete blob", {"blob_ref": blob_ref}
            ) from e

        deleted = result.rowcount > 0
        if not deleted:
            logger.info(
                "Blob already absent",
                extra={"operation": "blob_delete", "blob_ref": blob_ref},
            )
        return deleted
