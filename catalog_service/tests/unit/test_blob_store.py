import pytest

from catalog_service.app.core.blob_store import ProductBlobStore
from catalog_service.app.core.exceptions import BlobStoreNotReadyError


class TestProductBlobStore:
    """Blob store against the SQLite test database."""

    @pytest.fixture
    async def blob_store(self, test_database_manager):
        store = ProductBlobStore(test_database_manager.async_session_maker)
        await store.connect()
        yield store
        await store.close()

    @pytest.mark.asyncio
    async def test_operations_fail_before_connect(self, test_database_manager):
        store = ProductBlobStore(test_database_manager.async_session_maker)

        assert store.is_ready is False
        with pytest.raises(BlobStoreNotReadyError):
            await store.store(b"data", "chair.png", "image/png")
        with pytest.raises(BlobStoreNotReadyError):
            await store.get("a" * 32)
        with pytest.raises(BlobStoreNotReadyError):
            await store.delete("a" * 32)

    @pytest.mark.asyncio
    async def test_store_and_get(self, blob_store):
        blob_ref = await blob_store.store(b"\x89PNG", "chair.png", "image/png")

        assert len(blob_ref) == 32
        blob = await blob_store.get(blob_ref)
        assert blob is not None
        assert blob.data == b"\x89PNG"
        assert blob.filename == "chair.png"
        assert blob.content_type == "image/png"
        assert blob.length == 4

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, blob_store):
        blob_ref = await blob_store.store(b"bytes", "a.jpg", "image/jpeg")

        assert await blob_store.delete(blob_ref) is True
        assert await blob_store.get(blob_ref) is None
        assert await blob_store.delete(blob_ref) is False

    @pytest.mark.asyncio
    async def test_close_marks_store_not_ready(self, blob_store):
        await blob_store.close()

        with pytest.raises(BlobStoreNotReadyError):
            await blob_store.get("a" * 32)
