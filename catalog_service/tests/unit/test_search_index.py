from unittest.mock import AsyncMock, Mock

import pytest
from elasticsearch import ConnectionError as ESConnectionError
from elasticsearch import NotFoundError

from catalog_service.app.core.exceptions import SearchIndexSyncError
from catalog_service.app.core.search_index import (
    PRODUCT_INDEX_MAPPINGS,
    ProductSearchIndex,
)


class TestProductSearchIndex:
    """Unit tests for the search index adapter with a mocked client."""

    @pytest.fixture
    def mock_client(self):
        client = Mock()
        client.indices = Mock()
        client.indices.exists = AsyncMock(return_value=False)
        client.indices.create = AsyncMock()
        client.index = AsyncMock()
        client.delete = AsyncMock()
        client.search = AsyncMock()
        client.ping = AsyncMock(return_value=True)
        client.close = AsyncMock()
        return client

    @pytest.fixture
    def search_index(self, mock_client):
        return ProductSearchIndex(mock_client, "microservice_products")

    @pytest.mark.asyncio
    async def test_ensure_index_creates_with_mappings(self, search_index, mock_client):
        created = await search_index.ensure_index()

        assert created is True
        mock_client.indices.create.assert_awaited_once_with(
            index="microservice_products", mappings=PRODUCT_INDEX_MAPPINGS
        )

    @pytest.mark.asyncio
    async def test_ensure_index_is_idempotent(self, search_index, mock_client):
        mock_client.indices.exists = AsyncMock(return_value=True)

        created = await search_index.ensure_index()

        assert created is False
        mock_client.indices.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ensure_index_unreachable(self, search_index, mock_client):
        mock_client.indices.exists = AsyncMock(
            side_effect=ESConnectionError("connection refused")
        )

        with pytest.raises(SearchIndexSyncError):
            await search_index.ensure_index()

    def test_mappings_cover_denormalized_fields(self):
        properties = PRODUCT_INDEX_MAPPINGS["properties"]

        assert properties["category"]["type"] == "keyword"
        assert properties["price"]["type"] == "float"
        assert properties["quantity"]["type"] == "integer"
        assert set(properties["seller"]["properties"]) == {
            "id",
            "profileUrl",
            "profileImageId",
        }

    @pytest.mark.asyncio
    async def test_upsert_replaces_document_by_id(self, search_index, mock_client):
        document = {"title": "Chair", "category": "Furniture", "price": 49.99}

        await search_index.upsert(7, document)

        mock_client.index.assert_awaited_once_with(
            index="microservice_products", id="7", document=document
        )

    @pytest.mark.asyncio
    async def test_upsert_failure_raises_sync_error(self, search_index, mock_client):
        mock_client.index = AsyncMock(side_effect=ESConnectionError("timeout"))

        with pytest.raises(SearchIndexSyncError) as exc_info:
            await search_index.upsert(7, {"title": "Chair"})

        assert exc_info.value.details["product_id"] == 7

    @pytest.mark.asyncio
    async def test_remove_missing_document_is_not_an_error(
        self, search_index, mock_client
    ):
        mock_client.delete = AsyncMock(
            side_effect=NotFoundError("not_found", Mock(status=404), {})
        )

        removed = await search_index.remove(7)

        assert removed is False

    @pytest.mark.asyncio
    async def test_remove_existing_document(self, search_index, mock_client):
        removed = await search_index.remove(7)

        assert removed is True
        mock_client.delete.assert_awaited_once_with(
            index="microservice_products", id="7"
        )

    @pytest.mark.asyncio
    async def test_search_builds_bool_query(self, search_index, mock_client):
        mock_client.search = AsyncMock(
            return_value={
                "hits": {
                    "hits": [
                        {
                            "_id": "7",
                            "_score": 2.5,
                            "_source": {"title": "Chair", "category": "Furniture"},
                        }
                    ]
                }
            }
        )

        results = await search_index.search(query="chair", category="Furniture", limit=5)

        assert results == [
            {"id": "7", "score": 2.5, "title": "Chair", "category": "Furniture"}
        ]
        kwargs = mock_client.search.await_args.kwargs
        assert kwargs["size"] == 5
        bool_query = kwargs["query"]["bool"]
        assert bool_query["must"][0]["multi_match"]["query"] == "chair"
        assert bool_query["filter"] == [{"term": {"category": "Furniture"}}]

    @pytest.mark.asyncio
    async def test_search_without_query_matches_all(self, search_index, mock_client):
        mock_client.search = AsyncMock(return_value={"hits": {"hits": []}})

        results = await search_index.search()

        assert results == []
        bool_query = mock_client.search.await_args.kwargs["query"]["bool"]
        assert bool_query["must"] == [{"match_all": {}}]
        assert bool_query["filter"] == []

    @pytest.mark.asyncio
    async def test_ping_swallows_transport_errors(self, search_index, mock_client):
        mock_client.ping = AsyncMock(side_effect=ESConnectionError("down"))

        assert await search_index.ping() is False
