"""
Elasticsearch-backed product search index.

The index mirrors a denormalized view of every product (category name
embedded, price as float, nested seller object). Writes are full-document
replaces keyed by product id, so replaying them is harmless.
"""

from typing import Any, Dict, List, Optional

from elasticsearch import ApiError, AsyncElasticsearch, NotFoundError, TransportError

from ..utils.logging import setup_product_logging as setup_logging
from .exceptions import SearchIndexSyncError
from .setting import get_settings

logger = setup_logging(
    "catalog_service.search_index", log_level=get_settings().LOG_LEVEL
)

PRODUCT_INDEX_MAPPINGS: Dict[str, Any] = {
    "properties": {
        "title": {"type": "text"},
        "description": {"type": "text"},
        "category": {"type": "keyword"},
        "category_id": {"type": "integer"},
        "price": {"type": "float"},
        "quantity": {"type": "integer"},
        "image": {"type": "text"},
        "imageId": {"type": "keyword"},
        "seller": {
            "properties": {
                "id": {"type": "keyword"},
                "profileUrl": {"type": "text"},
                "profileImageId": {"type": "keyword"},
            }
        },
    }
}


def create_search_client(
    url: str,
    username: Optional[str] = None,
    password: Optional[str] = None,
    request_timeout: int = 10,
) -> AsyncElasticsearch:
    client_kwargs: Dict[str, Any] = {"request_timeout": request_timeout}
    if username:
        client_kwargs["basic_auth"] = (username, password or "")
    return AsyncElasticsearch(url, **client_kwargs)


class ProductSearchIndex:
    """Keeps the product search index in step with the primary store."""

    def __init__(self, client: AsyncElasticsearch, index_name: str):
        self.client = client
        self.index_name = index_name

    async def ensure_index(self) -> bool:
        """Create the index with its fixed mappings if it does not exist yet.

        Safe to call on every startup. Returns True when the index was created.
        """
        try:
            exists = await self.client.indices.exists(index=self.index_name)
            if exists:
                logger.info(
                    "Search index already present",
                    extra={"operation": "ensure_index", "index": self.index_name},
                )
                return False

            await self.client.indices.create(
                index=self.index_name, mappings=PRODUCT_INDEX_MAPPINGS
            )
        except (ApiError, TransportError) as e:
            logger.error(
                "Error ensuring search index exists",
                extra={
                    "operation": "ensure_index",
                    "index": self.index_name,
                    "error": str(e),
                },
            )
            raise SearchIndexSyncError(
                "Failed to ensure search index", {"index": self.index_name}
            ) from e

        logger.info(
            "Search index created",
            extra={"operation": "ensure_index", "index": self.index_name},
        )
        return True

    async def upsert(self, product_id: int, document: Dict[str, Any]) -> None:
        """Replace the whole document stored for ``product_id``."""
        try:
            await self.client.index(
                index=self.index_name, id=str(product_id), document=document
            )
        except (ApiError, TransportError) as e:
            raise SearchIndexSyncError(
                "Failed to sync product to search index",
                {"product_id": product_id, "error": str(e)},
            ) from e

        logger.info(
            "Product synced to search index",
            extra={"operation": "index_upsert", "product_id": product_id},
        )

    async def remove(self, product_id: int) -> bool:
        """Delete the document for ``product_id``; an absent document is fine."""
        try:
            await self.client.delete(index=self.index_name, id=str(product_id))
        except NotFoundError:
            logger.info(
                "Product already absent from search index",
                extra={"operation": "index_remove", "product_id": product_id},
            )
            return False
        except (ApiError, TransportError) as e:
            raise SearchIndexSyncError(
                "Failed to remove product from search index",
                {"product_id": product_id, "error": str(e)},
            ) from e

        logger.info(
            "Product removed from search index",
            extra={"operation": "index_remove", "product_id": product_id},
        )
        return True

    async def search(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 20,
    ) -> List[Dict[str, Any]]:
        """Full-text search over title and description, optionally by category."""
        must: List[Dict[str, Any]] = []
        if query:
            must.append(
                {"multi_match": {"query": query, "fields": ["title^2", "description"]}}
            )
        filters: List[Dict[str, Any]] = []
        if category:
            filters.append({"term": {"category": category}})

        body_query: Dict[str, Any] = {
            "bool": {"must": must or [{"match_all": {}}], "filter": filters}
        }

        try:
            response = await self.client.search(
                index=self.index_name, query=body_query, size=limit
            )
        except (ApiError, TransportError) as e:
            raise SearchIndexSyncError(
                "Search index query failed", {"error": str(e)}
            ) from e

        return [
            {"id": hit["_id"], "score": hit.get("_score"), **hit["_source"]}
            for hit in response["hits"]["hits"]
        ]

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except (ApiError, TransportError):
            return False

    async def close(self) -> None:
        await self.client.close()
