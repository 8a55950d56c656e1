"""
FastAPI dependency injection for Catalog Service

Provides database sessions, the explicitly constructed collaborators held on
``app.state`` (blob store, search index), the event producer, role-checked
actor identities and correlation ids.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.blob_store import ProductBlobStore
from ..core.database import get_db_session
from ..core.event_management import get_event_producer
from ..core.search_index import ProductSearchIndex
from ..events.event_producers import ProductEventProducer
from ..middleware.auth.auth_middleware import any_catalog_user, shop_owner
from ..services.category_service import CategoryService
from ..services.product_service import ProductService

# =====================================================
# INFRASTRUCTURE DEPENDENCIES
# =====================================================


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide async database session"""
    async for session in get_db_session():
        yield session


def get_blob_store(request: Request) -> Optional[ProductBlobStore]:
    """Blob store created during startup, if any"""
    return getattr(request.app.state, "blob_store", None)


def get_search_index(request: Request) -> Optional[ProductSearchIndex]:
    """Search index created during startup, if any"""
    return getattr(request.app.state, "search_index", None)


def get_product_event_producer() -> Optional[ProductEventProducer]:
    """Provide ProductEventProducer instance"""
    return get_event_producer()


# =====================================================
# SERVICE DEPENDENCIES
# =====================================================


def get_product_service(
    session: AsyncSession = Depends(get_async_session),
    blob_store: Optional[ProductBlobStore] = Depends(get_blob_store),
    search_index: Optional[ProductSearchIndex] = Depends(get_search_index),
    event_producer: Optional[ProductEventProducer] = Depends(
        get_product_event_producer
    ),
) -> ProductService:
    """Provide ProductService wired to every backing system"""
    return ProductService(session, blob_store, search_index, event_producer)


def get_category_service(
    session: AsyncSession = Depends(get_async_session),
) -> CategoryService:
    return CategoryService(session)


# =====================================================
# REQUEST CONTEXT DEPENDENCIES
# =====================================================


def get_correlation_id(request: Request) -> Optional[str]:
    """Extract correlation ID from request headers or state"""
    correlation_id = request.headers.get("X-Correlation-ID") or request.headers.get(
        "x-request-id"
    )
    if not correlation_id:
        correlation_id = getattr(request.state, "correlation_id", None)
    return correlation_id


# =====================================================
# COMMON DEPENDENCY ALIASES
# =====================================================

CorrelationIdDep = Depends(get_correlation_id)
ShopOwnerDep = Depends(shop_owner)
CatalogUserDep = Depends(any_catalog_user)

ProductServiceDep = Depends(get_product_service)
CategoryServiceDep = Depends(get_category_service)
