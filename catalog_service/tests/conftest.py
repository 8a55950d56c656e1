"""
Pytest configuration and fixtures for Catalog Service tests.
"""

import os
from datetime import datetime
from decimal import Decimal
from typing import Any, AsyncGenerator
from unittest.mock import AsyncMock, Mock

import pytest

# Set up test environment before any service module reads settings
os.environ["APP_NAME"] = "Catalog Service"
os.environ["APP_VERSION"] = "1.0.0"
os.environ["DEBUG"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SERVICE_NAME"] = "catalog-service"
os.environ["PRODUCT_DATABASE_URL"] = "sqlite+aiosqlite:///test_catalog.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["KAFKA_BOOTSTRAP_SERVERS"] = "localhost:9092"
os.environ["CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["CORS_CREDENTIALS"] = "true"
os.environ["CORS_METHODS"] = '["*"]'
os.environ["CORS_HEADERS"] = '["*"]'

from catalog_service.app.core.database import database_manager  # noqa: E402
from catalog_service.app.core.setting import get_settings  # noqa: E402
from catalog_service.app.models.product import Product  # noqa: E402
from catalog_service.app.utils.jwt_handler import JWTHandler  # noqa: E402


@pytest.fixture(scope="session")
def test_settings():
    """Get test settings."""
    return get_settings()


@pytest.fixture
async def test_database_manager():
    """Fresh tables for every test that touches the database."""
    # Pooled connections may belong to another test's event loop
    await database_manager.async_engine.dispose()
    await database_manager.create_tables()

    yield database_manager

    async with database_manager.async_engine.begin() as conn:
        from catalog_service.app.models.base import CatalogServiceBase

        await conn.run_sync(CatalogServiceBase.metadata.drop_all)
    await database_manager.async_engine.dispose()


@pytest.fixture
async def db_session(test_database_manager) -> AsyncGenerator[Any, None]:
    """Create a test database session."""
    async with test_database_manager.async_session_maker() as session:
        yield session


@pytest.fixture(scope="session", autouse=True)
def cleanup_database_file():
    yield
    try:
        os.remove("test_catalog.db")
    except FileNotFoundError:
        pass


@pytest.fixture
def jwt_handler(test_settings) -> JWTHandler:
    return JWTHandler(test_settings.SECRET_KEY, test_settings.ALGORITHM)


@pytest.fixture
def shop_owner_token(jwt_handler) -> str:
    return jwt_handler.encode_token({"user_id": "seller-1", "roles": ["SHOP_OWNER"]})


@pytest.fixture
def other_owner_token(jwt_handler) -> str:
    return jwt_handler.encode_token({"user_id": "seller-2", "roles": ["SHOP_OWNER"]})


@pytest.fixture
def user_token(jwt_handler) -> str:
    return jwt_handler.encode_token({"user_id": "buyer-1", "roles": ["USER"]})


@pytest.fixture
def mock_request():
    """Mock FastAPI Request object."""
    from fastapi import Request

    mock_req = Mock(spec=Request)
    mock_req.state = Mock()
    mock_req.headers = {}
    mock_req.cookies = {}
    mock_req.url = Mock()
    mock_req.url.path = "/api/v1/products"
    mock_req.method = "GET"
    return mock_req


@pytest.fixture
def mock_call_next():
    """Mock call_next function for middleware testing."""

    async def call_next(request):
        from starlette.responses import Response

        return Response("OK", status_code=200)

    return call_next


@pytest.fixture
def sample_product() -> Product:
    """Transient product row owned by seller-1 with both blobs set."""
    return Product(
        id=7,
        title="Chair",
        description="Oak dining chair",
        category_id=1,
        price=Decimal("49.99"),
        quantity=10,
        image=None,
        image_id="a" * 32,
        seller_id="seller-1",
        seller_profile_url="https://example.com/seller-1",
        seller_profile_image_id="b" * 32,
        created_at=datetime(2026, 1, 1, 12, 0, 0),
        updated_at=datetime(2026, 1, 1, 12, 0, 0),
    )


@pytest.fixture
def mock_blob_store():
    store = Mock()
    store.is_ready = True
    store.store = AsyncMock(return_value="c" * 32)
    store.get = AsyncMock(return_value=None)
    store.delete = AsyncMock(return_value=True)
    return store


@pytest.fixture
def mock_search_index():
    index = Mock()
    index.upsert = AsyncMock()
    index.remove = AsyncMock(return_value=True)
    index.search = AsyncMock(return_value=[])
    return index


@pytest.fixture
def mock_event_producer():
    producer = Mock()
    producer.publish_product_event = Mock()
    return producer
