"""
Unit tests for Catalog Service Error Handler.
"""

import json
from unittest.mock import Mock

import pytest
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_service.app.core.exceptions import (
    CatalogServiceError,
    NotProductOwnerError,
    ProductNotFoundError,
    ProductStoreError,
    SearchIndexSyncError,
)
from catalog_service.app.middleware.error.error_handler import (
    CatalogServiceErrorHandler,
)
from catalog_service.app.schemas.product import ProductCreate


class TestCatalogServiceErrorHandler:
    """Test cases for error handler."""

    @pytest.fixture
    def app(self):
        app = FastAPI()
        CatalogServiceErrorHandler.setup_error_handlers(app)
        return app

    @pytest.fixture
    def request_mock(self):
        mock_request = Mock(spec=Request)
        mock_request.url.path = "/api/v1/products/7"
        mock_request.method = "PUT"
        mock_request.state.correlation_id = "test-correlation-id"
        mock_request.state.user_id = "seller-2"
        return mock_request

    def test_setup_error_handlers(self, app):
        assert CatalogServiceError in app.exception_handlers
        assert StarletteHTTPException in app.exception_handlers
        assert RequestValidationError in app.exception_handlers
        assert ValidationError in app.exception_handlers
        assert ValueError in app.exception_handlers
        assert Exception in app.exception_handlers

    @pytest.mark.asyncio
    async def test_not_found_maps_to_404(self, app, request_mock):
        handler = app.exception_handlers[CatalogServiceError]

        response = await handler(request_mock, ProductNotFoundError(7))

        assert response.status_code == 404
        body = json.loads(response.body)
        assert body["error"]["type"] == "product_not_found"
        assert body["error"]["message"] == "Product not found"
        assert body["error"]["details"] == {"product_id": 7}
        assert body["error"]["correlation_id"] == "test-correlation-id"

    @pytest.mark.asyncio
    async def test_not_owner_maps_to_403(self, app, request_mock):
        handler = app.exception_handlers[CatalogServiceError]

        response = await handler(request_mock, NotProductOwnerError(7, "seller-2"))

        assert response.status_code == 403
        assert json.loads(response.body)["error"]["message"] == "Unauthorized"

    @pytest.mark.asyncio
    async def test_store_failure_hides_details(self, app, request_mock):
        handler = app.exception_handlers[CatalogServiceError]

        response = await handler(
            request_mock, ProductStoreError("Failed to create product", {"sql": "x"})
        )

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error"]["message"] == "An internal server error occurred"
        assert "details" not in body["error"]

    @pytest.mark.asyncio
    async def test_search_unavailable_maps_to_503(self, app, request_mock):
        handler = app.exception_handlers[CatalogServiceError]

        response = await handler(
            request_mock, SearchIndexSyncError("Search index is not available")
        )

        assert response.status_code == 503
        assert json.loads(response.body)["error"]["type"] == "index_sync_failure"

    @pytest.mark.asyncio
    async def test_http_exception_handler(self, app, request_mock):
        handler = app.exception_handlers[StarletteHTTPException]

        response = await handler(
            request_mock,
            StarletteHTTPException(status_code=403, detail="Required role: SHOP_OWNER"),
        )

        assert response.status_code == 403
        body = json.loads(response.body)
        assert body["error"]["type"] == "http_error"
        assert body["error"]["message"] == "Required role: SHOP_OWNER"

    @pytest.mark.asyncio
    async def test_request_validation_error_handler(self, app, request_mock):
        handler = app.exception_handlers[RequestValidationError]
        exc = RequestValidationError(
            [
                {
                    "loc": ["body", "title"],
                    "msg": "field required",
                    "type": "missing",
                }
            ]
        )

        response = await handler(request_mock, exc)

        assert response.status_code == 422
        errors = json.loads(response.body)["error"]["details"]["validation_errors"]
        assert errors[0]["field"] == "body.title"

    @pytest.mark.asyncio
    async def test_model_validation_error_handler(self, app, request_mock):
        handler = app.exception_handlers[ValidationError]
        with pytest.raises(ValidationError) as exc_info:
            ProductCreate(title="   ", category_id=1, price=1, quantity=1)

        response = await handler(request_mock, exc_info.value)

        assert response.status_code == 422
        body = json.loads(response.body)
        assert body["error"]["type"] == "data_validation_error"
        assert body["error"]["details"]["validation_errors"][0]["field"] == "title"

    @pytest.mark.asyncio
    async def test_value_error_handler(self, app, request_mock):
        handler = app.exception_handlers[ValueError]

        response = await handler(
            request_mock, ValueError("Category with slug already exists")
        )

        assert response.status_code == 400
        assert json.loads(response.body)["error"]["message"] == (
            "Category with slug already exists"
        )

    @pytest.mark.asyncio
    async def test_unhandled_exception_handler(self, app, request_mock):
        handler = app.exception_handlers[Exception]

        response = await handler(request_mock, RuntimeError("kaboom"))

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error"]["type"] == "internal_server_error"
        assert "kaboom" not in body["error"]["message"]
