"""
Unit tests for Catalog Service authentication middleware and role checks.
"""

import json
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from fastapi import FastAPI, HTTPException

from catalog_service.app.middleware.auth.auth_middleware import (
    SHOP_OWNER,
    USER,
    CatalogServiceAuthMiddleware,
    RoleRequirement,
)


class TestCatalogServiceAuthMiddleware:
    """Test cases for token extraction and validation."""

    @pytest.fixture
    def middleware(self, jwt_handler):
        return CatalogServiceAuthMiddleware(FastAPI(), jwt_handler=jwt_handler)

    def test_health_path_skips_auth(self, middleware):
        assert middleware._should_skip_auth("/health") is True
        assert middleware._should_skip_auth("/docs/oauth2-redirect") is True
        assert middleware._should_skip_auth("/healthz") is False
        assert middleware._should_skip_auth("/api/v1/products") is False

    @pytest.mark.asyncio
    async def test_missing_token_is_rejected(
        self, middleware, mock_request, mock_call_next
    ):
        response = await middleware.dispatch(mock_request, mock_call_next)

        assert response.status_code == 401
        body = json.loads(response.body)
        assert body["error"]["type"] == "authentication_error"
        assert body["error"]["details"]["reason"] == "missing_token"

    @pytest.mark.asyncio
    async def test_invalid_token_is_rejected(
        self, middleware, mock_request, mock_call_next
    ):
        mock_request.headers = {"Authorization": "Bearer not-a-jwt"}

        response = await middleware.dispatch(mock_request, mock_call_next)

        assert response.status_code == 401
        assert json.loads(response.body)["error"]["details"]["reason"] == (
            "invalid_token"
        )

    @pytest.mark.asyncio
    async def test_expired_token_is_rejected(
        self, middleware, jwt_handler, mock_request, mock_call_next
    ):
        token = jwt_handler.encode_token(
            {"user_id": "seller-1", "roles": [SHOP_OWNER]},
            expires_delta=timedelta(minutes=-5),
        )
        mock_request.headers = {"Authorization": f"Bearer {token}"}

        response = await middleware.dispatch(mock_request, mock_call_next)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_bearer_token_sets_identity(
        self, middleware, shop_owner_token, mock_request, mock_call_next
    ):
        mock_request.headers = {
            "Authorization": f"Bearer {shop_owner_token}",
            "X-Correlation-ID": "corr-42",
        }

        response = await middleware.dispatch(mock_request, mock_call_next)

        assert response.status_code == 200
        assert mock_request.state.user_id == "seller-1"
        assert mock_request.state.user_roles == [SHOP_OWNER]
        assert mock_request.state.correlation_id == "corr-42"

    @pytest.mark.asyncio
    async def test_cookie_token_sets_identity(
        self, middleware, user_token, mock_request, mock_call_next
    ):
        mock_request.cookies = {"auth_token": user_token}

        response = await middleware.dispatch(mock_request, mock_call_next)

        assert response.status_code == 200
        assert mock_request.state.user_id == "buyer-1"
        assert mock_request.state.user_roles == [USER]

    def test_single_role_claim_is_accepted(self, jwt_handler):
        token = jwt_handler.encode_token({"user_id": 12, "role": "shop_owner"})

        token_data = jwt_handler.decode_token(token)

        assert token_data.user_id == "12"
        assert token_data.roles == [SHOP_OWNER]


class TestRoleRequirement:
    """Test cases for the role-checking dependency."""

    def _request(self, user_id=None, roles=None):
        request = Mock()
        request.state = SimpleNamespace(user_id=user_id, user_roles=roles)
        return request

    @pytest.mark.asyncio
    async def test_allowed_role_returns_identity(self):
        requirement = RoleRequirement([SHOP_OWNER])

        user_id = await requirement(self._request("seller-1", [SHOP_OWNER]))

        assert user_id == "seller-1"

    @pytest.mark.asyncio
    async def test_wrong_role_is_forbidden(self):
        requirement = RoleRequirement([SHOP_OWNER])

        with pytest.raises(HTTPException) as exc_info:
            await requirement(self._request("buyer-1", [USER]))

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_anonymous_is_unauthenticated(self):
        requirement = RoleRequirement([USER, SHOP_OWNER])

        with pytest.raises(HTTPException) as exc_info:
            await requirement(self._request())

        assert exc_info.value.status_code == 401
