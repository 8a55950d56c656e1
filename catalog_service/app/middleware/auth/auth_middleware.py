import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ...core.setting import get_settings
from ...utils.jwt_handler import JWTHandler
from ...utils.logging import setup_product_logging

logger = setup_product_logging("catalog_service.auth")

SHOP_OWNER = "SHOP_OWNER"
USER = "USER"

DEFAULT_EXCLUDE_PATHS = ["/health", "/docs", "/redoc", "/openapi.json"]


class CatalogServiceAuthMiddleware(BaseHTTPMiddleware):
    """Authenticate requests with a JWT from the Authorization header or a cookie."""

    def __init__(
        self,
        app: Any,
        jwt_handler: Optional[JWTHandler] = None,
        exclude_paths: Optional[List[str]] = None,
    ):
        super().__init__(app)
        self.exclude_paths = (
            exclude_paths if exclude_paths is not None else DEFAULT_EXCLUDE_PATHS
        )
        if jwt_handler is None:
            settings = get_settings()
            jwt_handler = JWTHandler(
                secret_key=settings.SECRET_KEY, algorithm=settings.ALGORITHM
            )
        self.jwt_handler = jwt_handler

    def _should_skip_auth(self, path: str) -> bool:
        """Check if the request path should skip authentication."""
        for exclude_path in self.exclude_paths:
            if path == exclude_path or path.startswith(exclude_path + "/"):
                return True
        return False

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = (
            request.headers.get("X-Correlation-ID")
            or request.headers.get("x-request-id")
            or uuid.uuid4().hex
        )
        request.state.correlation_id = correlation_id

        if self._should_skip_auth(request.url.path):
            return await call_next(request)

        auth_result = self._authenticate_request(request)

        if not auth_result["authenticated"]:
            logger.warning(
                f"Authentication failed: {auth_result['reason']}",
                extra={
                    "correlation_id": correlation_id,
                    "path": request.url.path,
                    "method": request.method,
                    "reason": auth_result["reason"],
                },
            )
            return JSONResponse(
                status_code=401,
                content={
                    "error": {
                        "type": "authentication_error",
                        "message": "Authentication required",
                        "correlation_id": correlation_id,
                        "details": {"reason": auth_result["reason"]},
                    }
                },
            )

        request.state.user_id = auth_result["user_id"]
        request.state.user_roles = auth_result["roles"]

        logger.debug(
            "Request authenticated",
            extra={
                "correlation_id": correlation_id,
                "user_id": auth_result["user_id"],
                "roles": auth_result["roles"],
                "token_source": auth_result["token_source"],
                "path": request.url.path,
            },
        )
        return await call_next(request)

    def _extract_token(self, request: Request) -> Optional[Dict[str, str]]:
        authorization = request.headers.get("Authorization") or ""
        if authorization.lower().startswith("bearer "):
            return {"token": authorization[7:].strip(), "source": "header"}

        cookie_token = request.cookies.get("auth_token") or request.cookies.get(
            "access_token"
        )
        if cookie_token:
            return {"token": cookie_token.strip(), "source": "cookie"}
        return None

    def _authenticate_request(self, request: Request) -> Dict[str, Any]:
        extracted = self._extract_token(request)
        if extracted is None:
            return {"authenticated": False, "reason": "missing_token"}

        token = extracted["token"]
        if not token or token in ("null", "undefined"):
            return {"authenticated": False, "reason": "empty_token"}

        try:
            token_data = self.jwt_handler.decode_token(token)
        except ValueError as e:
            logger.warning(f"JWT validation failed: {str(e)}")
            return {"authenticated": False, "reason": "invalid_token"}

        return {
            "authenticated": True,
            "user_id": token_data.user_id,
            "roles": token_data.roles,
            "token_source": extracted["source"],
        }


class RoleRequirement:
    """Dependency returning the actor identity once role membership is checked."""

    def __init__(self, allowed_roles: List[str]):
        self.allowed_roles = [role.upper() for role in allowed_roles]

    async def __call__(self, request: Request) -> str:
        user_id = getattr(request.state, "user_id", None)
        user_roles: List[str] = getattr(request.state, "user_roles", None) or []

        if not user_id:
            raise HTTPException(status_code=401, detail="Authentication required")

        if not any(role in self.allowed_roles for role in user_roles):
            raise HTTPException(
                status_code=403,
                detail=f"Required role: {' or '.join(self.allowed_roles)}",
            )

        return str(user_id)


def setup_catalog_auth_middleware(
    app: FastAPI,
    exclude_paths: Optional[List[str]] = None,
) -> None:
    """Setup authentication middleware for the Catalog Service."""
    if exclude_paths is None:
        exclude_paths = DEFAULT_EXCLUDE_PATHS

    app.add_middleware(CatalogServiceAuthMiddleware, exclude_paths=exclude_paths)

    logger.info(
        "Catalog Service authentication middleware configured",
        extra={"excluded_paths": exclude_paths},
    )


shop_owner = RoleRequirement([SHOP_OWNER])
any_catalog_user = RoleRequirement([USER, SHOP_OWNER])
