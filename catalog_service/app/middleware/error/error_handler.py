"""
Error handling for Catalog Service.
Maps the service's exception hierarchy and framework errors onto
standardized JSON error responses.
"""

import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...core.exceptions import CatalogServiceError
from ...utils.logging import setup_product_logging

logger = setup_product_logging("catalog_service.error_handler")


class CatalogServiceErrorHandler:
    """
    Centralized error handling for Catalog Service.

    Not-found and ownership errors become 404/403, invalid input 400/422,
    everything else a 500 with the traceback logged server side only.
    """

    @staticmethod
    def setup_error_handlers(app: FastAPI) -> None:
        """Register all error handlers on the application."""

        @app.exception_handler(CatalogServiceError)
        async def catalog_exception_handler(
            request: Request, exc: CatalogServiceError
        ) -> JSONResponse:
            """Handle the service's own exception hierarchy."""
            if exc.status_code >= 500:
                logger.error(
                    f"Catalog service failure: {exc.message}",
                    extra={
                        "correlation_id": getattr(
                            request.state, "correlation_id", "unknown"
                        ),
                        "path": request.url.path,
                        "method": request.method,
                        "exception_type": type(exc).__name__,
                        "details": exc.details,
                    },
                    exc_info=exc,
                )
                return CatalogServiceErrorHandler._create_error_response(
                    request=request,
                    status_code=exc.status_code,
                    error_type=exc.error_type,
                    message="An internal server error occurred"
                    if exc.status_code == 500
                    else exc.message,
                )

            return CatalogServiceErrorHandler._create_error_response(
                request=request,
                status_code=exc.status_code,
                error_type=exc.error_type,
                message=exc.message,
                details=exc.details,
            )

        @app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(
            request: Request, exc: StarletteHTTPException
        ) -> JSONResponse:
            """Handle HTTP exceptions from Starlette/FastAPI."""
            return CatalogServiceErrorHandler._create_error_response(
                request=request,
                status_code=exc.status_code,
                error_type="http_error",
                message=str(exc.detail),
            )

        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(
            request: Request, exc: RequestValidationError
        ) -> JSONResponse:
            """Handle request validation errors."""
            error_details: list[Dict[str, Any]] = []
            for error in exc.errors():
                error_details.append(
                    {
                        "field": ".".join(str(loc) for loc in error["loc"]),
                        "message": error["msg"],
                        "type": error["type"],
                    }
                )

            return CatalogServiceErrorHandler._create_error_response(
                request=request,
                status_code=422,
                error_type="validation_error",
                message="Request validation failed",
                details={"validation_errors": error_details},
            )

        @app.exception_handler(ValidationError)
        async def pydantic_validation_exception_handler(
            request: Request, exc: ValidationError
        ) -> JSONResponse:
            """Handle validation errors raised while building domain models."""
            error_details: list[Dict[str, Any]] = [
                {
                    "field": ".".join(str(loc) for loc in error["loc"]),
                    "message": error["msg"],
                    "type": error["type"],
                }
                for error in exc.errors()
            ]

            return CatalogServiceErrorHandler._create_error_response(
                request=request,
                status_code=422,
                error_type="data_validation_error",
                message="Data validation failed",
                details={"validation_errors": error_details},
            )

        @app.exception_handler(ValueError)
        async def value_error_handler(
            request: Request, exc: ValueError
        ) -> JSONResponse:
            """Handle ValueError raised by business logic."""
            return CatalogServiceErrorHandler._create_error_response(
                request=request,
                status_code=400,
                error_type="value_error",
                message=str(exc),
            )

        @app.exception_handler(Exception)
        async def unhandled_exception_handler(
            request: Request, exc: Exception
        ) -> JSONResponse:
            """Anything not handled above is an internal error."""
            logger.error(
                "Unhandled exception occurred",
                extra={
                    "correlation_id": getattr(
                        request.state, "correlation_id", "unknown"
                    ),
                    "user_id": getattr(request.state, "user_id", "anonymous"),
                    "path": request.url.path,
                    "method": request.method,
                    "exception_type": type(exc).__name__,
                    "exception_message": str(exc),
                    "traceback": traceback.format_exc(),
                },
                exc_info=True,
            )

            return CatalogServiceErrorHandler._create_error_response(
                request=request,
                status_code=500,
                error_type="internal_server_error",
                message="An internal server error occurred",
                details={"exception_type": type(exc).__name__},
            )

    @staticmethod
    def _create_error_response(
        request: Request,
        status_code: int,
        error_type: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        """
        Create a standardized error response.

        Args:
            request: The FastAPI request object
            status_code: HTTP status code
            error_type: Type of error for categorization
            message: Human-readable error message
            details: Additional error details

        Returns:
            JSONResponse with standardized error format
        """
        correlation_id = getattr(request.state, "correlation_id", "unknown")

        error_response: Dict[str, Any] = {
            "error": {
                "type": error_type,
                "message": message,
                "correlation_id": correlation_id,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "path": request.url.path,
                "method": request.method,
            }
        }

        if details:
            error_response["error"]["details"] = details

        if status_code < 500:
            logger.warning(
                f"Client error: {error_type}",
                extra={
                    "correlation_id": correlation_id,
                    "user_id": getattr(request.state, "user_id", "anonymous"),
                    "status_code": status_code,
                    "error_type": error_type,
                    "path": request.url.path,
                    "method": request.method,
                },
            )

        return JSONResponse(status_code=status_code, content=error_response)


def setup_catalog_error_handling(app: FastAPI) -> None:
    """Setup error handling for the Catalog Service."""
    CatalogServiceErrorHandler.setup_error_handlers(app)
    logger.info("Catalog Service error handling configured")
