"""
Catalog Service FastAPI Application
===================================

Main application entry point for the Catalog Service microservice.
Stores products in the primary database, mirrors them into the search index
and publishes product lifecycle events to Kafka.
"""

import os
import socket
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.categories import router as categories_router
from .api.v1.health import router as health_router
from .api.v1.products import router as products_router
from .core.blob_store import ProductBlobStore
from .core.database import database_manager
from .core.event_management import close_events, init_events
from .core.exceptions import BlobStoreError, SearchIndexSyncError
from .core.search_index import ProductSearchIndex, create_search_client
from .core.setting import get_settings
from .middleware.auth.auth_middleware import setup_catalog_auth_middleware
from .middleware.error.error_handler import setup_catalog_error_handling
from .utils.logging import setup_product_logging

settings = get_settings()
environment = os.getenv("ENVIRONMENT", settings.ENVIRONMENT).lower()
enable_file_logging = environment in ["production", "staging"]

logger = setup_product_logging(
    "catalog_service",
    log_level=settings.LOG_LEVEL,
    enable_file_logging=enable_file_logging,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup and shutdown."""
    startup_start = time.time()

    try:
        await _initialize_services(app, startup_start)
    except Exception as e:
        logger.error(
            "Failed to start catalog service",
            exc_info=True,
            extra={
                "startup_duration_ms": int((time.time() - startup_start) * 1000),
                "error_type": type(e).__name__,
            },
        )
        raise

    yield

    await _shutdown_services(app)


async def _initialize_services(app: FastAPI, startup_start: float) -> None:
    """Initialize all application services during startup."""
    logger.info(
        "Starting catalog service initialization",
        extra={
            "environment": environment,
            "debug_mode": settings.DEBUG,
            "service_version": settings.APP_VERSION,
        },
    )

    # Primary store (required)
    db_duration = await _init_database()

    # Blob store (required; operations fail fast until it is ready)
    blob_duration = await _init_blob_store(app)

    # Search index (degrades to logged sync failures)
    search_duration = await _init_search_index(app)

    # Event publisher (degrades to logged events)
    event_duration = await _init_event_publisher()

    logger.info(
        "Catalog service started successfully",
        extra={
            "total_startup_duration_ms": int((time.time() - startup_start) * 1000),
            "database_init_ms": db_duration,
            "blob_store_init_ms": blob_duration,
            "search_index_init_ms": search_duration,
            "event_publisher_init_ms": event_duration,
        },
    )


async def _init_database() -> int:
    start_time = time.time()
    await database_manager.create_tables()
    duration = int((time.time() - start_time) * 1000)
    logger.info("Database initialization completed", extra={"duration_ms": duration})
    return duration


async def _init_blob_store(app: FastAPI) -> int:
    start_time = time.time()
    blob_store = ProductBlobStore(database_manager.async_session_maker)
    app.state.blob_store = blob_store
    try:
        await blob_store.connect()
    except BlobStoreError:
        logger.error(
            "Blob store not ready, image uploads and deletions will fail",
            extra={"operation": "init_blob_store"},
        )
    return int((time.time() - start_time) * 1000)


async def _init_search_index(app: FastAPI) -> int:
    start_time = time.time()
    client = create_search_client(
        settings.ELASTICSEARCH_URL,
        username=settings.ELASTICSEARCH_USERNAME,
        password=settings.ELASTICSEARCH_PASSWORD,
        request_timeout=settings.ELASTICSEARCH_REQUEST_TIMEOUT,
    )
    search_index = ProductSearchIndex(client, settings.ELASTICSEARCH_INDEX)
    app.state.search_index = search_index
    try:
        await search_index.ensure_index()
    except SearchIndexSyncError:
        logger.warning(
            "Search index unavailable at startup, continuing without it",
            extra={"index": settings.ELASTICSEARCH_INDEX},
        )
    return int((time.time() - start_time) * 1000)


def _kafka_reachable(bootstrap_servers: str) -> bool:
    """Quick TCP probe of the first bootstrap server."""
    first_server = bootstrap_servers.split(",")[0].strip()
    if ":" not in first_server:
        return False
    host, port = first_server.rsplit(":", 1)
    try:
        with socket.create_connection((host, int(port)), timeout=1.0):
            return True
    except (OSError, ValueError):
        return False


async def _init_event_publisher() -> int:
    start_time = time.time()
    if not _kafka_reachable(settings.KAFKA_BOOTSTRAP_SERVERS):
        logger.warning(
            "Kafka not available, skipping event publisher initialization"
        )
        return 0

    await init_events()
    duration = int((time.time() - start_time) * 1000)
    logger.info("Event publisher started", extra={"duration_ms": duration})
    return duration


async def _shutdown_services(app: FastAPI) -> None:
    """Shutdown all application services gracefully."""
    shutdown_start = time.time()
    logger.info("Starting catalog service shutdown")

    await close_events()

    search_index = getattr(app.state, "search_index", None)
    if search_index is not None:
        await search_index.close()

    blob_store = getattr(app.state, "blob_store", None)
    if blob_store is not None:
        await blob_store.close()

    await database_manager.close()

    logger.info(
        "Catalog service shutdown completed",
        extra={"shutdown_duration_ms": int((time.time() - shutdown_start) * 1000)},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    _setup_middleware(app)
    _setup_routers(app)

    return app


def _setup_middleware(app: FastAPI) -> None:
    """Configure middleware. The last one added runs first."""
    setup_catalog_auth_middleware(app)
    setup_catalog_error_handling(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
    )
    logger.info(
        "CORS middleware configured",
        extra={
            "allowed_origins": len(settings.CORS_ORIGINS),
            "credentials_allowed": settings.CORS_CREDENTIALS,
        },
    )


def _setup_routers(app: FastAPI) -> None:
    routers_info: list[dict[str, Any]] = []

    app.include_router(health_router, tags=["Health"])
    routers_info.append({"router": "health", "prefix": ""})

    app.include_router(products_router, prefix="/api/v1", tags=["Product Management"])
    routers_info.append({"router": "products", "prefix": "/api/v1"})

    app.include_router(
        categories_router, prefix="/api/v1", tags=["Category Management"]
    )
    routers_info.append({"router": "categories", "prefix": "/api/v1"})

    logger.info(
        "API routes configured",
        extra={"total_routers": len(routers_info), "routers": routers_info},
    )


app = create_app()
