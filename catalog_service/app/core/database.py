from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..models.base import CatalogServiceBase
from ..utils.logging import setup_product_logging as setup_logging
from .setting import get_settings

logger = setup_logging("catalog_service.database", log_level=get_settings().LOG_LEVEL)


def _mask_database_url(database_url: str) -> str:
    if "@" not in database_url:
        return database_url
    credentials, host = database_url.rsplit("@", 1)
    scheme = credentials.split("://", 1)[0]
    return f"{scheme}://***@{host}"


class CatalogServiceDatabaseManager:
    """Database manager for the Catalog Service primary store."""

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 25,
        max_overflow: int = 50,
    ) -> None:
        logger.info(
            "Initializing Catalog Service database manager",
            extra={
                "operation": "database_manager_init",
                "database_url": _mask_database_url(database_url),
                "echo": echo,
            },
        )

        engine_kwargs: Dict[str, Any] = {"echo": echo, "future": True}

        if "sqlite" in database_url:
            engine_kwargs["connect_args"] = {
                "timeout": 60,
                "check_same_thread": False,
            }
            database_type = "sqlite"
        else:
            engine_kwargs.update(
                {
                    "pool_size": pool_size,
                    "max_overflow": max_overflow,
                    "pool_timeout": 45,
                    "pool_recycle": 3600,
                    "pool_pre_ping": True,
                    "pool_reset_on_return": "commit",
                    "connect_args": {
                        "command_timeout": 30,
                        "prepared_statement_cache_size": 0,
                    },
                }
            )
            database_type = "postgresql"

        self.async_engine = create_async_engine(database_url, **engine_kwargs)
        self.async_session_maker = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
            autocommit=False,
        )

        logger.info(
            "Catalog Service database manager initialized",
            extra={
                "operation": "database_manager_init_complete",
                "database_type": database_type,
            },
        )

    async def create_tables(self) -> None:
        """Create all Catalog Service tables that do not exist yet."""
        try:
            async with self.async_engine.begin() as conn:
                await conn.run_sync(
                    CatalogServiceBase.metadata.create_all, checkfirst=True
                )
            logger.info(
                "Database tables created successfully",
                extra={"operation": "create_tables"},
            )
        except Exception as e:
            # Another replica may have created them concurrently
            logger.warning(
                "Database table creation failed",
                extra={"operation": "create_tables", "error": str(e)},
            )

    async def ping(self) -> bool:
        """Run a trivial statement to check connectivity."""
        try:
            async with self.async_engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(
                "Database ping failed",
                extra={"operation": "ping", "error": str(e)},
            )
            return False

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session."""
        async with self.async_session_maker() as session:
            yield session

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        logger.info("Closing database connections", extra={"operation": "database_close"})
        await self.async_engine.dispose()


settings = get_settings()
if not settings.PRODUCT_DATABASE_URL:
    error_msg = "PRODUCT_DATABASE_URL is required for Catalog Service but not configured"
    logger.error(error_msg, extra={"operation": "global_database_init"})
    raise ValueError(error_msg)

database_manager = CatalogServiceDatabaseManager(
    database_url=settings.PRODUCT_DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DATABASE_POOL_SIZE,
    max_overflow=settings.DATABASE_MAX_OVERFLOW,
)


# Dependency injection function for FastAPI
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session for dependency injection."""
    async for session in database_manager.get_async_session():
        yield session
