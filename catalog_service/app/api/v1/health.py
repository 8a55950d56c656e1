from typing import Any, Dict

from fastapi import APIRouter, Request

from ...core.database import database_manager
from ...core.event_management import health_check_events
from ...core.setting import get_settings
from ...utils.service_health import CatalogServiceHealthChecker

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """Health report covering the primary store, blob store, search index and events."""
    settings = get_settings()
    checker = CatalogServiceHealthChecker(settings.SERVICE_NAME, settings.APP_VERSION)
    checker.add_check("database", database_manager.ping)
    checker.add_check("events", health_check_events)

    blob_store = getattr(request.app.state, "blob_store", None)
    checker.add_check(
        "blob_store", lambda: blob_store is not None and blob_store.is_ready
    )

    search_index = getattr(request.app.state, "search_index", None)
    if search_index is not None:
        checker.add_check("search_index", search_index.ping)
    else:
        checker.add_check("search_index", lambda: False)

    return await checker.run_checks()
