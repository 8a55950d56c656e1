import json
import logging

import pytest

from catalog_service.app.utils.logging import ProductJSONFormatter
from catalog_service.app.utils.service_health import CatalogServiceHealthChecker


class TestCatalogServiceHealthChecker:
    @pytest.mark.asyncio
    async def test_all_checks_pass(self):
        checker = CatalogServiceHealthChecker("catalog-service", "1.0.0")

        async def database_ok():
            return True

        checker.add_check("database", database_ok)
        checker.add_check("blob_store", lambda: True)

        report = await checker.run_checks()

        assert report["status"] == "healthy"
        assert report["checks"]["database"]["status"] == "healthy"
        assert report["checks"]["blob_store"]["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_optional_dependency_down_is_degraded(self):
        checker = CatalogServiceHealthChecker()
        checker.add_check("database", lambda: True)
        checker.add_check("search_index", lambda: False)

        report = await checker.run_checks()

        assert report["status"] == "degraded"
        assert report["checks"]["search_index"]["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_database_failure_is_unhealthy(self):
        checker = CatalogServiceHealthChecker()

        def broken():
            raise RuntimeError("connection refused")

        checker.add_check("database", broken)
        checker.add_check("events", lambda: True)

        report = await checker.run_checks()

        assert report["status"] == "unhealthy"
        assert report["checks"]["database"]["status"] == "error"
        assert "connection refused" in report["checks"]["database"]["error"]


class TestProductJSONFormatter:
    def test_extra_fields_are_merged(self):
        record = logging.LogRecord(
            "catalog_service.product_service",
            logging.WARNING,
            __file__,
            10,
            "Product image replaced",
            None,
            None,
        )
        record.product_id = 7
        record.orphaned_blob_reference = True

        entry = json.loads(ProductJSONFormatter().format(record))

        assert entry["message"] == "Product image replaced"
        assert entry["level"] == "WARNING"
        assert entry["service"] == "catalog_service"
        assert entry["product_id"] == 7
        assert entry["orphaned_blob_reference"] is True

    def test_excluded_fields_are_dropped(self):
        record = logging.LogRecord(
            "catalog_service", logging.INFO, __file__, 1, "hello", None, None
        )
        record.secret = "x"

        entry = json.loads(ProductJSONFormatter(exclude_fields=["secret"]).format(record))

        assert "secret" not in entry
