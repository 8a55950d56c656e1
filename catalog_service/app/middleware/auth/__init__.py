"""
Authentication and role checks for Catalog Service.
"""

from .auth_middleware import (
    CatalogServiceAuthMiddleware,
    RoleRequirement,
    any_catalog_user,
    setup_catalog_auth_middleware,
    shop_owner,
)

__all__ = [
    "CatalogServiceAuthMiddleware",
    "RoleRequirement",
    "setup_catalog_auth_middleware",
    "shop_owner",
    "any_catalog_user",
]
