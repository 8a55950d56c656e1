"""Catalog Service Models"""

from .base import CatalogServiceBase, CatalogServiceBaseModel
from .blob import ProductBlob
from .category import Category
from .product import Product

__all__ = [
    "CatalogServiceBase",
    "CatalogServiceBaseModel",
    "Category",
    "Product",
    "ProductBlob",
]
