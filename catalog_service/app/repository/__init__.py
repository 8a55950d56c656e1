"""Repository layer for Catalog Service"""

from .category_repository import CategoryRepository
from .product_repository import ProductRepository

__all__ = [
    "ProductRepository",
    "CategoryRepository",
]
