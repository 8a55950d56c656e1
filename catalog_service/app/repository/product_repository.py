"""Product repository for primary store operations"""

from typing import Any, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.category import Category
from ..models.product import Product


class ProductRepository:
    """Repository for product database operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_product(self, **fields: Any) -> Product:
        """Insert a new product row and return it with its generated id"""
        product = Product(**fields)

        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def get_product_by_id(self, product_id: int) -> Optional[Product]:
        """Get product by ID"""
        query = select(Product).where(Product.id == product_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_product_with_category(
        self, product_id: int
    ) -> Optional[Tuple[Product, Optional[str]]]:
        """Get a product together with its category name"""
        query = (
            select(Product, Category.name)
            .outerjoin(Category, Product.category_id == Category.id)
            .where(Product.id == product_id)
        )
        result = await self.db.execute(query)
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def list_products_with_category(self) -> List[Tuple[Product, Optional[str]]]:
        """Get every product together with its category name"""
        query = (
            select(Product, Category.name)
            .outerjoin(Category, Product.category_id == Category.id)
            .order_by(Product.id)
        )
        result = await self.db.execute(query)
        return [(row[0], row[1]) for row in result.all()]

    async def save_product(self, product: Product) -> Product:
        """Commit pending changes on a loaded product"""
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def delete_product(self, product: Product) -> None:
        """Hard delete a product row"""
        await self.db.delete(product)
        await self.db.commit()
