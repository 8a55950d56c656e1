"""Category repository for database operations"""

import re
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.category import Category
from ..schemas.category import CategoryCreate


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


class CategoryRepository:
    """Repository for category database operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_category(self, category_data: CategoryCreate) -> Category:
        """Create a new category"""
        category = Category(
            name=category_data.name,
            slug=slugify(category_data.name),
            description=category_data.description,
        )

        self.db.add(category)
        await self.db.commit()
        await self.db.refresh(category)
        return category

    async def get_category_by_id(self, category_id: int) -> Optional[Category]:
        """Get category by ID"""
        query = select(Category).where(Category.id == category_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_category_by_slug(self, slug: str) -> Optional[Category]:
        """Get category by slug"""
        query = select(Category).where(Category.slug == slug)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_category_name(self, category_id: int) -> Optional[str]:
        """Resolve a category id to its display name"""
        query = select(Category.name).where(Category.id == category_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_categories(self) -> List[Category]:
        query = select(Category).order_by(Category.name)
        result = await self.db.execute(query)
        return list(result.scalars().all())
