"""Category service: read-side lookups plus a minimal management surface"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import CategoryNotFoundError
from ..models.category import Category
from ..repository.category_repository import CategoryRepository, slugify
from ..schemas.category import CategoryCreate, CategoryResponse
from ..utils.logging import setup_product_logging as setup_logging

logger = setup_logging("catalog_service.category_service")


def _to_category_response(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        slug=category.slug,
        description=category.description,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


class CategoryService:
    """Service class for category business logic"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = CategoryRepository(db)

    async def create_category(
        self,
        category_data: CategoryCreate,
        user_id: str,
        correlation_id: Optional[str] = None,
    ) -> CategoryResponse:
        """Create a new category with a unique slug"""
        existing_category = await self.repository.get_category_by_slug(
            slugify(category_data.name)
        )
        if existing_category:
            raise ValueError("Category with slug already exists")

        category = await self.repository.create_category(category_data)

        logger.info(
            "Category created successfully",
            extra={
                "category_id": category.id,
                "category_name": category.name,
                "user_id": user_id,
                "correlation_id": correlation_id,
            },
        )
        return _to_category_response(category)

    async def get_category(
        self, category_id: int, correlation_id: Optional[str] = None
    ) -> CategoryResponse:
        """Get category by ID"""
        category = await self.repository.get_category_by_id(category_id)
        if not category:
            raise CategoryNotFoundError(category_id)
        return _to_category_response(category)

    async def list_categories(self) -> List[CategoryResponse]:
        categories = await self.repository.list_categories()
        return [_to_category_response(category) for category in categories]
