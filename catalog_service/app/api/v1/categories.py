"""Category API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, status

from ...schemas.category import CategoryCreate, CategoryResponse
from ...services.category_service import CategoryService
from ..dependencies import (
    CatalogUserDep,
    CategoryServiceDep,
    CorrelationIdDep,
    ShopOwnerDep,
)

router = APIRouter(prefix="/categories")


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    correlation_id: Optional[str] = CorrelationIdDep,
    user_id: str = ShopOwnerDep,
    service: CategoryService = CategoryServiceDep,
):
    """Create a category (shop owners only)"""
    return await service.create_category(
        category_data=category_data, user_id=user_id, correlation_id=correlation_id
    )


@router.get("", response_model=List[CategoryResponse])
async def list_categories(
    user_id: str = CatalogUserDep,
    service: CategoryService = CategoryServiceDep,
):
    return await service.list_categories()


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    correlation_id: Optional[str] = CorrelationIdDep,
    user_id: str = CatalogUserDep,
    service: CategoryService = CategoryServiceDep,
):
    return await service.get_category(category_id, correlation_id=correlation_id)
