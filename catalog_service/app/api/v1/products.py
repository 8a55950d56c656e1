"""Product API endpoints"""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import Response

from ...core.setting import get_settings
from ...schemas.product import (
    ImageUpload,
    ProductCreate,
    ProductDeleteResponse,
    ProductResponse,
    ProductSearchResponse,
    ProductUpdate,
)
from ...services.product_service import ProductService
from ..dependencies import (
    CatalogUserDep,
    CorrelationIdDep,
    ProductServiceDep,
    ShopOwnerDep,
)

router = APIRouter(prefix="/products")


async def read_upload(upload: Optional[UploadFile]) -> Optional[ImageUpload]:
    """Read a multipart file field; an absent or empty field yields None"""
    if upload is None or not upload.filename:
        return None

    data = await upload.read()
    if not data:
        return None

    max_size = get_settings().MAX_UPLOAD_SIZE
    if len(data) > max_size:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Upload exceeds {max_size} bytes",
        )

    return ImageUpload(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    title: str = Form(...),
    category_id: int = Form(...),
    price: Decimal = Form(...),
    quantity: int = Form(...),
    description: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    profile_url: Optional[str] = Form(None, alias="profileUrl"),
    image: Optional[UploadFile] = File(None),
    profile_image: Optional[UploadFile] = File(None, alias="profileImage"),
    correlation_id: Optional[str] = CorrelationIdDep,
    user_id: str = ShopOwnerDep,
    service: ProductService = ProductServiceDep,
):
    """Create a new product (shop owners only)"""
    product_data = ProductCreate(
        title=title,
        description=description,
        category_id=category_id,
        price=price,
        quantity=quantity,
        image_url=image_url,
        profile_url=profile_url,
    )
    return await service.create_product(
        product_data=product_data,
        user_id=user_id,
        image_file=await read_upload(image),
        profile_image_file=await read_upload(profile_image),
        correlation_id=correlation_id,
    )


@router.get("", response_model=List[ProductResponse])
async def list_products(
    correlation_id: Optional[str] = CorrelationIdDep,
    user_id: str = CatalogUserDep,
    service: ProductService = ProductServiceDep,
):
    """List every product with its category name"""
    return await service.list_products(correlation_id=correlation_id)


@router.get("/search", response_model=ProductSearchResponse)
async def search_products(
    q: Optional[str] = Query(None, description="Full-text query"),
    category: Optional[str] = Query(None, description="Exact category name"),
    limit: int = Query(20, ge=1, le=100),
    user_id: str = CatalogUserDep,
    service: ProductService = ProductServiceDep,
):
    """Search products through the search index"""
    results = await service.search_products(query=q, category=category, limit=limit)
    return ProductSearchResponse(
        query=q, category=category, total=len(results), results=results
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    correlation_id: Optional[str] = CorrelationIdDep,
    user_id: str = CatalogUserDep,
    service: ProductService = ProductServiceDep,
):
    """Get product details by ID"""
    return await service.get_product(product_id, correlation_id=correlation_id)


@router.get("/{product_id}/image")
async def get_product_image(
    product_id: int,
    user_id: str = CatalogUserDep,
    service: ProductService = ProductServiceDep,
):
    """Stream an uploaded product image"""
    blob = await service.get_product_image(product_id)
    return Response(
        content=blob.data,
        media_type=blob.content_type,
        headers={"Content-Disposition": f'inline; filename="{blob.filename}"'},
    )


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category_id: Optional[int] = Form(None),
    price: Optional[Decimal] = Form(None),
    quantity: Optional[int] = Form(None),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    profile_url: Optional[str] = Form(None, alias="profileUrl"),
    image: Optional[UploadFile] = File(None),
    correlation_id: Optional[str] = CorrelationIdDep,
    user_id: str = ShopOwnerDep,
    service: ProductService = ProductServiceDep,
):
    """Update a product (owning seller only)"""
    product_data = ProductUpdate(
        title=title,
        description=description,
        category_id=category_id,
        price=price,
        quantity=quantity,
        image_url=image_url,
        profile_url=profile_url,
    )
    return await service.update_product(
        product_id=product_id,
        product_data=product_data,
        user_id=user_id,
        image_file=await read_upload(image),
        correlation_id=correlation_id,
    )


@router.delete("/{product_id}", response_model=ProductDeleteResponse)
async def delete_product(
    product_id: int,
    correlation_id: Optional[str] = CorrelationIdDep,
    user_id: str = ShopOwnerDep,
    service: ProductService = ProductServiceDep,
):
    """Delete a product (owning seller only)"""
    return await service.delete_product(
        product_id=product_id, user_id=user_id, correlation_id=correlation_id
    )
