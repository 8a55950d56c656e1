from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SellerInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    profile_url: Optional[str] = Field(default=None, alias="profileUrl")
    profile_image_id: Optional[str] = Field(default=None, alias="profileImageId")


class ImageUpload(BaseModel):
    """Binary payload received with a create or update request"""

    filename: str
    content_type: str
    data: bytes


class ProductCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, description="Product title (required)")
    description: Optional[str] = None
    category_id: int = Field(..., gt=0, description="Category ID (must exist)")
    price: Decimal = Field(..., ge=0, description="Product price (non-negative)")
    quantity: int = Field(..., ge=0, description="Stock quantity (non-negative)")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    profile_url: Optional[str] = Field(default=None, alias="profileUrl")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("title cannot be empty or whitespace only")
        return v.strip()


class ProductUpdate(BaseModel):
    """Partial update. Empty or zero values mean "keep the current value"."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = Field(default=None, gt=0)
    price: Optional[Decimal] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    profile_url: Optional[str] = Field(default=None, alias="profileUrl")


class ProductResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    description: Optional[str] = None
    category_id: int
    category: Optional[str] = None
    price: Decimal
    quantity: int
    image: Optional[str] = None
    image_id: Optional[str] = Field(default=None, alias="imageId")
    seller: SellerInfo
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductDeleteResponse(BaseModel):
    message: str = "Product deleted successfully"


class ProductSearchResponse(BaseModel):
    query: Optional[str] = None
    category: Optional[str] = None
    total: int
    results: List[Dict[str, Any]]
