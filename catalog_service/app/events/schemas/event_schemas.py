"""
Catalog Service Event Schemas
=============================

Product lifecycle event types and the payload they carry.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

PRODUCT_CREATED = "product_created"
PRODUCT_UPDATED = "product_updated"
PRODUCT_DELETED = "product_deleted"

PRODUCT_EVENT_TYPES = frozenset({PRODUCT_CREATED, PRODUCT_UPDATED, PRODUCT_DELETED})


class SellerEventData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    profile_url: Optional[str] = Field(default=None, alias="profileUrl")
    profile_image_id: Optional[str] = Field(default=None, alias="profileImageId")


class ProductEventData(BaseModel):
    """Denormalized product snapshot carried by every product event"""

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
    seller: SellerEventData
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
