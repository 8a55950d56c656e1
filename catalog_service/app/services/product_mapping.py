"""Denormalized views of a product: API response, search document, event payload"""

from decimal import Decimal
from typing import Any, Dict, Optional

from ..events.schemas import ProductEventData
from ..models.product import Product
from ..schemas.product import ProductResponse, SellerInfo


def to_product_response(
    product: Product, category_name: Optional[str]
) -> ProductResponse:
    """Snapshot a product row with its resolved category name"""
    return ProductResponse(
        id=product.id,
        title=product.title,
        description=product.description,
        category_id=product.category_id,
        category=category_name,
        price=Decimal(str(product.price)),
        quantity=product.quantity,
        image=product.image,
        image_id=product.image_id,
        seller=SellerInfo(
            id=product.seller_id,
            profile_url=product.seller_profile_url,
            profile_image_id=product.seller_profile_image_id,
        ),
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def to_search_document(snapshot: ProductResponse) -> Dict[str, Any]:
    """Project a snapshot onto the search index schema"""
    return {
        "title": snapshot.title,
        "description": snapshot.description,
        "category": snapshot.category,
        "category_id": snapshot.category_id,
        "price": float(snapshot.price),
        "quantity": int(snapshot.quantity),
        "image": snapshot.image,
        "imageId": snapshot.image_id,
        "seller": {
            "id": snapshot.seller.id,
            "profileUrl": snapshot.seller.profile_url,
            "profileImageId": snapshot.seller.profile_image_id,
        },
    }


def to_event_data(snapshot: ProductResponse) -> Dict[str, Any]:
    """Serialize a snapshot into the payload carried by product events"""
    return ProductEventData.model_validate(snapshot.model_dump()).to_dict()
