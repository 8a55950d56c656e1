from decimal import Decimal

from sqlalchemy import DECIMAL, TEXT, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import CatalogServiceBaseModel


class Product(CatalogServiceBaseModel):
    __tablename__ = "products"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id"), nullable=False
    )

    price: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Never both: an external URL or a blob reference, or neither
    image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    image_id: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Seller sub-entity, flattened. seller_id never changes after creation.
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    seller_profile_url: Mapped[str | None] = mapped_column(
        String(1024), nullable=True
    )
    seller_profile_image_id: Mapped[str | None] = mapped_column(
        String(32), nullable=True
    )
