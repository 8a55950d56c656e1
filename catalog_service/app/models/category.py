from sqlalchemy import TEXT, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import CatalogServiceBaseModel


class Category(CatalogServiceBaseModel):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(TEXT, nullable=True)
