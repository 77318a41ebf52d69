# app/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Category(SQLModel, table=True):
    """
    Product category shown in the storefront swiper.

    - name is stored lowercase and is unique
    - position drives the display order (0..n-1)
    """

    __tablename__ = "categories"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=60,
        unique=True,
        index=True,
    )

    slug: str = Field(
        max_length=80,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    picture_url: str | None = Field(
        default=None,
        description="Public URL of the category picture",
    )

    position: int = Field(default=0, ge=0)

    active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Product(SQLModel, table=True):
    """
    Catalog entry (auto part).

    `stock` is the maximum purchasable quantity at this point in time.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    title: str = Field(
        max_length=200,
        min_length=2,
        index=True,
        description="Display name of the part",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    price: float = Field(
        gt=0,
        description="Unit price",
    )

    stock: int = Field(
        default=0,
        ge=0,
        index=True,
        description="How many units currently in stock",
    )

    category_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="categories.id",
        index=True,
    )

    is_featured: bool = Field(default=False, index=True)

    image_url: str | None = Field(
        default=None,
        description="Main picture URL",
    )

    created_by: uuid.UUID | None = Field(
        default=None,
        foreign_key="users.id",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Creation timestamp (UTC)",
    )
