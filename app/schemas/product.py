# app/schemas/product.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.common import Pagination

StockFilter = Literal["in", "out", "low"]
ProductSort = Literal["latest", "oldest", "price_asc", "price_desc", "title"]


# ----- Categories -----


class CategoryCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=2, max_length=60)
    picture_url: str | None = None
    position: int | None = Field(default=None, ge=0)
    active: bool = True

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("Category name is required")
        return v


class CategoryUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=2, max_length=60)
    picture_url: str | None = None
    position: int | None = Field(default=None, ge=0)
    active: bool | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().lower()
        if not v:
            raise ValueError("Category name is required")
        return v


class CategoryRead(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    picture_url: str | None
    position: int
    active: bool
    created_at: datetime


# ----- Products -----


class ProductCreate(SQLModel):
    """
    Payload for creating a product.
    """

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=2, max_length=200)
    description: str | None = None
    price: float = Field(gt=0)
    stock: int = Field(default=0, ge=0)
    category_id: uuid.UUID | None = None
    is_featured: bool = False
    image_url: str | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=2, max_length=200)
    description: str | None = None
    price: float | None = Field(default=None, gt=0)
    stock: int | None = Field(default=None, ge=0)
    category_id: uuid.UUID | None = None
    is_featured: bool | None = None
    image_url: str | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty")
        return v


class StockUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    stock: int = Field(ge=0)


class BulkFeaturedUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    product_ids: list[uuid.UUID] = Field(min_length=1)
    is_featured: bool


class ProductRead(SQLModel):
    id: uuid.UUID
    title: str
    description: str | None
    price: float
    stock: int
    category_id: uuid.UUID | None
    is_featured: bool
    image_url: str | None
    created_at: datetime


class ProductPage(SQLModel):
    success: bool = True
    data: list[ProductRead]
    pagination: Pagination


class ProductSearchHit(ProductRead):
    relevance_score: float
    matched_keywords: int
    category_name: str | None = None


class ProductSearchResult(SQLModel):
    success: bool = True
    query: str
    keywords: list[str]
    data: list[ProductSearchHit]
    pagination: Pagination


class BulkFeaturedResult(SQLModel):
    success: bool = True
    modified_count: int


class LowStockCount(SQLModel):
    success: bool = True
    threshold: int
    count: int
