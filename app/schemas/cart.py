# app/schemas/cart.py
import uuid

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    quantity: int = Field(ge=1)


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(ge=1)


class CartItemRead(SQLModel):
    """
    One cart line joined with the live product.

    - available_stock: product stock right now
    - is_out_of_stock: stock dropped to zero since the item was added
    - quantity_adjusted / original_quantity: quantity was clamped down to stock
    """

    product_id: uuid.UUID
    title: str
    price: float
    image_url: str | None = None
    quantity: int
    line_total: float
    available_stock: int
    is_out_of_stock: bool = False
    quantity_adjusted: bool = False
    original_quantity: int | None = None


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    Out-of-stock lines are listed but not counted in the totals.
    """

    items: list[CartItemRead]
    total_quantity: int
    total_price: float


class StockCheckLine(SQLModel):
    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    quantity: int = Field(ge=1)


class StockCheckRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    products: list[StockCheckLine] = Field(min_length=1)


class CartSyncRequest(SQLModel):
    """
    Local (guest) cart lines to merge into the server cart.
    """

    model_config = ConfigDict(extra="forbid")

    products: list[StockCheckLine] = Field(default_factory=list, max_length=200)


class StockStatus(SQLModel):
    product_id: uuid.UUID
    available: bool
    available_stock: int
    requested_quantity: int


class StockProblem(SQLModel):
    product_id: uuid.UUID
    message: str


class StockCheckResult(SQLModel):
    success: bool
    stock_status: list[StockStatus]
    out_of_stock_items: list[StockProblem]
    insufficient_stock_items: list[StockProblem]
    message: str


class CartSyncResult(CartSummary):
    skipped: list[StockProblem] = []
