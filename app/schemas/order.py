# app/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.common import Pagination

OrderStatus = Literal["pending", "completed"]
PaymentMethod = Literal["COD"]


class OrderLineCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    quantity: int = Field(ge=1)


class OrderCreate(SQLModel):
    """
    Payload for placing an order.

    The client sends product ids + quantities only; unit prices and the
    order amount are always taken from the catalog server-side.
    """

    model_config = ConfigDict(extra="forbid")

    products: list[OrderLineCreate] = Field(min_length=1)
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=80)
    phone: str | None = Field(default=None, max_length=20)

    @field_validator("address", "city", "phone")
    @classmethod
    def normalize(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderItemRead(SQLModel):
    id: uuid.UUID
    product_id: uuid.UUID
    product_title: str | None
    quantity: int
    unit_price: float
    line_total: float


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    address: str | None
    city: str | None
    phone: str | None
    amount: float
    payment_method: PaymentMethod
    status: OrderStatus
    packer_name: str | None
    created_at: datetime


class OrderWithItemsRead(OrderRead):
    items: list[OrderItemRead]


class OrderPage(SQLModel):
    success: bool = True
    orders: list[OrderRead]
    pagination: Pagination


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    packer_name: str | None = Field(default=None, max_length=80)

    @field_validator("packer_name")
    @classmethod
    def normalize_packer(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderBulkDelete(SQLModel):
    model_config = ConfigDict(extra="forbid")

    order_ids: list[uuid.UUID] = Field(min_length=1)


class PendingCount(SQLModel):
    success: bool = True
    count: int
