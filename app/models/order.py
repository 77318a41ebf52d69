# app/models/order.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order (cash on delivery).

    Lifecycle:
      pending -> completed (and back, admins may re-open an order)
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
    )

    address: str | None = None
    city: str | None = None
    phone: str | None = None

    amount: float = Field(
        ge=0,
        description="Order total computed from snapshotted unit prices",
    )

    payment_method: str = Field(default="COD")

    # pending | completed
    status: str = Field(
        default="pending",
        index=True,
    )

    packer_name: str | None = Field(
        default=None,
        description="Who packed the order (set when completing)",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(index=True)

    product_title: str | None = None

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    unit_price: float = Field(
        description="Unit price at time of order",
    )
