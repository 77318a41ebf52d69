# app/models/cart.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class CartItem(SQLModel, table=True):
    """
    One line of a customer's server-side cart.

    (user_id, product_id) is unique: adding a product twice bumps the
    quantity of the existing line.
    """

    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    # Plain column: lines pointing at deleted products are pruned on read
    product_id: uuid.UUID = Field(index=True)

    quantity: int = Field(ge=1)

    added_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the product first entered the cart",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
