# app/repositories/cart_repo.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete
from sqlmodel import Session, select

from app.models.cart import CartItem


class CartRepository:
    """
    Data access for cart lines. Lines are keyed by (user, product).
    """

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.added_at, CartItem.id)
        )
        return session.exec(stmt).all()

    def get_item(
        self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.product_id == product_id,
        )
        return session.exec(stmt).first()

    def set_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int,
        *,
        commit: bool = True,
    ) -> CartItem:
        """
        Insert the line or overwrite its quantity.
        """
        item = self.get_item(session, user_id, product_id)
        if item is None:
            item = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
        else:
            item.quantity = quantity
            item.updated_at = datetime.now(timezone.utc)
        session.add(item)
        if commit:
            session.commit()
            session.refresh(item)
        return item

    def remove(self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID) -> bool:
        result = session.execute(
            delete(CartItem).where(
                CartItem.user_id == user_id,
                CartItem.product_id == product_id,
            )
        )
        session.commit()
        return result.rowcount > 0

    def clear_user_cart(self, session: Session, user_id: uuid.UUID) -> int:
        result = session.execute(delete(CartItem).where(CartItem.user_id == user_id))
        session.commit()
        return result.rowcount
