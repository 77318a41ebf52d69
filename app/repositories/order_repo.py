# app/repositories/order_repo.py
import uuid

from sqlalchemy import delete, func
from sqlmodel import Session, select

from app.models.order import Order, OrderItem


class OrderRepository:
    """
    Orders and their line items.

    `add_order` only flushes: placing an order also decrements stock, and
    the service commits both in one transaction.
    """

    @staticmethod
    def _filtered(stmt, user_id: uuid.UUID | None, status: str | None):
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        return stmt

    def page(
        self,
        session: Session,
        skip: int,
        limit: int,
        *,
        user_id: uuid.UUID | None = None,
    ) -> list[Order]:
        """Newest first, optionally restricted to one customer."""
        stmt = self._filtered(select(Order), user_id, None)
        stmt = stmt.order_by(Order.created_at.desc(), Order.id).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def count(
        self,
        session: Session,
        *,
        user_id: uuid.UUID | None = None,
        status: str | None = None,
    ) -> int:
        stmt = self._filtered(select(func.count()).select_from(Order), user_id, status)
        return session.exec(stmt).one()

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def get_many(self, session: Session, order_ids: list[uuid.UUID]) -> list[Order]:
        if not order_ids:
            return []
        return session.exec(select(Order).where(Order.id.in_(order_ids))).all()

    def items_of(self, session: Session, order_id: uuid.UUID) -> list[OrderItem]:
        stmt = select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
        return session.exec(stmt).all()

    def add_order(
        self,
        session: Session,
        order: Order,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        """
        Stage an order and its lines. Lines get `order_id` filled in here.
        """
        session.add(order)
        session.flush()
        for item in items:
            item.order_id = order.id
        session.add_all(items)
        session.flush()
        return items

    def save(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    def delete_orders(self, session: Session, order_ids: list[uuid.UUID]) -> None:
        session.execute(delete(OrderItem).where(OrderItem.order_id.in_(order_ids)))
        session.execute(delete(Order).where(Order.id.in_(order_ids)))
        session.commit()
