# app/services/order_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.order import Order, OrderItem
from app.models.product import Product
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.common import BulkDeleteResult, build_pagination, page_to_offset
from app.schemas.order import (
    OrderCreate,
    OrderItemRead,
    OrderPage,
    OrderRead,
    OrderStatusUpdate,
    OrderWithItemsRead,
)

logger = logging.getLogger(__name__)


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Validate requested lines against products (existence, stock)
      - Snapshot unit prices and compute the amount server-side
      - Deduct stock in the same transaction as the order insert
      - Admin status changes and deletions
    """

    def __init__(self, order_repo: OrderRepository, product_repo: ProductRepository):
        self.order_repo = order_repo
        self.product_repo = product_repo

    # -------- User-facing operations --------

    def create_order(
        self,
        session: Session,
        user: User,
        payload: OrderCreate,
    ) -> OrderWithItemsRead:
        """
        Place an order.

        Steps:
          1. Merge duplicate product lines.
          2. Validate every product exists and has enough stock
             (all problems are reported together).
          3. Insert Order + OrderItems, deduct stock, commit once.

        Contact fields fall back to the user's profile.
        """
        requested: dict[uuid.UUID, int] = {}
        for line in payload.products:
            requested[line.id] = requested.get(line.id, 0) + line.quantity

        products = {
            p.id: p for p in self.product_repo.get_many(session, list(requested))
        }

        errors: list[dict[str, str]] = []
        for product_id, qty in requested.items():
            product = products.get(product_id)
            if product is None:
                errors.append({"product_id": str(product_id), "reason": "Product not found"})
            elif qty > product.stock:
                errors.append(
                    {
                        "product_id": str(product_id),
                        "reason": (
                            f"Insufficient stock (have {product.stock}, requested {qty})"
                        ),
                    }
                )

        if errors:
            not_found = all(e["reason"] == "Product not found" for e in errors)
            raise HTTPException(
                status_code=(
                    status.HTTP_404_NOT_FOUND if not_found else status.HTTP_400_BAD_REQUEST
                ),
                detail={"message": "Order validation failed", "items": errors},
            )

        amount = round(
            sum(products[pid].price * qty for pid, qty in requested.items()), 2
        )

        order = Order(
            user_id=user.id,
            address=payload.address or user.address,
            city=payload.city or user.city,
            phone=payload.phone or user.phone,
            amount=amount,
            payment_method="COD",
            status="pending",
        )
        items = self.order_repo.add_order(
            session,
            order,
            [
                OrderItem(
                    product_id=pid,
                    product_title=products[pid].title,
                    quantity=qty,
                    unit_price=products[pid].price,
                )
                for pid, qty in requested.items()
            ],
        )

        for pid, qty in requested.items():
            product: Product = products[pid]
            product.stock -= qty
            session.add(product)

        session.commit()
        session.refresh(order)
        logger.info("Order %s placed by %s (amount=%.2f)", order.id, user.id, amount)

        return self._build_order_with_items_dto(order, items)

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        page: int = 1,
        limit: int = 20,
    ) -> OrderPage:
        orders = self.order_repo.page(
            session, page_to_offset(page, limit), limit, user_id=user_id
        )
        total = self.order_repo.count(session, user_id=user_id)
        return OrderPage(
            orders=[OrderRead.model_validate(o) for o in orders],
            pagination=build_pagination(page, limit, total),
        )

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        items = self.order_repo.items_of(session, order.id)
        return self._build_order_with_items_dto(order, items)

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPage:
        orders = self.order_repo.page(session, page_to_offset(page, limit), limit)
        total = self.order_repo.count(session)
        return OrderPage(
            orders=[OrderRead.model_validate(o) for o in orders],
            pagination=build_pagination(page, limit, total),
        )

    def _get_order(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def get_order_admin(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        order = self._get_order(session, order_id)
        items = self.order_repo.items_of(session, order.id)
        return self._build_order_with_items_dto(order, items)

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> Order:
        """
        Set status (pending | completed) and optionally who packed it.
        """
        order = self._get_order(session, order_id)
        order.status = payload.status
        if payload.packer_name is not None:
            order.packer_name = payload.packer_name
        return self.order_repo.save(session, order)

    def pending_count(self, session: Session) -> int:
        return self.order_repo.count(session, status="pending")

    def delete_order(self, session: Session, order_id: uuid.UUID) -> None:
        order = self._get_order(session, order_id)
        self.order_repo.delete_orders(session, [order.id])

    def bulk_delete_orders(
        self, session: Session, order_ids: list[uuid.UUID]
    ) -> BulkDeleteResult:
        orders = self.order_repo.get_many(session, order_ids)
        if not orders:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No orders found",
            )
        deleted_ids = [o.id for o in orders]
        self.order_repo.delete_orders(session, deleted_ids)
        return BulkDeleteResult(
            deleted_count=len(deleted_ids),
            requested_count=len(order_ids),
            deleted_ids=deleted_ids,
        )

    # -------- Helper DTO builder --------

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        item_dtos = [
            OrderItemRead(
                id=it.id,
                product_id=it.product_id,
                product_title=it.product_title,
                quantity=it.quantity,
                unit_price=it.unit_price,
                line_total=round(it.quantity * it.unit_price, 2),
            )
            for it in items
        ]
        return OrderWithItemsRead(
            **OrderRead.model_validate(order).model_dump(),
            items=item_dtos,
        )
