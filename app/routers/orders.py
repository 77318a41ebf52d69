# app/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_auth, require_admin
from app.database import get_session
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.common import BulkDeleteResult, MAX_PAGE_SIZE
from app.schemas.order import (
    OrderBulkDelete,
    OrderCreate,
    OrderPage,
    OrderRead,
    OrderStatusUpdate,
    OrderWithItemsRead,
    PendingCount,
)
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

service = OrderService(OrderRepository(), ProductRepository())


# -------- User-facing endpoints --------


@router.post(
    "",
    response_model=OrderWithItemsRead,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Place a cash-on-delivery order for the given products.
    """
    return service.create_order(session, current_user, payload)


@router.get("/me", response_model=OrderPage)
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
):
    return service.list_user_orders(session, current_user.id, page, limit)


@router.get("/me/{order_id}", response_model=OrderWithItemsRead)
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    return service.get_user_order(session, current_user.id, order_id)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=OrderPage,
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
):
    return service.list_all_orders(session, page, limit)


@router.get(
    "/pending-count",
    response_model=PendingCount,
    dependencies=[Depends(require_admin)],
)
def pending_count(session: Session = Depends(get_session)):
    return PendingCount(count=service.pending_count(session))


@router.delete(
    "/bulk",
    response_model=BulkDeleteResult,
    dependencies=[Depends(require_admin)],
)
def bulk_delete_orders(
    payload: OrderBulkDelete,
    session: Session = Depends(get_session),
):
    return service.bulk_delete_orders(session, payload.order_ids)


@router.get(
    "/{order_id}",
    response_model=OrderWithItemsRead,
    dependencies=[Depends(require_admin)],
)
def get_order_admin(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_order_admin(session, order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Mark an order pending / completed (admin only).
    """
    return service.update_status(session, order_id, payload)


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    service.delete_order(session, order_id)
    return None
