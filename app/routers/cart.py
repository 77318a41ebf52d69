# app/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_user
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartSummary,
    CartSyncRequest,
    CartSyncResult,
    StockCheckRequest,
    StockCheckResult,
)
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

service = CartService(CartRepository(), ProductRepository())


def customer_id(user: User = Depends(require_user)) -> uuid.UUID:
    """
    Cart routes only need the id; admins are rejected by require_user.
    """
    return user.id


@router.get("", response_model=CartSummary)
def read_cart(
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(customer_id),
):
    """
    Current cart reconciled with the catalog.

    Lines of deleted products disappear, quantities above stock are
    clamped (`quantity_adjusted`), sold-out lines are flagged and left
    out of the totals.
    """
    return service.get_cart_summary(session, user_id)


@router.post("", response_model=CartSummary)
def add_item(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(customer_id),
):
    return service.add_to_cart(session, user_id, payload)


@router.post("/sync", response_model=CartSyncResult)
def sync_local_cart(
    payload: CartSyncRequest,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(customer_id),
):
    """
    Merge the browser/local cart into this account right after login.
    """
    return service.sync_cart(session, user_id, payload)


@router.post("/check-stock", response_model=StockCheckResult)
def check_stock(
    payload: StockCheckRequest,
    session: Session = Depends(get_session),
):
    """
    Availability report for product/quantity lines.

    Public: guests run it against their local cart before checkout.
    """
    return service.check_stock(session, payload)


@router.patch("/{product_id}", response_model=CartSummary)
def set_item_quantity(
    product_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(customer_id),
):
    return service.update_quantity(session, user_id, product_id, payload)


@router.delete("/{product_id}", response_model=CartSummary)
def remove_item(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(customer_id),
):
    return service.remove_item(session, user_id, product_id)


@router.delete("", response_model=CartSummary)
def empty_cart(
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(customer_id),
):
    return service.clear_cart(session, user_id)
