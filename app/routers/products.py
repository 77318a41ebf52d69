# app/routers/products.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.core.config import get_settings
from app.database import get_session
from app.models.user import User
from app.repositories.product_repo import CategoryRepository, ProductRepository
from app.schemas.common import MAX_PAGE_SIZE
from app.schemas.product import (
    BulkFeaturedResult,
    BulkFeaturedUpdate,
    LowStockCount,
    ProductCreate,
    ProductPage,
    ProductRead,
    ProductSearchResult,
    ProductSort,
    ProductUpdate,
    StockFilter,
    StockUpdate,
)
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

settings = get_settings()
service = ProductService(
    ProductRepository(),
    CategoryRepository(),
    low_stock_threshold=settings.LOW_STOCK_THRESHOLD,
)


# -------- Public endpoints --------


@router.get("", response_model=ProductPage)
def list_products(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(24, ge=1, le=MAX_PAGE_SIZE),
    category: uuid.UUID | None = None,
    stock: StockFilter | None = None,
    sort: ProductSort = "latest",
):
    """
    Paginated catalog listing.

    - `stock=in|out|low` filters by availability.
    - `sort` orders by date, price or title.
    """
    return service.list_products(
        session, page=page, limit=limit, category_id=category, stock=stock, sort=sort
    )


@router.get("/search", response_model=ProductSearchResult)
def search_products(
    q: str = Query(..., max_length=200),
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
):
    """
    Keyword search over in-stock products, best matches first.
    """
    return service.search_products(session, q, page=page, limit=limit)


@router.get(
    "/low-stock-count",
    response_model=LowStockCount,
    dependencies=[Depends(require_admin)],
)
def low_stock_count(session: Session = Depends(get_session)):
    return LowStockCount(
        threshold=settings.LOW_STOCK_THRESHOLD,
        count=service.low_stock_count(session),
    )


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_product(session, product_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Create a new product (admin only).
    """
    return service.create_product(session, payload, created_by=admin.id)


@router.patch(
    "/bulk-featured",
    response_model=BulkFeaturedResult,
    dependencies=[Depends(require_admin)],
)
def bulk_update_featured(
    payload: BulkFeaturedUpdate,
    session: Session = Depends(get_session),
):
    """
    Mark / unmark several products as featured at once.
    """
    return BulkFeaturedResult(modified_count=service.bulk_update_featured(session, payload))


@router.patch(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    return service.update_product(session, product_id, payload)


@router.patch(
    "/{product_id}/stock",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_stock(
    product_id: uuid.UUID,
    payload: StockUpdate,
    session: Session = Depends(get_session),
):
    return service.update_stock(session, product_id, payload.stock)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    service.delete_product(session, product_id)
    return None
