# app/routers/categories.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.product_repo import CategoryRepository
from app.schemas.product import CategoryCreate, CategoryRead, CategoryUpdate
from app.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])

service = CategoryService(CategoryRepository())


@router.get("", response_model=list[CategoryRead])
def list_categories(
    session: Session = Depends(get_session),
    search: str | None = None,
):
    """
    Active categories first, then by position.
    """
    return service.list_categories(session, search)


@router.get("/{slug}", response_model=CategoryRead)
def get_category(slug: str, session: Session = Depends(get_session)):
    return service.get_category(session, slug)


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_category(payload: CategoryCreate, session: Session = Depends(get_session)):
    return service.create_category(session, payload)


@router.patch(
    "/{slug}",
    response_model=CategoryRead,
    dependencies=[Depends(require_admin)],
)
def update_category(
    slug: str,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
):
    return service.update_category(session, slug, payload)


@router.patch(
    "/{slug}/toggle-active",
    response_model=CategoryRead,
    dependencies=[Depends(require_admin)],
)
def toggle_category(slug: str, session: Session = Depends(get_session)):
    return service.toggle_active(session, slug)


@router.delete(
    "/{slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_category(slug: str, session: Session = Depends(get_session)):
    """
    Delete a category; remaining positions are renumbered.
    """
    service.delete_category(session, slug)
    return None
