# app/services/category_service.py
import re

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.product import Category
from app.repositories.product_repo import CategoryRepository
from app.schemas.product import CategoryCreate, CategoryUpdate


def slugify(raw: str) -> str:
    """
    Basic slugification:
      - lowercase
      - non-alphanumeric -> '-'
      - collapse multiple '-'
      - strip leading/trailing '-'
    """
    value = raw.strip().lower()
    value = re.sub(r"[^a-z0-9]+", "-", value)
    value = re.sub(r"-+", "-", value)
    value = value.strip("-")
    return value or "category"


class CategoryService:
    """
    Business logic for categories.

    Responsibilities:
      - unique lowercase names, slugs derived from names
      - keeping positions dense (0..n-1) after deletes
    """

    def __init__(self, repo: CategoryRepository):
        self.repo = repo

    def _normalize_positions(self, session: Session) -> None:
        ordered = sorted(
            self.repo.list_categories(session), key=lambda c: (c.position, c.created_at)
        )
        for idx, category in enumerate(ordered):
            if category.position != idx:
                category.position = idx
                session.add(category)
        session.commit()

    def _ensure_unique_name(self, session: Session, name: str) -> None:
        if self.repo.get_by_name(session, name) is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category already exists",
            )

    def list_categories(self, session: Session, search: str | None = None) -> list[Category]:
        return self.repo.list_categories(session, search)

    def get_category(self, session: Session, slug: str) -> Category:
        category = self.repo.get_by_slug(session, slug)
        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found",
            )
        return category

    def create_category(self, session: Session, payload: CategoryCreate) -> Category:
        """
        New categories go to the end unless a position is given.
        """
        self._ensure_unique_name(session, payload.name)

        position = payload.position
        if position is None:
            position = self.repo.count(session)

        category = Category(
            name=payload.name,
            slug=slugify(payload.name),
            picture_url=payload.picture_url,
            position=position,
            active=payload.active,
        )
        return self.repo.create(session, category)

    def update_category(
        self, session: Session, slug: str, payload: CategoryUpdate
    ) -> Category:
        category = self.get_category(session, slug)

        if payload.name is not None and payload.name != category.name:
            self._ensure_unique_name(session, payload.name)
            category.name = payload.name
            category.slug = slugify(payload.name)

        if payload.picture_url is not None:
            category.picture_url = payload.picture_url

        if payload.position is not None:
            category.position = payload.position

        if payload.active is not None:
            category.active = payload.active

        return self.repo.update(session, category)

    def toggle_active(self, session: Session, slug: str) -> Category:
        category = self.get_category(session, slug)
        category.active = not category.active
        return self.repo.update(session, category)

    def delete_category(self, session: Session, slug: str) -> None:
        category = self.get_category(session, slug)
        self.repo.delete(session, category)
        self._normalize_positions(session)
