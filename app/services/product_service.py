# app/services/product_service.py
import uuid
from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.product import Product
from app.repositories.product_repo import CategoryRepository, ProductRepository
from app.schemas.common import build_pagination, page_to_offset, MAX_PAGE_SIZE
from app.schemas.product import (
    BulkFeaturedUpdate,
    ProductCreate,
    ProductPage,
    ProductRead,
    ProductSearchHit,
    ProductSearchResult,
    ProductUpdate,
)

STOP_WORDS = frozenset(
    {"the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by", "from"}
)

# Relevance weights
SCORE_TITLE_EXACT = 1000
SCORE_TITLE_EDGE_WORD = 800
SCORE_TITLE_CONTAINS = 600
SCORE_CATEGORY = 300
SCORE_DESCRIPTION = 100
SCORE_ALL_KEYWORDS_BONUS = 500
SCORE_FEATURED_BONUS = 50
PARTIAL_MATCH_PENALTY = 0.3


@dataclass
class Relevance:
    score: float
    matched_keywords: int
    total_keywords: int


def extract_keywords(query: str) -> list[str]:
    """Lowercase, split on whitespace, drop stop words."""
    return [w for w in query.lower().split() if w and w not in STOP_WORDS]


def score_product(product: Product, keywords: list[str], category_name: str = "") -> Relevance:
    """
    Rank a product against search keywords.

    Per keyword, the best title match counts once (exact > starts/ends
    with the word > contains), plus category and description hits.
    Products matching every keyword get a bonus; partial matches are
    scaled down by the matched fraction.
    """
    title = (product.title or "").lower()
    description = (product.description or "").lower()
    category = (category_name or "").lower()

    score = 0.0
    matched = 0

    for kw in keywords:
        hit = False

        if title == kw:
            score += SCORE_TITLE_EXACT
            hit = True
        elif title.startswith(kw + " ") or title.endswith(" " + kw):
            score += SCORE_TITLE_EDGE_WORD
            hit = True
        elif kw in title:
            score += SCORE_TITLE_CONTAINS
            hit = True

        if kw in category:
            score += SCORE_CATEGORY
            hit = True

        if kw in description:
            score += SCORE_DESCRIPTION
            hit = True

        if hit:
            matched += 1

    total = len(keywords)
    if total and matched == total:
        score += SCORE_ALL_KEYWORDS_BONUS
    elif matched < total:
        score = score * (matched / total) * PARTIAL_MATCH_PENALTY

    if product.is_featured:
        score += SCORE_FEATURED_BONUS

    return Relevance(score=score, matched_keywords=matched, total_keywords=total)


class ProductService:
    """
    Business logic for the product catalog.

    Responsibilities:
      - title uniqueness (case-insensitive)
      - category existence checks
      - paginated listing and relevance search
      - admin-only operations (enforced at router via require_admin)
    """

    def __init__(
        self,
        repo: ProductRepository,
        category_repo: CategoryRepository,
        low_stock_threshold: int = 5,
    ):
        self.repo = repo
        self.category_repo = category_repo
        self.low_stock_threshold = low_stock_threshold

    # ----- Helpers -----

    def _ensure_category(self, session: Session, category_id: uuid.UUID | None) -> None:
        if category_id is not None and self.category_repo.get_by_id(session, category_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found",
            )

    def _ensure_unique_title(
        self, session: Session, title: str, exclude_id: uuid.UUID | None = None
    ) -> None:
        existing = self.repo.get_by_title(session, title)
        if existing is not None and existing.id != exclude_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product with this name already exists",
            )

    # ----- Queries -----

    def list_products(
        self,
        session: Session,
        page: int = 1,
        limit: int = 24,
        category_id: uuid.UUID | None = None,
        stock: str | None = None,
        sort: str = "latest",
    ) -> ProductPage:
        products = self.repo.list_products(
            session,
            skip=page_to_offset(page, limit),
            limit=limit,
            category_id=category_id,
            stock=stock,
            sort=sort,
            low_stock_threshold=self.low_stock_threshold,
        )
        total = self.repo.count(
            session,
            category_id=category_id,
            stock=stock,
            low_stock_threshold=self.low_stock_threshold,
        )
        return ProductPage(
            data=[ProductRead.model_validate(p) for p in products],
            pagination=build_pagination(page, limit, total),
        )

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def search_products(
        self,
        session: Session,
        query: str,
        page: int = 1,
        limit: int = 20,
    ) -> ProductSearchResult:
        """
        Keyword search over in-stock products, ranked by relevance.

        Raises:
            HTTPException(400): blank query.
        """
        trimmed = (query or "").strip()
        if not trimmed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Search query is required",
            )

        limit = min(limit, MAX_PAGE_SIZE)
        keywords = extract_keywords(trimmed)
        if not keywords:
            return ProductSearchResult(
                query=trimmed,
                keywords=[],
                data=[],
                pagination=build_pagination(page, limit, 0),
            )

        candidates = self.repo.search_candidates(session, keywords)

        category_names: dict[uuid.UUID, str] = {}
        for c in self.category_repo.list_categories(session):
            category_names[c.id] = c.name

        hits: list[ProductSearchHit] = []
        for p in candidates:
            cat_name = category_names.get(p.category_id, "") if p.category_id else ""
            rel = score_product(p, keywords, cat_name)
            hits.append(
                ProductSearchHit(
                    **ProductRead.model_validate(p).model_dump(),
                    relevance_score=round(rel.score, 2),
                    matched_keywords=rel.matched_keywords,
                    category_name=cat_name or None,
                )
            )

        hits.sort(key=lambda h: (-h.relevance_score, -h.created_at.timestamp()))
        skip = page_to_offset(page, limit)

        return ProductSearchResult(
            query=trimmed,
            keywords=keywords,
            data=hits[skip : skip + limit],
            pagination=build_pagination(page, limit, len(hits)),
        )

    def low_stock_count(self, session: Session) -> int:
        return self.repo.count(
            session, stock="low", low_stock_threshold=self.low_stock_threshold
        )

    # ----- Mutations -----

    def create_product(
        self,
        session: Session,
        payload: ProductCreate,
        created_by: uuid.UUID | None = None,
    ) -> Product:
        self._ensure_unique_title(session, payload.title)
        self._ensure_category(session, payload.category_id)

        product = Product(**payload.model_dump(), created_by=created_by)
        return self.repo.create(session, product)

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product.
        """
        product = self.get_product(session, product_id)
        data = payload.model_dump(exclude_unset=True)

        if data.get("title") is not None:
            self._ensure_unique_title(session, data["title"], exclude_id=product.id)
        if "category_id" in data:
            self._ensure_category(session, data["category_id"])

        for field, value in data.items():
            if value is None and field not in {"category_id", "description", "image_url"}:
                continue
            setattr(product, field, value)

        return self.repo.update(session, product)

    def update_stock(self, session: Session, product_id: uuid.UUID, stock: int) -> Product:
        product = self.get_product(session, product_id)
        product.stock = stock
        return self.repo.update(session, product)

    def bulk_update_featured(self, session: Session, payload: BulkFeaturedUpdate) -> int:
        return self.repo.set_featured(session, payload.product_ids, payload.is_featured)

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        product = self.get_product(session, product_id)
        self.repo.delete(session, product)
