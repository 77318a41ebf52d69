# app/repositories/product_repo.py
import uuid

from sqlalchemy import func, or_, update
from sqlmodel import Session, select

from app.models.product import Category, Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_many(self, session: Session, product_ids: list[uuid.UUID]) -> list[Product]:
        if not product_ids:
            return []
        stmt = select(Product).where(Product.id.in_(product_ids))
        return session.exec(stmt).all()

    def get_by_title(self, session: Session, title: str) -> Product | None:
        """Case-insensitive title lookup."""
        stmt = select(Product).where(func.lower(Product.title) == title.lower())
        return session.exec(stmt).first()

    def _filtered(
        self,
        stmt,
        category_id: uuid.UUID | None,
        stock: str | None,
        low_stock_threshold: int,
    ):
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        if stock == "in":
            stmt = stmt.where(Product.stock > 0)
        elif stock == "out":
            stmt = stmt.where(Product.stock == 0)
        elif stock == "low":
            stmt = stmt.where(Product.stock > 0, Product.stock <= low_stock_threshold)
        return stmt

    def list_products(
        self,
        session: Session,
        *,
        skip: int = 0,
        limit: int = 24,
        category_id: uuid.UUID | None = None,
        stock: str | None = None,
        sort: str = "latest",
        low_stock_threshold: int = 5,
    ) -> list[Product]:
        stmt = self._filtered(select(Product), category_id, stock, low_stock_threshold)

        order_by = {
            "latest": Product.created_at.desc(),
            "oldest": Product.created_at.asc(),
            "price_asc": Product.price.asc(),
            "price_desc": Product.price.desc(),
            "title": Product.title.asc(),
        }[sort]
        stmt = stmt.order_by(order_by, Product.id).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def count(
        self,
        session: Session,
        *,
        category_id: uuid.UUID | None = None,
        stock: str | None = None,
        low_stock_threshold: int = 5,
    ) -> int:
        stmt = self._filtered(
            select(func.count()).select_from(Product),
            category_id,
            stock,
            low_stock_threshold,
        )
        return session.exec(stmt).one()

    def search_candidates(self, session: Session, keywords: list[str]) -> list[Product]:
        """
        In-stock products where EVERY keyword appears in the title or the
        description (case-insensitive substring match).
        """
        stmt = select(Product).where(Product.stock > 0)
        for kw in keywords:
            stmt = stmt.where(
                or_(
                    func.lower(Product.title).contains(kw, autoescape=True),
                    func.lower(func.coalesce(Product.description, "")).contains(
                        kw, autoescape=True
                    ),
                )
            )
        return session.exec(stmt).all()

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def set_featured(
        self, session: Session, product_ids: list[uuid.UUID], is_featured: bool
    ) -> int:
        result = session.execute(
            update(Product)
            .where(Product.id.in_(product_ids))
            .values(is_featured=is_featured)
        )
        session.commit()
        return result.rowcount

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()


class CategoryRepository:
    """
    Data access layer for Category.
    """

    def get_by_id(self, session: Session, category_id: uuid.UUID) -> Category | None:
        return session.get(Category, category_id)

    def get_by_slug(self, session: Session, slug: str) -> Category | None:
        stmt = select(Category).where(Category.slug == slug)
        return session.exec(stmt).first()

    def get_by_name(self, session: Session, name: str) -> Category | None:
        stmt = select(Category).where(Category.name == name)
        return session.exec(stmt).first()

    def list_categories(self, session: Session, search: str | None = None) -> list[Category]:
        stmt = select(Category)
        if search:
            stmt = stmt.where(Category.name.contains(search.lower()))
        stmt = stmt.order_by(Category.active.desc(), Category.position, Category.name)
        return session.exec(stmt).all()

    def count(self, session: Session) -> int:
        return session.exec(select(func.count()).select_from(Category)).one()

    def create(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def update(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def delete(self, session: Session, category: Category) -> None:
        """Delete a category; its products become uncategorized."""
        session.execute(
            update(Product)
            .where(Product.category_id == category.id)
            .values(category_id=None)
        )
        session.delete(category)
        session.commit()
