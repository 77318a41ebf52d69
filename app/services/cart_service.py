# app/services/cart_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.product import Product
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemRead,
    CartSummary,
    CartSyncRequest,
    CartSyncResult,
    StockCheckRequest,
    StockCheckResult,
    StockProblem,
    StockStatus,
)

logger = logging.getLogger(__name__)


class CartService:
    """
    Business logic for the server-side cart.

    Responsibilities:
      - ensure only 'user' accounts use cart (via router dependency)
      - enforce 1 <= quantity <= product.stock on every write
      - reconcile stored lines with the live catalog on read
      - compute line totals and cart totals
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_purchasable_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        if product.stock <= 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f'Product "{product.title}" is out of stock',
            )
        return product

    @staticmethod
    def _not_enough_stock(product: Product, requested: int) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f'Only {product.stock} units available for "{product.title}". '
                f"You requested {requested}."
            ),
        )

    # ---- public operations ----

    def get_cart_summary(
        self,
        session: Session,
        user_id: uuid.UUID,
    ) -> CartSummary:
        """
        Return the cart joined with the live catalog.

        Reconciliation (persisted):
          - lines whose product no longer exists are dropped
          - quantities above current stock are clamped down to stock

        Out-of-stock lines are kept (so the customer sees them) but are
        excluded from the totals.
        """
        items = self.cart_repo.list_for_user(session, user_id)
        products = {
            p.id: p
            for p in self.product_repo.get_many(session, [it.product_id for it in items])
        }

        item_reads: list[CartItemRead] = []
        total_qty = 0
        total_price = 0.0
        dirty = False

        for it in items:
            product = products.get(it.product_id)
            if product is None:
                logger.info("Pruning cart line for missing product %s", it.product_id)
                session.delete(it)
                dirty = True
                continue

            read = CartItemRead(
                product_id=product.id,
                title=product.title,
                price=product.price,
                image_url=product.image_url,
                quantity=it.quantity,
                line_total=0.0,
                available_stock=product.stock,
            )

            if product.stock <= 0:
                read.is_out_of_stock = True
            else:
                if it.quantity > product.stock:
                    read.quantity_adjusted = True
                    read.original_quantity = it.quantity
                    read.quantity = product.stock
                    it.quantity = product.stock
                    session.add(it)
                    dirty = True

                read.line_total = round(read.quantity * product.price, 2)
                total_qty += read.quantity
                total_price += read.line_total

            item_reads.append(read)

        if dirty:
            session.commit()

        return CartSummary(
            items=item_reads,
            total_quantity=total_qty,
            total_price=round(total_price, 2),
        )

    def add_to_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemCreate,
    ) -> CartSummary:
        """
        Add a product to the user's cart.

        Rules:
          - product must exist and be in stock
          - existing_quantity + quantity <= stock
        """
        product = self._get_purchasable_product(session, payload.product_id)
        existing = self.cart_repo.get_item(session, user_id, payload.product_id)

        requested = payload.quantity + (existing.quantity if existing else 0)
        if requested > product.stock:
            raise self._not_enough_stock(product, requested)

        self.cart_repo.set_quantity(session, user_id, product.id, requested)

        return self.get_cart_summary(session, user_id)

    def update_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartSummary:
        """
        Set the quantity of a line already in the cart.

        404 if not in cart, 400 if quantity exceeds stock.
        """
        item = self.cart_repo.get_item(session, user_id, product_id)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found in cart",
            )

        product = self._get_purchasable_product(session, product_id)
        if payload.quantity > product.stock:
            raise self._not_enough_stock(product, payload.quantity)

        self.cart_repo.set_quantity(session, user_id, product_id, payload.quantity)

        return self.get_cart_summary(session, user_id)

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
    ) -> CartSummary:
        """
        Remove a product from the cart. Removing a product that is not in
        the cart is not an error.
        """
        self.cart_repo.remove(session, user_id, product_id)
        return self.get_cart_summary(session, user_id)

    def clear_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
    ) -> CartSummary:
        self.cart_repo.clear_user_cart(session, user_id)
        return CartSummary(items=[], total_quantity=0, total_price=0.0)

    def sync_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartSyncRequest,
    ) -> CartSyncResult:
        """
        Merge a guest's local cart into the server cart after login.

        Quantities are added to existing lines and clamped to stock.
        Unknown or sold-out products are skipped and reported instead of
        failing the whole merge.
        """
        incoming: dict[uuid.UUID, int] = {}
        for line in payload.products:
            incoming[line.product_id] = incoming.get(line.product_id, 0) + line.quantity

        products = {
            p.id: p for p in self.product_repo.get_many(session, list(incoming))
        }
        skipped: list[StockProblem] = []

        for product_id, qty in incoming.items():
            product = products.get(product_id)
            if product is None:
                skipped.append(StockProblem(product_id=product_id, message="Product not found"))
                continue
            if product.stock <= 0:
                skipped.append(
                    StockProblem(
                        product_id=product_id,
                        message=f'"{product.title}" is out of stock',
                    )
                )
                continue

            existing = self.cart_repo.get_item(session, user_id, product_id)
            wanted = qty + (existing.quantity if existing else 0)
            self.cart_repo.set_quantity(
                session, user_id, product_id, min(wanted, product.stock), commit=False
            )

        session.commit()
        if skipped:
            logger.info("Cart sync for %s skipped %d line(s)", user_id, len(skipped))

        summary = self.get_cart_summary(session, user_id)
        return CartSyncResult(**summary.model_dump(), skipped=skipped)

    def check_stock(self, session: Session, payload: StockCheckRequest) -> StockCheckResult:
        """
        Availability report for a list of (product_id, quantity) lines,
        typically the local cart right before checkout.
        """
        stock_status: list[StockStatus] = []
        out_of_stock: list[StockProblem] = []
        insufficient: list[StockProblem] = []

        for line in payload.products:
            product = self.product_repo.get_by_id(session, line.product_id)
            if product is None:
                out_of_stock.append(
                    StockProblem(product_id=line.product_id, message="Product not found")
                )
                continue

            available = product.stock >= line.quantity
            stock_status.append(
                StockStatus(
                    product_id=product.id,
                    available=available,
                    available_stock=product.stock,
                    requested_quantity=line.quantity,
                )
            )

            if product.stock <= 0:
                out_of_stock.append(
                    StockProblem(
                        product_id=product.id,
                        message=f'"{product.title}" is out of stock',
                    )
                )
            elif not available:
                insufficient.append(
                    StockProblem(
                        product_id=product.id,
                        message=(
                            f'Only {product.stock} units available for "{product.title}"'
                        ),
                    )
                )

        is_valid = not out_of_stock and not insufficient
        if is_valid:
            message = "All products are available in requested quantities"
        else:
            message = (
                f"{len(out_of_stock)} out of stock, "
                f"{len(insufficient)} insufficient stock"
            )

        return StockCheckResult(
            success=is_valid,
            stock_status=stock_status,
            out_of_stock_items=out_of_stock,
            insufficient_stock_items=insufficient,
            message=message,
        )
