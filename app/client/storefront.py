# app/client/storefront.py
import logging
import os

from app.client.api import StorefrontAPI
from app.client.cart import CartState
from app.client.session import Session, TokenValidator, TOKEN_CHECK_INTERVAL_SECONDS
from app.client.storage import LocalStorage, MemoryStorage

logger = logging.getLogger(__name__)


class Storefront:
    """
    Customer-side facade: API client + durable cart + session guard.

    The token validator runs while a customer is logged in: `login` and
    `restore` start it, `logout` stops it, and it ends by itself when the
    server rejects the token.

    Usage:
        with Storefront("http://localhost:8000/api", "~/.gul-autos/storage.json") as shop:
            shop.login(email, password)
            shop.add_product(shop.api.get_product(pid), quantity=2)
            shop.checkout(address="...", city="...", phone="...")
    """

    def __init__(
        self,
        base_url: str,
        storage_path: str | os.PathLike | None = None,
        api: StorefrontAPI | None = None,
        check_interval: float = TOKEN_CHECK_INTERVAL_SECONDS,
    ):
        self.api = api or StorefrontAPI(base_url)
        storage = (
            LocalStorage(os.path.expanduser(storage_path))
            if storage_path is not None
            else MemoryStorage()
        )
        self.cart = CartState(storage)
        self.session = Session(self.api, self.cart)
        self.validator = TokenValidator(
            self.api,
            interval=check_interval,
            is_active=lambda: self.session.is_authenticated,
        )
        self.validator.on_expired(self.session.expire)

    def __enter__(self) -> "Storefront":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.validator.stop()
        self.api.close()

    # ---- session ----

    def login(self, email: str, password: str) -> dict:
        user = self.session.login(email, password)
        self.validator.start()
        return user

    def restore(self) -> bool:
        """Resume a cookie session left from an earlier run."""
        restored = self.session.restore()
        if restored:
            self.validator.start()
        return restored

    def logout(self) -> None:
        self.validator.stop()
        self.session.logout()

    # ---- cart ----

    def add_product(self, product: dict, quantity: int = 1) -> bool:
        """
        Put a product (as returned by the API) into the local cart.

        Incomplete or invalid product data is dropped like any other bad
        cart write (returns False).
        """
        return self.cart.add_to_cart(
            {
                "_id": product.get("id"),
                "name": product.get("title"),
                "price": product.get("price"),
                "quantity": quantity,
                "stock": product.get("stock"),
                "image": product.get("image_url"),
            }
        )

    def checkout(
        self,
        address: str | None = None,
        city: str | None = None,
        phone: str | None = None,
    ) -> dict | None:
        """
        Place an order for the local cart and empty it on success.

        Returns None for an empty cart. API errors propagate and leave the
        cart untouched.
        """
        items = self.cart.items
        if not items:
            return None
        order = self.api.create_order(
            [(it.id, it.quantity) for it in items],
            address=address,
            city=city,
            phone=phone,
        )
        logger.info("Order %s placed (%d lines)", order.get("id"), len(items))
        self.cart.empty_cart()
        return order
