# app/client/cart.py
import json
import logging
import threading
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.client.storage import MemoryStorage

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "cart"


class CartItem(BaseModel):
    """
    One line of the local cart.

    Serialized with the storefront's keys:
      {_id, name, price, quantity, stock, totalItemPrice, image}
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id", min_length=1)
    name: str
    price: float = Field(ge=0)
    quantity: int
    stock: int
    total_item_price: float = Field(default=0.0, alias="totalItemPrice")
    image: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: Any) -> Any:
        # product ids arrive as UUIDs from the API
        return v if isinstance(v, str) or v is None else str(v)

    def is_valid(self) -> bool:
        return 0 < self.quantity <= self.stock


class CartState:
    """
    Local shopping cart with derived totals, persisted after every change.

    Invariants (hold after every call):
      - every line has 0 < quantity <= stock
      - line total_item_price == price * quantity
      - total_quantity / total_price are the sums over all lines

    Writes that would break an invariant are dropped: the mutator returns
    False and the cart is left untouched. Mutators never raise for bad
    input.
    """

    def __init__(self, storage=None, key: str = CART_STORAGE_KEY):
        self.storage = storage if storage is not None else MemoryStorage()
        self.key = key
        self._lock = threading.RLock()
        self._items: list[CartItem] = []
        self.total_quantity = 0
        self.total_price = 0.0
        self._load()

    # ---- read side ----

    @property
    def items(self) -> list[CartItem]:
        with self._lock:
            return [it.model_copy() for it in self._items]

    def get(self, item_id) -> CartItem | None:
        with self._lock:
            item = self._find(str(item_id))
            return item.model_copy() if item else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, item_id) -> bool:
        with self._lock:
            return self._find(str(item_id)) is not None

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "cartItems": [it.model_dump(by_alias=True) for it in self._items],
                "totalQuantity": self.total_quantity,
                "totalPrice": self.total_price,
            }

    # ---- mutators ----

    def add_to_cart(self, item: CartItem | dict) -> bool:
        """
        Add a line, or merge into the existing line with the same id.

        No-op when quantity <= 0, quantity > stock, or the merged quantity
        would exceed stock.
        """
        if not isinstance(item, CartItem):
            try:
                item = CartItem.model_validate(item)
            except ValidationError as e:
                logger.debug("Rejected cart item: %s", e)
                return False

        if not item.is_valid():
            return False

        with self._lock:
            existing = self._find(item.id)
            if existing is None:
                self._items.append(item.model_copy())
            else:
                merged = existing.quantity + item.quantity
                if merged > item.stock:
                    return False
                existing.quantity = merged
                existing.stock = item.stock
            self._commit()
        return True

    def update_quantity(self, item_id, quantity: int) -> bool:
        """
        Set the quantity of an existing line. No-op when the line is absent
        or quantity is outside (0, stock].
        """
        with self._lock:
            item = self._find(str(item_id))
            if item is None:
                return False
            if isinstance(quantity, bool) or not isinstance(quantity, int):
                return False
            if not 0 < quantity <= item.stock:
                return False
            item.quantity = quantity
            self._commit()
        return True

    def remove_from_cart(self, item_id) -> bool:
        with self._lock:
            item = self._find(str(item_id))
            if item is None:
                return False
            self._items.remove(item)
            self._commit()
        return True

    def empty_cart(self) -> bool:
        with self._lock:
            self._items = []
            self._commit()
        return True

    # ---- internals ----

    def _find(self, item_id: str) -> CartItem | None:
        for it in self._items:
            if it.id == item_id:
                return it
        return None

    def _recompute(self) -> None:
        total_qty = 0
        total_price = 0.0
        for it in self._items:
            it.total_item_price = round(it.price * it.quantity, 2)
            total_qty += it.quantity
            total_price += it.total_item_price
        self.total_quantity = total_qty
        self.total_price = round(total_price, 2)

    def _commit(self) -> None:
        self._recompute()
        self._save()

    def _save(self) -> None:
        try:
            self.storage.set_item(self.key, json.dumps(self.to_dict()))
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not persist cart: %s", e)

    def _load(self) -> None:
        """
        Restore from storage. Lines that fail validation or break the
        quantity invariant are dropped; totals are always recomputed.
        """
        try:
            raw = self.storage.get_item(self.key)
        except OSError as e:
            logger.warning("Could not read cart from storage: %s", e)
            raw = None

        entries: list = []
        if raw is not None:
            try:
                data = json.loads(raw)
            except (TypeError, ValueError) as e:
                logger.warning("Discarding corrupt cart data: %s", e)
                data = None
            if isinstance(data, dict) and isinstance(data.get("cartItems"), list):
                entries = data["cartItems"]

        items: list[CartItem] = []
        seen: set[str] = set()
        dropped = 0
        for entry in entries:
            try:
                item = CartItem.model_validate(entry)
            except ValidationError:
                dropped += 1
                continue
            if not item.is_valid() or item.id in seen:
                dropped += 1
                continue
            seen.add(item.id)
            items.append(item)

        if dropped:
            logger.info("Dropped %d invalid cart line(s) on load", dropped)

        self._items = items
        self._recompute()
