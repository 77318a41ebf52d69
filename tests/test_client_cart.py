"""
Local cart state: invariants, silent no-ops and persistence.
"""
import json
import threading

import pytest

from app.client.cart import CART_STORAGE_KEY, CartItem, CartState
from app.client.storage import LocalStorage, MemoryStorage


def _item(item_id="p1", price=10.0, quantity=1, stock=5, name="Brake Pad"):
    return {"_id": item_id, "name": name, "price": price, "quantity": quantity, "stock": stock}


def _assert_totals_consistent(cart: CartState):
    items = cart.items
    assert cart.total_quantity == sum(it.quantity for it in items)
    assert cart.total_price == pytest.approx(sum(it.price * it.quantity for it in items))
    for it in items:
        assert it.total_item_price == pytest.approx(it.price * it.quantity)
        assert 0 < it.quantity <= it.stock


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cart(storage):
    return CartState(storage)


class TestAddToCart:
    def test_add_new_item(self, cart):
        # Act
        changed = cart.add_to_cart(_item(quantity=2))

        # Assert
        assert changed is True
        assert len(cart) == 1
        assert cart.total_quantity == 2
        assert cart.total_price == 20.0
        assert cart.items[0].total_item_price == 20.0

    def test_add_existing_item_merges_quantity(self, cart):
        cart.add_to_cart(_item(quantity=2))
        cart.add_to_cart(_item(quantity=3))

        assert len(cart) == 1
        assert cart.get("p1").quantity == 5
        assert cart.total_quantity == 5

    def test_quantity_above_stock_is_ignored(self, cart):
        changed = cart.add_to_cart(_item(quantity=6, stock=5))

        assert changed is False
        assert len(cart) == 0
        assert cart.total_quantity == 0

    def test_merge_exceeding_stock_leaves_cart_unchanged(self, cart):
        # Arrange
        cart.add_to_cart(_item(quantity=4, stock=5))
        before = cart.to_dict()

        # Act
        changed = cart.add_to_cart(_item(quantity=2, stock=5))

        # Assert
        assert changed is False
        assert cart.to_dict() == before

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_is_ignored(self, cart, quantity):
        assert cart.add_to_cart(_item(quantity=quantity)) is False
        assert len(cart) == 0

    def test_malformed_item_is_ignored(self, cart):
        assert cart.add_to_cart({"name": "no id", "price": 3}) is False
        assert cart.add_to_cart(_item(price=-1)) is False
        assert len(cart) == 0

    def test_accepts_cart_item_instances(self, cart):
        item = CartItem(id="p9", name="Spark Plug", price=3.25, quantity=4, stock=10)

        assert cart.add_to_cart(item) is True
        assert cart.total_price == 13.0


class TestUpdateQuantity:
    def test_update_sets_quantity_and_totals(self, cart):
        cart.add_to_cart(_item(quantity=1, price=2.5))

        assert cart.update_quantity("p1", 4) is True
        assert cart.get("p1").quantity == 4
        assert cart.total_price == 10.0

    def test_update_unknown_item_is_noop(self, cart):
        cart.add_to_cart(_item())
        assert cart.update_quantity("missing", 2) is False

    @pytest.mark.parametrize("quantity", [0, -3, 6])
    def test_update_outside_range_is_noop(self, cart, quantity):
        cart.add_to_cart(_item(quantity=2, stock=5))

        assert cart.update_quantity("p1", quantity) is False
        assert cart.get("p1").quantity == 2


class TestRemoveAndEmpty:
    def test_remove_item(self, cart):
        cart.add_to_cart(_item("a", price=1.1, quantity=1))
        cart.add_to_cart(_item("b", price=2.2, quantity=2))

        assert cart.remove_from_cart("a") is True
        assert "a" not in cart
        assert cart.total_quantity == 2
        assert cart.total_price == 4.4

    def test_remove_unknown_item_is_noop(self, cart):
        cart.add_to_cart(_item())
        before = cart.to_dict()

        assert cart.remove_from_cart("nope") is False
        assert cart.to_dict() == before

    def test_empty_cart(self, cart, storage):
        cart.add_to_cart(_item())
        cart.empty_cart()

        assert len(cart) == 0
        assert cart.total_quantity == 0
        assert cart.total_price == 0
        assert json.loads(storage.get_item(CART_STORAGE_KEY))["cartItems"] == []


class TestInvariants:
    def test_totals_hold_after_mixed_sequence(self, cart):
        cart.add_to_cart(_item("a", price=19.99, quantity=2, stock=3))
        cart.add_to_cart(_item("b", price=0.1, quantity=3, stock=10))
        cart.add_to_cart(_item("a", price=19.99, quantity=5, stock=3))  # rejected
        cart.update_quantity("b", 7)
        cart.add_to_cart(_item("c", price=5.5, quantity=1, stock=1))
        cart.remove_from_cart("a")
        cart.update_quantity("c", 2)  # rejected

        _assert_totals_consistent(cart)
        assert cart.total_quantity == 8
        assert cart.total_price == 6.2

    def test_items_are_copies(self, cart):
        cart.add_to_cart(_item(quantity=1))
        cart.items[0].quantity = 99

        assert cart.get("p1").quantity == 1

    def test_reads_wait_for_a_writer_holding_the_lock(self, cart):
        cart.add_to_cart(_item())
        results = []
        reader = threading.Thread(
            target=lambda: results.extend([len(cart), "p1" in cart, cart.get("p1").quantity])
        )

        with cart._lock:
            reader.start()
            reader.join(0.1)
            assert results == []

        reader.join(2)
        assert results == [1, True, 1]


class TestPersistence:
    def test_every_mutation_is_persisted(self, cart, storage):
        cart.add_to_cart(_item(quantity=2))
        saved = json.loads(storage.get_item(CART_STORAGE_KEY))

        assert saved["totalQuantity"] == 2
        assert saved["totalPrice"] == 20.0
        assert saved["cartItems"][0]["_id"] == "p1"
        assert saved["cartItems"][0]["totalItemPrice"] == 20.0

    def test_round_trip_through_file(self, tmp_path):
        # Arrange
        path = tmp_path / "storage.json"
        first = CartState(LocalStorage(path))
        first.add_to_cart(_item("a", price=3.5, quantity=2))
        first.add_to_cart(_item("b", price=1.25, quantity=4, stock=4))

        # Act
        second = CartState(LocalStorage(path))

        # Assert
        assert second.to_dict() == first.to_dict()

    def test_invalid_lines_are_dropped_on_load(self, storage):
        storage.set_item(
            CART_STORAGE_KEY,
            json.dumps(
                {
                    "cartItems": [
                        _item("ok", quantity=2, stock=5),
                        _item("over", quantity=9, stock=5),
                        _item("zero", quantity=0, stock=5),
                        {"_id": "broken"},
                        _item("ok", quantity=1, stock=5),
                    ],
                    "totalQuantity": 999,
                    "totalPrice": 999,
                }
            ),
        )

        cart = CartState(storage)

        assert [it.id for it in cart.items] == ["ok"]
        assert cart.total_quantity == 2
        assert cart.total_price == 20.0

    @pytest.mark.parametrize("raw", ["{not json", "[]", '"cart"', '{"cartItems": 3}'])
    def test_corrupt_storage_gives_empty_cart(self, storage, raw):
        storage.set_item(CART_STORAGE_KEY, raw)

        cart = CartState(storage)

        assert len(cart) == 0
        assert cart.total_quantity == 0
        assert cart.total_price == 0

    def test_missing_storage_gives_empty_cart(self, tmp_path):
        cart = CartState(LocalStorage(tmp_path / "does-not-exist.json"))
        assert cart.to_dict() == {"cartItems": [], "totalQuantity": 0, "totalPrice": 0.0}


class TestLocalStorage:
    def test_set_get_remove(self, tmp_path):
        store = LocalStorage(tmp_path / "s.json")
        store.set_item("a", "1")
        store.set_item("b", "2")
        store.remove_item("a")

        assert store.get_item("a") is None
        assert LocalStorage(tmp_path / "s.json").get_item("b") == "2"

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "s.json"
        path.write_text("garbage", encoding="utf-8")
        store = LocalStorage(path)

        assert store.get_item("cart") is None
        store.set_item("cart", "{}")
        assert store.get_item("cart") == "{}"
