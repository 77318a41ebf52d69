"""
Order placement (COD) and admin order management.
"""
import uuid

from fastapi.testclient import TestClient
from sqlmodel import Session

from app.models.product import Product


def _place(client: TestClient, headers, lines, **contact):
    payload = {
        "products": [{"id": str(p.id), "quantity": q} for p, q in lines],
        **contact,
    }
    return client.post("/api/orders", json=payload, headers=headers)


class TestPlaceOrder:
    def test_order_snapshots_prices_and_deducts_stock(
        self, test_client: TestClient, customer_headers, make_product, session: Session
    ):
        # Arrange
        pads = make_product(title="Brake Pad", price=12.5, stock=10)
        bulbs = make_product(title="Bulb", price=1.99, stock=3)

        # Act
        response = _place(
            test_client, customer_headers, [(pads, 2), (bulbs, 3)],
            address="12 Mall Road", city="Lahore", phone="03001234567",
        )

        # Assert
        assert response.status_code == 201
        order = response.json()
        assert order["amount"] == 30.97
        assert order["status"] == "pending"
        assert order["payment_method"] == "COD"
        assert order["city"] == "Lahore"
        assert {it["product_title"]: it["unit_price"] for it in order["items"]} == {
            "Brake Pad": 12.5,
            "Bulb": 1.99,
        }

        session.expire_all()
        assert session.get(Product, pads.id).stock == 8
        assert session.get(Product, bulbs.id).stock == 0

    def test_duplicate_lines_are_merged(self, test_client: TestClient, customer_headers, make_product):
        product = make_product(price=5, stock=4)

        order = _place(test_client, customer_headers, [(product, 1), (product, 2)]).json()

        assert len(order["items"]) == 1
        assert order["items"][0]["quantity"] == 3
        assert order["amount"] == 15.0

    def test_insufficient_stock_rejects_whole_order(
        self, test_client: TestClient, customer_headers, make_product, session: Session
    ):
        ok = make_product(title="Plenty", stock=10)
        short = make_product(title="Short", stock=1)

        response = _place(test_client, customer_headers, [(ok, 1), (short, 2)])

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["message"] == "Order validation failed"
        assert [it["product_id"] for it in detail["items"]] == [str(short.id)]
        session.expire_all()
        assert session.get(Product, ok.id).stock == 10

    def test_unknown_products(self, test_client: TestClient, customer_headers):
        response = test_client.post(
            "/api/orders",
            json={"products": [{"id": str(uuid.uuid4()), "quantity": 1}]},
            headers=customer_headers,
        )
        assert response.status_code == 404

    def test_contact_falls_back_to_profile(
        self, test_client: TestClient, customer, customer_headers, make_product, session: Session
    ):
        customer.city = "Karachi"
        session.add(customer)
        session.commit()
        product = make_product()

        order = _place(test_client, customer_headers, [(product, 1)], city="  ").json()

        assert order["city"] == "Karachi"

    def test_empty_order_rejected(self, test_client: TestClient, customer_headers):
        response = test_client.post("/api/orders", json={"products": []}, headers=customer_headers)
        assert response.status_code == 422

    def test_login_required(self, test_client: TestClient, make_product):
        product = make_product()
        response = _place(test_client, {}, [(product, 1)])
        assert response.status_code == 401


class TestMyOrders:
    def test_list_and_get_own_orders(
        self, test_client: TestClient, customer_headers, admin_headers, make_product
    ):
        product = make_product(stock=10)
        first = _place(test_client, customer_headers, [(product, 1)]).json()
        _place(test_client, customer_headers, [(product, 1)])
        admins = _place(test_client, admin_headers, [(product, 1)]).json()

        page = test_client.get("/api/orders/me", headers=customer_headers).json()
        own = test_client.get(f"/api/orders/me/{first['id']}", headers=customer_headers)
        other = test_client.get(f"/api/orders/me/{admins['id']}", headers=customer_headers)

        assert page["pagination"]["totalItems"] == 2
        assert own.status_code == 200
        assert len(own.json()["items"]) == 1
        assert other.status_code == 404


class TestAdminOrders:
    def test_listing_and_status_flow(
        self, test_client: TestClient, customer_headers, admin_headers, make_product
    ):
        # Arrange
        product = make_product(stock=10)
        order = _place(test_client, customer_headers, [(product, 2)]).json()

        # Act
        pending = test_client.get("/api/orders/pending-count", headers=admin_headers).json()
        updated = test_client.patch(
            f"/api/orders/{order['id']}/status",
            json={"status": "completed", "packer_name": "Ali"},
            headers=admin_headers,
        ).json()
        after = test_client.get("/api/orders/pending-count", headers=admin_headers).json()
        listing = test_client.get("/api/orders", headers=admin_headers).json()
        detail = test_client.get(f"/api/orders/{order['id']}", headers=admin_headers).json()

        # Assert
        assert pending["count"] == 1
        assert updated["status"] == "completed"
        assert updated["packer_name"] == "Ali"
        assert after["count"] == 0
        assert listing["pagination"]["totalItems"] == 1
        assert detail["items"][0]["quantity"] == 2

    def test_invalid_status(self, test_client: TestClient, customer_headers, admin_headers, make_product):
        product = make_product()
        order = _place(test_client, customer_headers, [(product, 1)]).json()

        response = test_client.patch(
            f"/api/orders/{order['id']}/status", json={"status": "shipped"}, headers=admin_headers
        )

        assert response.status_code == 422

    def test_delete_and_bulk_delete(
        self, test_client: TestClient, customer_headers, admin_headers, make_product
    ):
        product = make_product(stock=10)
        ids = [_place(test_client, customer_headers, [(product, 1)]).json()["id"] for _ in range(3)]

        single = test_client.delete(f"/api/orders/{ids[0]}", headers=admin_headers)
        bulk = test_client.request(
            "DELETE",
            "/api/orders/bulk",
            json={"order_ids": ids[1:] + [str(uuid.uuid4())]},
            headers=admin_headers,
        )
        none_left = test_client.request(
            "DELETE", "/api/orders/bulk", json={"order_ids": ids}, headers=admin_headers
        )

        assert single.status_code == 204
        assert bulk.json()["deleted_count"] == 2
        assert bulk.json()["requested_count"] == 3
        assert none_left.status_code == 404

    def test_customers_cannot_manage_orders(self, test_client: TestClient, customer_headers):
        assert test_client.get("/api/orders", headers=customer_headers).status_code == 403
