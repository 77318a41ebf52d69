"""
Category endpoints: ordering, slugs and position renumbering.
"""
from fastapi.testclient import TestClient

from app.services.category_service import slugify


def test_slugify():
    assert slugify("  Engine & Oil  ") == "engine-oil"
    assert slugify("!!!") == "category"


class TestCategories:
    def test_list_orders_active_first_then_position(self, test_client: TestClient, make_category):
        make_category("tyres", position=0, active=False)
        make_category("lights", position=2)
        make_category("brakes", position=1)

        body = test_client.get("/api/categories").json()

        assert [c["name"] for c in body] == ["brakes", "lights", "tyres"]

    def test_search(self, test_client: TestClient, make_category):
        make_category("brakes")
        make_category("lights", position=1)

        body = test_client.get("/api/categories", params={"search": "LIG"}).json()

        assert [c["name"] for c in body] == ["lights"]

    def test_create_lowercases_and_slugifies(self, test_client: TestClient, admin_headers):
        # Act
        response = test_client.post(
            "/api/categories", json={"name": "Engine Oil"}, headers=admin_headers
        )

        # Assert
        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "engine oil"
        assert body["slug"] == "engine-oil"
        assert body["position"] == 0

    def test_duplicate_name_rejected(self, test_client: TestClient, admin_headers, make_category):
        make_category("brakes")

        response = test_client.post(
            "/api/categories", json={"name": "BRAKES"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Category already exists"

    def test_get_by_slug_and_missing(self, test_client: TestClient, make_category):
        make_category("brakes")

        assert test_client.get("/api/categories/brakes").json()["name"] == "brakes"
        assert test_client.get("/api/categories/nope").status_code == 404

    def test_toggle_active(self, test_client: TestClient, admin_headers, make_category):
        make_category("brakes")

        response = test_client.patch(
            "/api/categories/brakes/toggle-active", headers=admin_headers
        )

        assert response.json()["active"] is False

    def test_delete_renumbers_positions(
        self, test_client: TestClient, admin_headers, make_category
    ):
        # Arrange
        make_category("a-cat", position=0)
        make_category("b-cat", position=1)
        make_category("c-cat", position=2)

        # Act
        response = test_client.delete("/api/categories/a-cat", headers=admin_headers)

        # Assert
        assert response.status_code == 204
        body = test_client.get("/api/categories").json()
        assert [(c["name"], c["position"]) for c in body] == [("b-cat", 0), ("c-cat", 1)]

    def test_writes_require_admin(self, test_client: TestClient, customer_headers):
        response = test_client.post(
            "/api/categories", json={"name": "brakes"}, headers=customer_headers
        )
        assert response.status_code == 403
