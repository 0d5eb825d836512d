"""HTTP tests through FastAPI's TestClient against a SQLite store."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from orderdesk.domain.model.value_objects import MAX_QUANTITY, new_identifier
from orderdesk.infrastructure.api.app import create_app

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}
ADMIN = {"X-User-Id": "root", "X-User-Role": "admin"}


@pytest.fixture
def client(services):
    with TestClient(create_app(services=services)) as client:
        yield client


class TestPlaceOrderEndpoint:

    def test_created(self, client, add_product):
        laptop = add_product(name="Laptop", price="100.00", stock=10)
        response = client.post(
            "/orders",
            json={"products": [{"productId": laptop.id, "quantity": 3}]},
            headers=ALICE,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        order = body["data"]
        assert order["userId"] == "alice"
        assert order["totalPrice"] == 300.0
        assert order["status"] == "pending"
        assert order["products"] == [
            {"productId": laptop.id, "name": "Laptop", "price": 100.0, "quantity": 3}
        ]

    def test_forged_price_and_name_are_ignored(self, client, add_product):
        widget = add_product(name="Widget", price="40.00")
        response = client.post(
            "/orders",
            json={
                "products": [
                    {"productId": widget.id, "quantity": 2, "price": 0.01, "name": "Free"}
                ]
            },
            headers=ALICE,
        )
        assert response.status_code == 201
        order = response.json()["data"]
        assert order["totalPrice"] == 80.0
        assert order["products"][0]["name"] == "Widget"

    def test_insufficient_stock_is_400(self, client, add_product):
        widget = add_product(name="Widget", stock=1)
        response = client.post(
            "/orders",
            json={"products": [{"productId": widget.id, "quantity": 2}]},
            headers=ALICE,
        )
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": 'Insufficient stock for product "Widget". Available: 1, Requested: 2',
            "errors": None,
        }

    def test_unknown_product_is_404(self, client):
        response = client.post(
            "/orders",
            json={"products": [{"productId": new_identifier(), "quantity": 1}]},
            headers=ALICE,
        )
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_invalid_input_lists_errors(self, client):
        response = client.post(
            "/orders",
            json={"products": [{"productId": "nope", "quantity": 0}]},
            headers=ALICE,
        )
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert body["errors"] == [
            "products[0].productId: invalid product ID",
            "products[0].quantity: must be a positive integer",
        ]

    def test_oversized_quantity_is_400(self, client, add_product):
        widget = add_product(stock=5)
        response = client.post(
            "/orders",
            json={"products": [{"productId": widget.id, "quantity": 10**30}]},
            headers=ALICE,
        )
        assert response.status_code == 400
        assert response.json()["errors"] == [
            f"products[0].quantity: cannot exceed {MAX_QUANTITY}"
        ]

    def test_empty_products_rejected(self, client):
        response = client.post("/orders", json={"products": []}, headers=ALICE)
        assert response.status_code == 400
        assert response.json()["errors"] == ["products: must contain at least one product"]

    def test_schema_errors_use_the_same_envelope(self, client):
        response = client.post(
            "/orders",
            json={"products": [{"productId": new_identifier(), "quantity": "3"}]},
            headers=ALICE,
        )
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0].startswith("products[0].quantity:")

    def test_missing_identity_is_401(self, client):
        response = client.post("/orders", json={"products": []})
        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized"


class TestReadOrderEndpoints:

    def _place(self, client, add_product) -> str:
        widget = add_product(stock=10)
        response = client.post(
            "/orders",
            json={"products": [{"productId": widget.id, "quantity": 1}]},
            headers=ALICE,
        )
        return response.json()["data"]["id"]

    def test_owner_reads_order(self, client, add_product):
        order_id = self._place(client, add_product)
        response = client.get(f"/orders/{order_id}", headers=ALICE)
        assert response.status_code == 200
        assert response.json()["data"]["id"] == order_id

    def test_foreign_and_missing_orders_look_identical(self, client, add_product):
        order_id = self._place(client, add_product)
        foreign = client.get(f"/orders/{order_id}", headers=BOB)
        missing = client.get(f"/orders/{new_identifier()}", headers=BOB)
        malformed = client.get("/orders/123", headers=BOB)
        assert foreign.status_code == missing.status_code == malformed.status_code == 404
        assert foreign.json() == missing.json() == malformed.json()

    def test_admin_reads_any_order(self, client, add_product):
        order_id = self._place(client, add_product)
        assert client.get(f"/orders/{order_id}", headers=ADMIN).status_code == 200

    def test_list_is_scoped_and_paged(self, client, add_product):
        self._place(client, add_product)
        self._place(client, add_product)
        body = client.get("/orders?page=1&limit=1", headers=ALICE).json()
        assert body["success"] is True
        assert len(body["data"]) == 1
        assert (body["pageNumber"], body["pageSize"]) == (1, 1)
        assert (body["totalPages"], body["totalSize"]) == (2, 2)

        other = client.get("/orders", headers=BOB).json()
        assert other["data"] == []
        assert other["totalPages"] == 1

    def test_lookups_do_not_wait_for_an_open_placement(self, client, store, add_product):
        order_id = self._place(client, add_product)
        widget = add_product(stock=10)
        with store.session() as placement:
            assert placement.products.decrement_stock(widget.id, 3)
            listed = client.get("/orders", headers=ALICE)
            shown = client.get(f"/orders/{order_id}", headers=ALICE)
            product = client.get(f"/products/{widget.id}")
        assert listed.status_code == shown.status_code == product.status_code == 200
        assert product.json()["data"]["stock"] == 10

    def test_bad_paging_is_400(self, client):
        response = client.get("/orders?page=0&limit=500", headers=ALICE)
        assert response.status_code == 400
        assert len(response.json()["errors"]) == 2

    def test_bad_status_filter_is_400(self, client):
        response = client.get("/orders?status=lost", headers=ALICE)
        assert response.status_code == 400


class TestProductEndpoints:

    def test_admin_catalog_lifecycle(self, client):
        created = client.post(
            "/products",
            json={
                "name": "Desk Lamp",
                "description": "A warm and bright desk lamp",
                "price": "24.50",
                "stock": 3,
                "category": "Home",
            },
            headers=ADMIN,
        )
        assert created.status_code == 201
        product_id = created.json()["data"]["id"]

        restocked = client.post(
            f"/products/{product_id}/restock", json={"quantity": 2}, headers=ADMIN
        )
        assert restocked.json()["data"]["stock"] == 5

        updated = client.patch(
            f"/products/{product_id}", json={"price": "19.99"}, headers=ADMIN
        )
        assert updated.json()["data"]["price"] == 19.99

        listed = client.get("/products?category=home").json()["data"]
        assert [p["id"] for p in listed] == [product_id]

        assert client.delete(f"/products/{product_id}", headers=ADMIN).status_code == 200
        assert client.get("/products").json()["data"] == []

    def test_show_product(self, client, add_product):
        widget = add_product(name="Widget", price="15.00", stock=4)
        response = client.get(f"/products/{widget.id}")
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Widget"
        assert response.json()["data"]["price"] == 15.0

        client.delete(f"/products/{widget.id}", headers=ADMIN)
        assert client.get(f"/products/{widget.id}").status_code == 404
        assert client.get(f"/products/{new_identifier()}").status_code == 404

    def test_list_is_paged(self, client, add_product):
        for n in range(3):
            add_product(name=f"Tool {n}")
        body = client.get("/products?page=2&limit=2").json()
        assert body["success"] is True
        assert len(body["data"]) == 1
        assert (body["pageNumber"], body["pageSize"]) == (2, 2)
        assert (body["totalPages"], body["totalSize"]) == (2, 3)
        assert client.get("/products?limit=0").status_code == 400

    def test_sub_cent_price_is_rounded_half_up(self, client):
        created = client.post(
            "/products",
            json={
                "name": "Eraser",
                "description": "A soft pink eraser",
                "price": "2.675",
                "category": "office",
            },
            headers=ADMIN,
        ).json()["data"]
        assert created["price"] == 2.68
        assert client.get(f"/products/{created['id']}").json()["data"]["price"] == 2.68

    def test_oversized_restock_is_400(self, client, add_product):
        widget = add_product(stock=1)
        response = client.post(
            f"/products/{widget.id}/restock", json={"quantity": 10**30}, headers=ADMIN
        )
        assert response.status_code == 400
        assert response.json()["errors"] == [f"quantity: cannot exceed {MAX_QUANTITY}"]

    def test_users_cannot_manage_catalog(self, client):
        response = client.post(
            "/products",
            json={
                "name": "Desk Lamp",
                "description": "A warm and bright desk lamp",
                "price": "24.50",
                "category": "home",
            },
            headers=ALICE,
        )
        assert response.status_code == 403


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
