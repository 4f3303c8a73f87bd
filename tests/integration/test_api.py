"""Integration tests for the MuStore HTTP API via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain
from protean.integrations.fastapi import register_exception_handlers

from mustore.api import admin_router, cart_router, catalogue_router, favorites_router, order_router
from mustore.catalogue.category.category import CreateCategory
from mustore.catalogue.product.product import Product

ADMIN = {"X-Admin-Key": "test-admin-key"}
CUSTOMER = {"X-Customer-Id": "cust-api-001"}


@pytest.fixture(autouse=True)
def _admin_key(monkeypatch):
    monkeypatch.setenv("ADMIN_KEY", "test-admin-key")


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    for router in (catalogue_router, cart_router, favorites_router, order_router, admin_router):
        app.include_router(router)
    return TestClient(app)


def _create_product(client, sku="YAM-F310", name="Yamaha F310", price=15990, stock=10, **extra):
    response = client.post(
        "/admin/products",
        json={"sku": sku, "name": name, "price": price, "stock_quantity": stock, **extra},
        headers=ADMIN,
    )
    assert response.status_code == 201
    return response.json()["product_id"]


def _order_payload(**overrides):
    payload = {
        "customer_name": "Ivan Petrov",
        "customer_email": "ivan@example.com",
        "customer_phone": "+79001234567",
        "delivery_method": "pickup",
    }
    payload.update(overrides)
    return payload


def _place_order(client, headers=CUSTOMER, **overrides):
    return client.post("/orders", json=_order_payload(**overrides), headers=headers)


class TestCatalogueEndpoints:
    def test_list_products(self, client):
        _create_product(client, specifications={"strings": 6})
        _create_product(client, sku="FEN-STRAT", name="Fender Stratocaster", price=89990)

        response = client.get("/products", params={"sort": "price", "order": "ASC"})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [p["sku"] for p in data["products"]] == ["YAM-F310", "FEN-STRAT"]
        assert data["products"][0]["specifications"] == {"strings": 6}

    def test_invalid_sort_rejected(self, client):
        assert client.get("/products", params={"sort": "colour"}).status_code == 400

    def test_product_by_slug(self, client):
        product_id = _create_product(client)
        response = client.get("/products/yamaha-f310-yam-f310")
        assert response.status_code == 200
        assert response.json()["id"] == product_id
        assert response.json()["available_quantity"] == 10

    def test_unknown_product(self, client):
        assert client.get("/products/no-such-thing").status_code == 404

    def test_category_by_slug(self, client):
        guitars = current_domain.process(CreateCategory(name="Guitars", slug="guitars"), asynchronous=False)
        current_domain.process(CreateCategory(name="Bass", slug="bass", parent_id=guitars), asynchronous=False)

        response = client.get("/categories/guitars")

        assert response.status_code == 200
        assert response.json()["id"] == guitars
        assert [c["slug"] for c in response.json()["subcategories"]] == ["bass"]

    def test_unknown_category(self, client):
        assert client.get("/categories/harps").status_code == 404


class TestCartEndpoints:
    def test_requires_caller_identity(self, client):
        assert client.get("/cart").status_code == 400

    def test_add_and_view(self, client):
        product_id = _create_product(client, price=1000)

        response = client.post("/cart/items", json={"product_id": product_id, "quantity": 2}, headers=CUSTOMER)
        assert response.status_code == 201

        cart = client.get("/cart", headers=CUSTOMER).json()
        assert cart["items"][0]["quantity"] == 2
        assert cart["summary"]["subtotal"] == 2000.0

    def test_add_more_than_stock(self, client):
        product_id = _create_product(client, stock=1)
        response = client.post("/cart/items", json={"product_id": product_id, "quantity": 2}, headers=CUSTOMER)
        assert response.status_code == 400

    def test_guest_cart_merged_on_sign_in(self, client):
        product_id = _create_product(client)
        guest = {"X-Session-Id": "sess-api-1"}
        client.post("/cart/items", json={"product_id": product_id}, headers=guest)

        cart = client.get("/cart", headers={**CUSTOMER, **guest}).json()

        assert [line["product_id"] for line in cart["items"]] == [product_id]
        assert client.get("/cart", headers=guest).json()["items"] == []


class TestOrderEndpoints:
    def test_place_order(self, client):
        product_id = _create_product(client, price=1000)
        client.post("/cart/items", json={"product_id": product_id, "quantity": 3}, headers=CUSTOMER)

        response = _place_order(client, delivery_method="delivery", delivery_address="Moscow, Tverskaya 1")

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["total"] == 3300.0
        assert current_domain.repository_for(Product).get(product_id).reserved_quantity == 3

    def test_empty_cart(self, client):
        response = _place_order(client)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "empty_cart"

    def test_insufficient_stock(self, client):
        product_id = _create_product(client, stock=1)
        other = {"X-Customer-Id": "cust-api-002"}
        client.post("/cart/items", json={"product_id": product_id}, headers=CUSTOMER)
        client.post("/cart/items", json={"product_id": product_id}, headers=other)

        assert _place_order(client).status_code == 201
        response = _place_order(client, headers=other)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "insufficient_stock"

    def test_malformed_body(self, client):
        response = client.post("/orders", json=_order_payload(delivery_method="teleport"), headers=CUSTOMER)
        assert response.status_code == 422

    def test_order_history(self, client):
        product_id = _create_product(client)
        client.post("/cart/items", json={"product_id": product_id}, headers=CUSTOMER)
        order_id = _place_order(client).json()["id"]

        history = client.get("/orders", headers=CUSTOMER).json()
        assert [o["id"] for o in history["orders"]] == [order_id]

        assert client.get(f"/orders/{order_id}", headers=CUSTOMER).status_code == 200
        assert client.get(f"/orders/{order_id}", headers={"X-Customer-Id": "someone-else"}).status_code == 404

    def test_history_requires_customer(self, client):
        assert client.get("/orders", headers={"X-Session-Id": "sess"}).status_code == 401


class TestFavoritesEndpoints:
    def test_add_list_remove(self, client):
        product_id = _create_product(client)

        assert client.post("/favorites", json={"product_id": product_id}, headers=CUSTOMER).status_code == 201
        assert client.post("/favorites", json={"product_id": product_id}, headers=CUSTOMER).status_code == 400

        favorites = client.get("/favorites", headers=CUSTOMER).json()
        assert [f["product"]["id"] for f in favorites] == [product_id]

        assert client.delete(f"/favorites/{product_id}", headers=CUSTOMER).status_code == 200
        assert client.delete(f"/favorites/{product_id}", headers=CUSTOMER).status_code == 404


class TestAdminEndpoints:
    def test_wrong_key(self, client):
        assert client.get("/admin/stats", headers={"X-Admin-Key": "guess"}).status_code == 401

    def test_stats(self, client):
        _create_product(client)
        response = client.get("/admin/stats", headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["available_products"] == 1

    def test_restock(self, client):
        product_id = _create_product(client, stock=2)
        response = client.post(f"/admin/products/{product_id}/restock", json={"quantity": 3}, headers=ADMIN)
        assert response.json()["stock_quantity"] == 5

    def test_order_status_flow(self, client):
        product_id = _create_product(client, stock=5)
        client.post("/cart/items", json={"product_id": product_id, "quantity": 2}, headers=CUSTOMER)
        order_id = _place_order(client).json()["id"]

        skipped = client.put(f"/admin/orders/{order_id}", json={"status": "delivered"}, headers=ADMIN)
        assert skipped.status_code == 409
        assert skipped.json()["error"]["code"] == "invalid_transition"

        cancelled = client.put(f"/admin/orders/{order_id}", json={"status": "cancelled"}, headers=ADMIN)
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"
        assert current_domain.repository_for(Product).get(product_id).reserved_quantity == 0

    def test_unknown_order(self, client):
        response = client.put("/admin/orders/missing", json={"status": "processing"}, headers=ADMIN)
        assert response.status_code == 404
