"""Cart and checkout load test scenarios.

CheckoutJourney walks a shopper from browsing to a placed order.
LastUnitsRaceUser makes many shoppers compete for a product with a handful
of units in stock; placements beyond the stock must fail with
insufficient_stock and never oversell. FulfilmentJourney drives placed
orders through the status lifecycle as an administrator.
"""

import os
import random

from locust import HttpUser, SequentialTaskSet, between, constant_pacing, task

from loadtests.data_generators import customer_id, order_data, product_data, session_id
from loadtests.helpers.response import error_code, extract_error_detail
from loadtests.helpers.state import FulfilmentState, ShopperState

ADMIN_HEADERS = {"X-Admin-Key": os.getenv("ADMIN_KEY", "admin123")}


class CheckoutJourney(SequentialTaskSet):
    """Browse -> Add to Cart (x2) -> Change Quantity -> View Cart -> Place Order."""

    def on_start(self):
        if random.random() < 0.3:
            self.state = ShopperState(session_id=session_id())
        else:
            self.state = ShopperState(customer_id=customer_id())

    @task
    def browse(self):
        with self.client.get(
            "/products",
            params={"in_stock": "true", "limit": 50},
            catch_response=True,
            name="GET /products",
        ) as resp:
            products = resp.json().get("products", []) if resp.status_code == 200 else []
            if not products:
                resp.success()
                self.interrupt()
                return
            picks = random.sample(products, k=min(2, len(products)))
            self.state.product_ids = [p["id"] for p in picks]

    @task
    def add_items(self):
        for product_id in self.state.product_ids:
            with self.client.post(
                "/cart/items",
                json={"product_id": product_id, "quantity": 1},
                headers=self.state.headers,
                catch_response=True,
                name="POST /cart/items",
            ) as resp:
                if resp.status_code == 201:
                    self.state.item_ids.append(resp.json()["item_id"])
                elif resp.status_code == 400:
                    # Sold out between listing and adding
                    resp.success()
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def change_quantity(self):
        if not self.state.item_ids:
            self.interrupt()
            return
        with self.client.put(
            f"/cart/items/{self.state.item_ids[0]}",
            json={"quantity": 2},
            headers=self.state.headers,
            catch_response=True,
            name="PUT /cart/items/{id}",
        ) as resp:
            if resp.status_code == 400:
                resp.success()

    @task
    def view_cart(self):
        self.client.get("/cart", headers=self.state.headers, name="GET /cart")

    @task
    def place_order(self):
        with self.client.post(
            "/orders",
            json=order_data(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["id"]
            elif error_code(resp) in ("insufficient_stock", "product_unavailable", "empty_cart"):
                resp.success()
            else:
                resp.failure(f"Place order failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    tasks = [CheckoutJourney]
    wait_time = between(1, 3)


class LastUnitsRaceUser(HttpUser):
    """Many shoppers racing for a product with very little stock.

    The first user to start creates the contended product; every user then
    repeatedly fills a fresh cart with one unit and tries to check out.
    """

    wait_time = constant_pacing(0.2)
    contended_product_id = None

    def on_start(self):
        if LastUnitsRaceUser.contended_product_id is None:
            resp = self.client.post(
                "/admin/products",
                json=product_data(stock=5),
                headers=ADMIN_HEADERS,
                name="[RACE] POST /admin/products",
            )
            if resp.status_code == 201:
                LastUnitsRaceUser.contended_product_id = resp.json()["product_id"]

    @task
    def grab_last_unit(self):
        product_id = LastUnitsRaceUser.contended_product_id
        if product_id is None:
            return
        headers = {"X-Customer-Id": customer_id()}
        self.client.post(
            "/cart/items",
            json={"product_id": product_id},
            headers=headers,
            name="[RACE] POST /cart/items",
        )
        with self.client.post(
            "/orders",
            json=order_data(delivery_method="pickup"),
            headers=headers,
            catch_response=True,
            name="[RACE] POST /orders",
        ) as resp:
            if resp.status_code == 201 or error_code(resp) in ("insufficient_stock", "empty_cart"):
                resp.success()
            else:
                resp.failure(f"Race checkout failed: {resp.status_code}: {extract_error_detail(resp)}")


class FulfilmentJourney(SequentialTaskSet):
    """Place Order -> Processing -> Shipped -> Delivered (or Cancelled)."""

    def on_start(self):
        self.state = FulfilmentState()
        self.shopper = ShopperState(customer_id=customer_id())

    @task
    def create_stock(self):
        resp = self.client.post(
            "/admin/products",
            json=product_data(stock=10),
            headers=ADMIN_HEADERS,
            name="POST /admin/products",
        )
        if resp.status_code != 201:
            self.interrupt()
            return
        self.state.product_id = resp.json()["product_id"]

    @task
    def place_order(self):
        self.client.post(
            "/cart/items",
            json={"product_id": self.state.product_id, "quantity": random.randint(1, 3)},
            headers=self.shopper.headers,
            name="POST /cart/items",
        )
        with self.client.post(
            "/orders",
            json=order_data(),
            headers=self.shopper.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["id"]
            else:
                resp.failure(f"Place order failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def advance(self):
        steps = ["processing", "shipped", "delivered"]
        if random.random() < 0.2:
            steps = ["processing", "cancelled"]
        for status in steps:
            with self.client.put(
                f"/admin/orders/{self.state.order_id}",
                json={"status": status},
                headers=ADMIN_HEADERS,
                catch_response=True,
                name="PUT /admin/orders/{id}",
            ) as resp:
                if resp.status_code == 200:
                    self.state.current_status = status
                else:
                    resp.failure(f"Set {status} failed: {resp.status_code}: {extract_error_detail(resp)}")
                    break

    @task
    def done(self):
        self.interrupt()


class StoreAdminUser(HttpUser):
    tasks = [FulfilmentJourney]
    wait_time = between(2, 5)
