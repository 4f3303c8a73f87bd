"""Catalogue browsing load test scenarios.

Read-heavy traffic: listing with filters and sorting, product detail pages
and similar-product lookups. An administrator user keeps the catalogue
populated so browsers always have something to look at.
"""

import os
import random

from locust import HttpUser, between, task

from loadtests.data_generators import listing_params, product_data
from loadtests.helpers.response import extract_error_detail

ADMIN_HEADERS = {"X-Admin-Key": os.getenv("ADMIN_KEY", "admin123")}


class CatalogueAdminUser(HttpUser):
    """Adds and restocks products. Weighted low next to browsers."""

    weight = 1
    wait_time = between(2, 5)

    def on_start(self):
        self.product_ids = []

    @task(3)
    def create_product(self):
        with self.client.post(
            "/admin/products",
            json=product_data(),
            headers=ADMIN_HEADERS,
            catch_response=True,
            name="POST /admin/products",
        ) as resp:
            if resp.status_code == 201:
                self.product_ids.append(resp.json()["product_id"])
            else:
                resp.failure(f"Create product failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task(1)
    def restock(self):
        if not self.product_ids:
            return
        product_id = random.choice(self.product_ids)
        with self.client.post(
            f"/admin/products/{product_id}/restock",
            json={"quantity": random.randint(1, 20)},
            headers=ADMIN_HEADERS,
            catch_response=True,
            name="POST /admin/products/{id}/restock",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Restock failed: {resp.status_code}: {extract_error_detail(resp)}")


class BrowsingUser(HttpUser):
    """Anonymous visitor paging through the catalogue."""

    weight = 5
    wait_time = between(0.5, 2)

    def on_start(self):
        self.seen = []

    @task(5)
    def list_products(self):
        with self.client.get(
            "/products",
            params=listing_params(),
            catch_response=True,
            name="GET /products",
        ) as resp:
            if resp.status_code == 200:
                self.seen = [p["id"] for p in resp.json()["products"]]
            else:
                resp.failure(f"List products failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task(3)
    def product_detail(self):
        if not self.seen:
            return
        self.client.get(f"/products/{random.choice(self.seen)}", name="GET /products/{id}")

    @task(1)
    def similar(self):
        if not self.seen:
            return
        self.client.get(f"/products/{random.choice(self.seen)}/similar", name="GET /products/{id}/similar")

    @task(1)
    def categories_and_brands(self):
        self.client.get("/categories", name="GET /categories")
        self.client.get("/brands", name="GET /brands")
