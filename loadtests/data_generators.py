"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass MuStore's validation rules
(SKU format, CustomerContact email and phone checks, delivery address)
and match the field names expected by the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

INSTRUMENT_KINDS = ["Guitar", "Bass", "Piano", "Synth", "Drum Kit", "Violin", "Ukulele", "Saxophone"]

# ---------- Catalogue ----------


def valid_sku(prefix: str = "LT") -> str:
    """SKU of 3-50 alphanumeric characters and single inner hyphens."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def product_data(sku: str | None = None, stock: int | None = None, price: float | None = None) -> dict:
    """CreateProductRequest payload."""
    sku = sku or valid_sku("MS")
    kind = random.choice(INSTRUMENT_KINDS)
    return {
        "sku": sku,
        "name": f"{fake.last_name()} {kind} {random.randint(100, 999)}"[:255],
        "price": price if price is not None else float(random.randint(50, 2000) * 100),
        "stock_quantity": stock if stock is not None else random.randint(5, 50),
        "description": fake.paragraph(nb_sentences=2),
        "specifications": {"colour": fake.color_name(), "weight_kg": round(random.uniform(0.5, 40.0), 1)},
        "is_featured": random.random() < 0.2,
        "is_new": random.random() < 0.3,
    }


def search_term() -> str:
    return random.choice(INSTRUMENT_KINDS).split()[0].lower()


def listing_params() -> dict:
    """Query parameters for GET /products."""
    params = {
        "sort": random.choice(["price", "name", "created_at"]),
        "order": random.choice(["ASC", "DESC"]),
        "limit": random.choice([10, 20, 50]),
    }
    if random.random() < 0.3:
        params["in_stock"] = "true"
    if random.random() < 0.2:
        params["search"] = search_term()
    return params


# ---------- Shoppers ----------


def customer_id() -> str:
    return f"cust-lt-{uuid.uuid4().hex[:10]}"


def session_id() -> str:
    return f"sess-lt-{uuid.uuid4().hex[:12]}"


def valid_phone() -> str:
    """Phone of digits with an optional leading plus, at most 20 characters."""
    return f"+7{random.randint(900, 999)}{random.randint(1000000, 9999999)}"


def order_data(delivery_method: str | None = None) -> dict:
    """PlaceOrderRequestSchema payload."""
    delivery_method = delivery_method or random.choice(["pickup", "delivery"])
    payload = {
        "customer_name": fake.name()[:255],
        "customer_email": f"{fake.user_name()[:20]}.{uuid.uuid4().hex[:4]}@{fake.free_email_domain()}",
        "customer_phone": valid_phone(),
        "delivery_method": delivery_method,
        "payment_method": random.choice(["cash", "card", "online"]),
    }
    if delivery_method == "delivery":
        payload["delivery_address"] = f"{fake.city()}, {fake.street_address()}"[:500]
    if random.random() < 0.2:
        payload["notes"] = fake.sentence()[:1000]
    return payload
