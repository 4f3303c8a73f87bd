import pytest
from protean.utils.globals import current_domain

from mustore.cart.items import AddToCart
from mustore.cart.management import resolve_cart
from mustore.catalogue.product.management import CreateProduct
from mustore.checkout.workflow import OrderWorkflow, PlaceOrderRequest


@pytest.fixture
def make_product():
    counter = iter(range(1, 1000))

    def _make(price=1000.0, stock=10, **overrides):
        n = next(counter)
        defaults = {"sku": f"SKU-{n:03d}", "name": f"Instrument {n}", "price": price, "stock_quantity": stock}
        defaults.update(overrides)
        return current_domain.process(CreateProduct(**defaults), asynchronous=False)

    return _make


@pytest.fixture
def fill_cart():
    def _fill(lines, customer_id="cust-001", session_id=None):
        cart_id = resolve_cart(customer_id=customer_id, session_id=session_id)
        for product_id, quantity in lines:
            current_domain.process(
                AddToCart(cart_id=cart_id, product_id=product_id, quantity=quantity),
                asynchronous=False,
            )
        return cart_id

    return _fill


@pytest.fixture
def workflow(mustore):
    return OrderWorkflow(mustore)


@pytest.fixture
def checkout(workflow):
    def _checkout(customer_id="cust-001", delivery_method="pickup", **overrides):
        defaults = {
            "customer_id": customer_id,
            "customer_name": "Ivan Petrov",
            "customer_email": "ivan@example.com",
            "customer_phone": "+7 900 123-45-67",
            "delivery_method": delivery_method,
            "delivery_address": "Moscow, Tverskaya 1" if delivery_method == "delivery" else None,
        }
        defaults.update(overrides)
        return workflow.place_order(PlaceOrderRequest(**defaults))

    return _checkout
