"""Placements and status changes racing each other from parallel threads.

Against a relational store (``pytest --env sqlite`` or ``--env production``)
these run through the row locks taken inside each unit of work. On the memory
provider commands are applied one at a time in process.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from functools import partial

import pytest
from protean.utils.globals import current_domain

from mustore.catalogue.product.product import Product
from mustore.checkout.errors import InsufficientStock
from mustore.checkout.lifecycle import OrderLifecycleManager
from mustore.checkout.workflow import OrderWorkflow, PlaceOrderRequest
from mustore.order.order import Order

BUYERS = 8


def _request(customer_id):
    return PlaceOrderRequest(
        customer_id=customer_id,
        customer_name="Ivan Petrov",
        customer_email="ivan@example.com",
        customer_phone="+79001234567",
        delivery_method="pickup",
    )


def _in_parallel(calls):
    """Start every call at the same moment and collect the results in order."""
    barrier = threading.Barrier(len(calls))

    def run(call):
        barrier.wait()
        return call()

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        return list(pool.map(run, calls))


def _counters(product_id):
    product = current_domain.repository_for(Product).get(product_id)
    return product.stock_quantity, product.reserved_quantity


def _order_count():
    return len(current_domain.repository_for(Order)._dao.query.all().items)


class TestParallelPlacement:
    @pytest.mark.parametrize("stock", [1, 3])
    def test_buyers_never_exceed_stock(self, mustore, make_product, fill_cart, stock):
        product_id = make_product(stock=stock)
        customers = [f"cust-{n}" for n in range(BUYERS)]
        for customer_id in customers:
            fill_cart([(product_id, 1)], customer_id=customer_id)

        workflow = OrderWorkflow(mustore)
        results = _in_parallel([partial(workflow.place_order, _request(c)) for c in customers])

        assert sum(1 for r in results if r.is_ok) == stock
        rejected = [r.error for r in results if not r.is_ok]
        assert all(isinstance(error, InsufficientStock) for error in rejected)
        assert all(error.available == 0 for error in rejected)
        assert _counters(product_id) == (stock, stock)
        assert _order_count() == stock

    def test_same_cart_checked_out_once(self, mustore, make_product, fill_cart):
        product_id = make_product(stock=10)
        fill_cart([(product_id, 2)])

        workflow = OrderWorkflow(mustore)
        results = _in_parallel([partial(workflow.place_order, _request("cust-001"))] * 4)

        assert sum(1 for r in results if r.is_ok) == 1
        assert _counters(product_id) == (10, 2)
        assert _order_count() == 1


class TestParallelStatusChanges:
    @pytest.fixture
    def two_orders(self, make_product, fill_cart, checkout):
        """Orders for 2 and 3 units of the same product, 10 in stock."""
        product_id = make_product(stock=10)
        fill_cart([(product_id, 2)], customer_id="cust-a")
        first = checkout(customer_id="cust-a").value.id
        fill_cart([(product_id, 3)], customer_id="cust-b")
        assert checkout(customer_id="cust-b").is_ok
        return first, product_id

    def test_cancellations_release_once(self, mustore, two_orders):
        order_id, product_id = two_orders
        manager = OrderLifecycleManager(mustore)

        results = _in_parallel([partial(manager.set_order_status, order_id, "cancelled")] * 4)

        assert all(r.is_ok for r in results)
        assert {r.value.status for r in results} == {"cancelled"}
        assert _counters(product_id) == (10, 3)

    def test_deliveries_consume_once(self, mustore, two_orders):
        order_id, product_id = two_orders
        manager = OrderLifecycleManager(mustore)
        for status in ("processing", "shipped"):
            assert manager.set_order_status(order_id, status).is_ok

        results = _in_parallel([partial(manager.set_order_status, order_id, "delivered")] * 4)

        assert all(r.is_ok for r in results)
        assert _counters(product_id) == (8, 3)
