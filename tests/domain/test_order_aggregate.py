"""Tests for the Order aggregate and its state machine."""

import pytest
from protean.exceptions import ValidationError

from mustore.checkout.errors import InvalidTransition
from mustore.checkout.pricing import Pricing
from mustore.order.events import OrderPlaced, OrderStatusChanged, PaymentStatusChanged
from mustore.order.numbering import format_order_number
from mustore.order.order import CustomerContact, Order, OrderItem, OrderStatus, PaymentStatus


def _contact(**overrides):
    defaults = {"name": "Ivan Petrov", "email": "ivan@example.com", "phone": "+7 900 123-45-67"}
    defaults.update(overrides)
    return CustomerContact(**defaults)


def _items():
    return [
        OrderItem(
            product_id="prod-1",
            product_name="Yamaha F310",
            product_sku="YAM-F310",
            product_brand="Yamaha",
            unit_price=1000.0,
            quantity=3,
            subtotal=3000.0,
        )
    ]


def _order(delivery_method="pickup", pricing=None, **overrides):
    kwargs = {
        "order_number": "MS-260101-ABC123",
        "contact": _contact(),
        "items": _items(),
        "pricing": pricing or Pricing(subtotal=3000.0, delivery_fee=0.0, total=3000.0),
        "delivery_method": delivery_method,
        "payment_method": "cash",
        "customer_id": "cust-001",
    }
    kwargs.update(overrides)
    return Order.place(**kwargs)


class TestPlace:
    def test_new_order_is_pending(self):
        order = _order()
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.total == 3000.0
        assert len(order.items) == 1

    def test_place_raises_event(self):
        order = _order()
        event = next(e for e in order._events if isinstance(e, OrderPlaced))
        assert event.order_number == "MS-260101-ABC123"
        assert event.total == 3000.0

    def test_order_needs_items(self):
        with pytest.raises(ValidationError) as exc_info:
            _order(items=[])
        assert "items" in exc_info.value.messages

    def test_total_must_equal_subtotal_plus_fee(self):
        with pytest.raises(ValidationError):
            _order(pricing=Pricing(subtotal=3000.0, delivery_fee=0.0, total=3300.0))

    def test_subtotal_must_match_items(self):
        with pytest.raises(ValidationError):
            _order(pricing=Pricing(subtotal=2000.0, delivery_fee=0.0, total=2000.0))

    def test_delivery_needs_address(self):
        with pytest.raises(ValidationError):
            _order(
                delivery_method="delivery",
                pricing=Pricing(subtotal=3000.0, delivery_fee=300.0, total=3300.0),
            )

    def test_pickup_drops_address(self):
        order = _order(delivery_address="Moscow")
        assert order.delivery_address is None


class TestCustomerContact:
    @pytest.mark.parametrize("email", ["userexample.com", "user@@example.com", "user@example", "a b@example.com"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError):
            _contact(email=email)

    @pytest.mark.parametrize("phone", ["call me", "+", "12ab34"])
    def test_invalid_phone(self, phone):
        with pytest.raises(ValidationError):
            _contact(phone=phone)

    def test_short_name(self):
        with pytest.raises(ValidationError):
            _contact(name="I")


class TestTransitions:
    @pytest.mark.parametrize(
        "path",
        [
            ["processing", "shipped", "delivered"],
            ["cancelled"],
            ["processing", "cancelled"],
            ["processing", "shipped", "cancelled"],
        ],
    )
    def test_allowed_paths(self, path):
        order = _order()
        for status in path:
            assert order.transition_to(OrderStatus(status)) is True
        assert order.status == path[-1]

    @pytest.mark.parametrize(
        "path, rejected",
        [
            ([], "shipped"),
            ([], "delivered"),
            (["processing"], "pending"),
            (["cancelled"], "processing"),
            (["processing", "shipped", "delivered"], "cancelled"),
        ],
    )
    def test_rejected_transitions(self, path, rejected):
        order = _order()
        for status in path:
            order.transition_to(OrderStatus(status))
        with pytest.raises(InvalidTransition) as exc_info:
            order.transition_to(OrderStatus(rejected))
        assert exc_info.value.requested == rejected

    def test_same_status_is_noop(self):
        order = _order()
        order.transition_to(OrderStatus.CANCELLED)
        events_before = len(order._events)
        assert order.transition_to(OrderStatus.CANCELLED) is False
        assert len(order._events) == events_before

    def test_transition_raises_event(self):
        order = _order()
        order.transition_to(OrderStatus.PROCESSING)
        event = next(e for e in order._events if isinstance(e, OrderStatusChanged))
        assert event.previous_status == "pending"
        assert event.new_status == "processing"


class TestPaymentStatus:
    def test_set_payment_status(self):
        order = _order()
        assert order.set_payment_status(PaymentStatus.PAID) is True
        assert order.payment_status == "paid"
        assert any(isinstance(e, PaymentStatusChanged) for e in order._events)

    def test_same_payment_status_is_noop(self):
        assert _order().set_payment_status(PaymentStatus.PENDING) is False

    def test_payment_status_allowed_on_terminal_order(self):
        order = _order()
        order.transition_to(OrderStatus.CANCELLED)
        order.set_payment_status(PaymentStatus.FAILED)
        assert order.payment_status == "failed"


def test_order_number_format():
    from datetime import datetime

    assert format_order_number(datetime(2026, 3, 9), "a1b2c3") == "MS-260309-A1B2C3"
