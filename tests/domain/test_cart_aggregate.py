"""Tests for the ShoppingCart aggregate."""

import pytest
from protean.exceptions import ValidationError

from mustore.cart.cart import MAX_LINE_QUANTITY, ShoppingCart
from mustore.cart.events import CartCleared, CartItemAdded, CartsMerged


def _cart(**kwargs):
    kwargs.setdefault("customer_id", "cust-001")
    return ShoppingCart.create(**kwargs)


class TestCartCreation:
    def test_customer_cart(self):
        cart = _cart()
        assert cart.customer_id == "cust-001"
        assert cart.session_id is None
        assert cart.is_empty

    def test_guest_cart(self):
        cart = ShoppingCart.create(session_id="sess-abc")
        assert cart.customer_id is None
        assert cart.session_id == "sess-abc"

    def test_cart_needs_an_owner(self):
        with pytest.raises(ValidationError):
            ShoppingCart.create()


class TestAddItem:
    def test_add_new_product(self):
        cart = _cart()
        cart.add_item("prod-1", 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_repeat_add_accumulates(self):
        cart = _cart()
        cart.add_item("prod-1", 2)
        cart.add_item("prod-1", 3)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_add_raises_event(self):
        cart = _cart()
        cart.add_item("prod-1", 2)
        event = next(e for e in cart._events if isinstance(e, CartItemAdded))
        assert event.new_quantity == 2

    def test_quantity_above_limit_rejected(self):
        cart = _cart()
        with pytest.raises(ValidationError):
            cart.add_item("prod-1", MAX_LINE_QUANTITY + 1)

    def test_accumulated_quantity_above_limit_rejected(self):
        cart = _cart()
        cart.add_item("prod-1", MAX_LINE_QUANTITY)
        with pytest.raises(ValidationError):
            cart.add_item("prod-1", 1)
        assert cart.items[0].quantity == MAX_LINE_QUANTITY


class TestUpdateAndRemove:
    def test_update_quantity(self):
        cart = _cart()
        item_id = cart.add_item("prod-1", 1)
        cart.update_item_quantity(item_id, 4)
        assert cart.items[0].quantity == 4

    def test_update_unknown_item(self):
        with pytest.raises(ValidationError):
            _cart().update_item_quantity("missing", 1)

    def test_remove_item(self):
        cart = _cart()
        item_id = cart.add_item("prod-1", 1)
        cart.remove_item(item_id)
        assert cart.is_empty

    def test_clear(self):
        cart = _cart()
        cart.add_item("prod-1", 1)
        cart.add_item("prod-2", 2)
        cart.clear()
        assert cart.is_empty
        event = next(e for e in cart._events if isinstance(e, CartCleared))
        assert event.items_removed == 2

    def test_clear_empty_cart_is_noop(self):
        cart = _cart()
        cart.clear()
        assert not any(isinstance(e, CartCleared) for e in cart._events)


class TestMerge:
    def test_merge_adds_and_accumulates(self):
        cart = _cart()
        cart.add_item("prod-1", 1)
        cart.merge_items([("prod-1", 2), ("prod-2", 1)], source_session_id="sess-abc")
        quantities = {str(i.product_id): i.quantity for i in cart.items}
        assert quantities == {"prod-1": 3, "prod-2": 1}
        assert any(isinstance(e, CartsMerged) for e in cart._events)

    def test_merge_caps_line_quantity(self):
        cart = _cart()
        cart.add_item("prod-1", 90)
        cart.merge_items([("prod-1", 20)])
        assert cart.items[0].quantity == MAX_LINE_QUANTITY
