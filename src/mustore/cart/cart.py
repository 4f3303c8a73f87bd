"""Shopping Cart aggregate holding items a customer or guest session intends to buy.

A cart belongs either to a registered customer (``customer_id``) or to an
anonymous browser session (``session_id``). A product appears at most once per
cart: adding it again grows the existing line. Checkout empties the cart but
the cart itself survives for the next purchase.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from mustore.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartsMerged,
)
from mustore.domain import mustore

MAX_LINE_QUANTITY = 99


@mustore.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1, max_value=MAX_LINE_QUANTITY)
    added_at = DateTime()


@mustore.aggregate
class ShoppingCart:
    customer_id = Identifier()  # Empty for guest carts
    session_id = String(max_length=255)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_have_an_owner(self):
        if not self.customer_id and not self.session_id:
            raise ValidationError({"cart": ["Cart must belong to a customer or a guest session"]})

    @invariant.post
    def products_must_be_unique_per_cart(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in a cart"]})

    @classmethod
    def create(cls, customer_id=None, session_id=None):
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            session_id=None if customer_id else session_id,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_empty(self) -> bool:
        return not self.items

    def item_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def _find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        return item

    @staticmethod
    def _check_quantity(quantity):
        if not 1 <= quantity <= MAX_LINE_QUANTITY:
            raise ValidationError({"quantity": [f"Quantity must be between 1 and {MAX_LINE_QUANTITY}"]})

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity):
        """Add a product, or grow its line when it is already in the cart."""
        self._check_quantity(quantity)

        existing = self.item_for(product_id)
        now = datetime.now(UTC)

        if existing:
            self._check_quantity(existing.quantity + quantity)
            existing.quantity += quantity
            item_id, new_quantity = str(existing.id), existing.quantity
        else:
            item = CartItem(product_id=product_id, quantity=quantity, added_at=now)
            self.add_items(item)
            item_id, new_quantity = str(item.id), quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=item_id,
                product_id=str(product_id),
                quantity=quantity,
                new_quantity=new_quantity,
            )
        )
        return item_id

    def update_item_quantity(self, item_id, new_quantity):
        self._check_quantity(new_quantity)
        item = self._find_item(item_id)

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, item_id):
        item = self._find_item(item_id)
        product_id = str(item.product_id)

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id), product_id=product_id))

    def clear(self):
        """Drop every line. Clearing an empty cart is a no-op."""
        if self.is_empty:
            return

        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), items_removed=removed))

    # -------------------------------------------------------------------
    # Cart merging (guest → customer)
    # -------------------------------------------------------------------
    def merge_items(self, guest_items, source_session_id=None):
        """Fold ``(product_id, quantity)`` pairs from a guest cart into this cart.

        Quantities of products already present are added up and capped at the
        per-line maximum.
        """
        now = datetime.now(UTC)
        merged = 0

        increments, additions = [], []
        for product_id, quantity in guest_items:
            if self.item_for(product_id):
                increments.append((product_id, quantity))
            else:
                additions.append(
                    CartItem(
                        product_id=product_id,
                        quantity=min(quantity, MAX_LINE_QUANTITY),
                        added_at=now,
                    )
                )
            merged += 1

        # Adding children reloads the loaded lines, so in-place changes must come after
        if additions:
            self.add_items(additions)
        for product_id, quantity in increments:
            line = self.item_for(product_id)
            line.quantity = min(line.quantity + quantity, MAX_LINE_QUANTITY)

        self.updated_at = now

        self.raise_(
            CartsMerged(
                cart_id=str(self.id),
                source_session_id=source_session_id,
                items_merged_count=merged,
            )
        )
