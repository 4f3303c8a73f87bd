"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer, String

from mustore.domain import mustore


@mustore.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its quantity grew."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@mustore.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@mustore.event(part_of="ShoppingCart")
class CartItemRemoved:
    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)


@mustore.event(part_of="ShoppingCart")
class CartCleared:
    """Every line was removed, either by the shopper or by checkout."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)


@mustore.event(part_of="ShoppingCart")
class CartsMerged:
    """A guest session cart was folded into a customer's cart."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    source_session_id = String(max_length=255)
    items_merged_count = Integer(required=True)
