"""Cart resolution and guest cart merging.

Handles finding (or lazily opening) the cart that belongs to a customer or a
guest session, and folding a guest cart into a customer's cart after sign-in.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from mustore.cart.cart import ShoppingCart
from mustore.domain import mustore


@mustore.command(part_of="ShoppingCart")
class OpenCart:
    """Return the owner's cart, creating it on first use."""

    customer_id = Identifier()
    session_id = String(max_length=255)


@mustore.command(part_of="ShoppingCart")
class MergeGuestCart:
    customer_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)


def find_cart(customer_id=None, session_id=None):
    """The existing cart for a customer or guest session, or None."""
    dao = current_domain.repository_for(ShoppingCart)._dao
    if customer_id:
        results = dao.query.filter(customer_id=customer_id).all().items
    elif session_id:
        results = dao.query.filter(session_id=session_id).all().items
    else:
        raise ValidationError({"cart": ["Customer id or session id is required"]})

    if not results:
        return None
    # Reload through the repository so that items are attached
    return current_domain.repository_for(ShoppingCart).get(results[0].id)


@mustore.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        cart = find_cart(customer_id=command.customer_id, session_id=command.session_id)
        if cart is None:
            cart = ShoppingCart.create(customer_id=command.customer_id, session_id=command.session_id)
            current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)

        guest_cart = find_cart(session_id=command.session_id)
        if guest_cart is None or guest_cart.is_empty:
            return None

        cart = find_cart(customer_id=command.customer_id)
        if cart is None:
            cart = ShoppingCart.create(customer_id=command.customer_id)

        cart.merge_items(
            [(item.product_id, item.quantity) for item in guest_cart.items],
            source_session_id=command.session_id,
        )
        guest_cart.clear()

        repo.add(cart)
        repo.add(guest_cart)
        return str(cart.id)


def resolve_cart(customer_id=None, session_id=None) -> str:
    """Id of the cart for a customer or guest session, opening one if needed."""
    if not customer_id and not session_id:
        raise ValidationError({"cart": ["Customer id or session id is required"]})
    return current_domain.process(OpenCart(customer_id=customer_id, session_id=session_id), asynchronous=False)
