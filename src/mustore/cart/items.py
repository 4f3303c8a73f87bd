"""Cart item management — commands and handler.

Adding or growing a line checks the product against its current available
quantity. This is advisory only: nothing is reserved until checkout.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from mustore.cart.cart import ShoppingCart
from mustore.catalogue.product.product import Product
from mustore.domain import mustore


@mustore.command(part_of="ShoppingCart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1, min_value=1)


@mustore.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    new_quantity = Integer(required=True, min_value=1)


@mustore.command(part_of="ShoppingCart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


@mustore.command(part_of="ShoppingCart")
class ClearCart:
    cart_id = Identifier(required=True)


def _sellable_product(product_id):
    try:
        product = current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError(f"Product {product_id} does not exist")
    if not product.is_available:
        raise ObjectNotFoundError(f"Product {product_id} does not exist")
    return product


def _check_stock(product, quantity):
    if quantity > product.available_quantity:
        raise ValidationError(
            {"quantity": [f"Only {product.available_quantity} units of {product.name!r} are available"]}
        )


@mustore.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        product = _sellable_product(command.product_id)

        quantity = command.quantity or 1
        existing = cart.item_for(product.id)
        _check_stock(product, quantity + (existing.quantity if existing else 0))

        item_id = cart.add_item(product_id=product.id, quantity=quantity)
        repo.add(cart)
        return item_id

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)

        item = next((i for i in cart.items if str(i.id) == str(command.item_id)), None)
        if item is not None:
            _check_stock(_sellable_product(item.product_id), command.new_quantity)

        cart.update_item_quantity(item_id=command.item_id, new_quantity=command.new_quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.remove_item(item_id=command.item_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.clear()
        repo.add(cart)
