"""Order placement turns a cart into a pending order with reserved stock.

The handler runs inside a single unit of work. The cart and its products are
locked, then every product is re-read and checked before any reservation is
taken. The reservations, the order and the emptied cart are committed
together, and any exception discards all of it.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from mustore.cart.cart import ShoppingCart
from mustore.catalogue.brand.brand import Brand
from mustore.catalogue.product.product import Product
from mustore.checkout.errors import EmptyCart, ProductUnavailable
from mustore.checkout.pricing import DeliveryMethod, calculate_pricing, line_subtotal
from mustore.domain import mustore
from mustore.order.numbering import next_order_number
from mustore.order.order import CustomerContact, Order, OrderItem, PaymentMethod
from mustore.utils.locking import lock_rows

logger = structlog.get_logger(__name__)


@mustore.command(part_of="Order")
class PlaceOrder:
    cart_id = Identifier(required=True)
    customer_id = Identifier()
    customer_name = String(required=True, min_length=2, max_length=255)
    customer_email = String(required=True, max_length=254)
    customer_phone = String(required=True, max_length=20)
    delivery_method = String(choices=DeliveryMethod, required=True)
    delivery_address = String(max_length=500)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH.value)
    notes = Text()


def _brand_name(brand_id):
    if not brand_id:
        return None
    try:
        return current_domain.repository_for(Brand).get(brand_id).name
    except ObjectNotFoundError:
        return None


@mustore.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(ShoppingCart)
        product_repo = current_domain.repository_for(Product)

        lock_rows(ShoppingCart, [command.cart_id])
        cart = cart_repo.get(command.cart_id)
        if cart.is_empty:
            raise EmptyCart(str(cart.id))

        # Counters read after the lock cannot change until this unit of work ends
        lock_rows(Product, [item.product_id for item in cart.items])
        lines = []
        for item in cart.items:
            try:
                product = product_repo.get(item.product_id)
            except ObjectNotFoundError:
                raise ProductUnavailable(str(item.product_id))
            product.ensure_can_reserve(item.quantity)
            lines.append((item, product))

        pricing = calculate_pricing(
            [(product.price, item.quantity) for item, product in lines],
            command.delivery_method,
        )

        order = Order.place(
            order_number=next_order_number(),
            customer_id=command.customer_id,
            contact=CustomerContact(
                name=command.customer_name,
                email=command.customer_email,
                phone=command.customer_phone,
            ),
            items=[
                OrderItem(
                    product_id=product.id,
                    product_name=product.name,
                    product_sku=product.sku,
                    product_brand=_brand_name(product.brand_id),
                    unit_price=product.price,
                    quantity=item.quantity,
                    subtotal=line_subtotal(product.price, item.quantity),
                )
                for item, product in lines
            ],
            pricing=pricing,
            delivery_method=command.delivery_method,
            delivery_address=command.delivery_address,
            payment_method=command.payment_method or PaymentMethod.CASH.value,
            notes=command.notes,
        )

        for item, product in lines:
            product.reserve(item.quantity, order_id=order.id)
            product_repo.add(product)

        current_domain.repository_for(Order).add(order)

        cart.clear()
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            items=len(lines),
            total=order.total,
        )
        return str(order.id)
