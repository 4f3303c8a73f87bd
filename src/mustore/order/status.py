"""Order status management — commands and handler.

Cancelling an order gives its reserved units back to the catalogue.
Delivering it consumes the reservation together with the physical stock.
Both happen in the same unit of work as the status change, with the order
and its products locked first so that concurrent changes apply one by one.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from mustore.catalogue.product.product import Product
from mustore.checkout.errors import StoreFailure
from mustore.domain import mustore
from mustore.order.order import Order, OrderStatus, PaymentStatus
from mustore.utils.locking import lock_rows

logger = structlog.get_logger(__name__)


@mustore.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)


@mustore.command(part_of="Order")
class ChangePaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True, choices=PaymentStatus)


def _settle_stock(order, new_status):
    product_repo = current_domain.repository_for(Product)
    lock_rows(Product, [item.product_id for item in order.items])
    for item in order.items:
        try:
            product = product_repo.get(item.product_id)
        except ObjectNotFoundError:
            raise StoreFailure(f"Product {item.product_id} of order {order.id} is missing")

        if new_status == OrderStatus.CANCELLED:
            product.release(item.quantity, order_id=order.id)
        else:
            product.consume(item.quantity, order_id=order.id)
        product_repo.add(product)


@mustore.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_order_status(self, command):
        repo = current_domain.repository_for(Order)
        # A second concurrent change waits here and then sees the first one's status
        lock_rows(Order, [command.order_id])
        order = repo.get(command.order_id)
        new_status = OrderStatus(command.status)
        previous_status = order.status

        if not order.transition_to(new_status):
            return str(order.id)

        if new_status in (OrderStatus.CANCELLED, OrderStatus.DELIVERED):
            _settle_stock(order, new_status)

        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            previous_status=previous_status,
            new_status=new_status.value,
        )
        return str(order.id)

    @handle(ChangePaymentStatus)
    def change_payment_status(self, command):
        repo = current_domain.repository_for(Order)
        lock_rows(Order, [command.order_id])
        order = repo.get(command.order_id)
        if order.set_payment_status(PaymentStatus(command.payment_status)):
            repo.add(order)
        return str(order.id)
