"""Order history for customers."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from mustore.order.order import Order, OrderStatus


@dataclass
class OrderPage:
    orders: list
    total: int
    limit: int
    offset: int


def orders_for_customer(customer_id, status=None, limit=20, offset=0) -> OrderPage:
    if status is not None and status not in {s.value for s in OrderStatus}:
        raise ValidationError({"status": [f"Unknown order status {status!r}"]})
    if not 1 <= limit <= 100:
        raise ValidationError({"limit": ["Limit must be between 1 and 100"]})
    if offset < 0:
        raise ValidationError({"offset": ["Offset must not be negative"]})

    filters = {"customer_id": customer_id}
    if status:
        filters["status"] = status

    orders = current_domain.repository_for(Order)._dao.query.filter(**filters).all().items
    orders = sorted(orders, key=lambda o: o.created_at, reverse=True)

    repo = current_domain.repository_for(Order)
    page = [repo.get(o.id) for o in orders[offset : offset + limit]]
    return OrderPage(orders=page, total=len(orders), limit=limit, offset=offset)


def order_for_customer(customer_id, order_id) -> Order:
    """A single order, visible only to the customer who placed it."""
    order = current_domain.repository_for(Order).get(order_id)
    if str(order.customer_id or "") != str(customer_id):
        raise ObjectNotFoundError(f"Order {order_id} does not exist")
    return order
