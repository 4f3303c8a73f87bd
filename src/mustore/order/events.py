"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from mustore.domain import mustore


@mustore.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out: stock is reserved and the order awaits processing."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier()
    items = Text(required=True)  # JSON: list of item snapshots
    subtotal = Float(required=True)
    delivery_fee = Float(required=True)
    total = Float(required=True)
    delivery_method = String(required=True)
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@mustore.event(part_of="Order")
class OrderStatusChanged:
    """An administrator moved the order along its lifecycle."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@mustore.event(part_of="Order")
class PaymentStatusChanged:
    __version__ = "v1"

    order_id = Identifier(required=True)
    previous_payment_status = String(required=True)
    new_payment_status = String(required=True)
    changed_at = DateTime(required=True)
