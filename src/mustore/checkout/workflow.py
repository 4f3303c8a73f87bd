"""Order Workflow: places an order from a cart without ever overselling stock.

    workflow = OrderWorkflow(mustore)
    result = workflow.place_order(PlaceOrderRequest(...))
    if result.is_ok:
        summary = result.value

Input is validated before the store is touched. An empty or unknown cart is
rejected before a unit of work opens. The reservation, the order and the
emptied cart are then committed in one unit of work by ``PlaceOrder``.
"""

from dataclasses import dataclass
from datetime import datetime

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from mustore.cart.cart import ShoppingCart
from mustore.cart.management import find_cart
from mustore.checkout.errors import EmptyCart, NotFound
from mustore.checkout.pricing import DeliveryMethod
from mustore.checkout.result import Err, Result
from mustore.checkout.service import DomainService
from mustore.order.order import CustomerContact, Order, PaymentMethod
from mustore.order.placement import PlaceOrder

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PlaceOrderRequest:
    customer_name: str
    customer_email: str
    customer_phone: str
    delivery_method: str
    payment_method: str = PaymentMethod.CASH.value
    delivery_address: str | None = None
    notes: str | None = None
    customer_id: str | None = None
    session_id: str | None = None
    cart_id: str | None = None


@dataclass(frozen=True)
class OrderSummary:
    id: str
    order_number: str
    status: str
    total: float
    created_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderSummary":
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            status=order.status,
            total=order.total,
            created_at=order.created_at,
        )


def validate_request(request: PlaceOrderRequest) -> dict:
    """Check the request and return the order fields. Raises ``ValidationError``."""
    errors = {}
    if request.delivery_method not in {m.value for m in DeliveryMethod}:
        errors["delivery_method"] = ["Delivery method must be pickup or delivery"]
    elif request.delivery_method == DeliveryMethod.DELIVERY.value and not (request.delivery_address or "").strip():
        errors["delivery_address"] = ["Delivery address is required for delivery"]
    if request.payment_method not in {m.value for m in PaymentMethod}:
        errors["payment_method"] = ["Payment method must be cash, card or online"]
    if request.notes and len(request.notes) > 1000:
        errors["notes"] = ["Notes must be at most 1000 characters"]
    if not request.cart_id and not request.customer_id and not request.session_id:
        errors["cart"] = ["Customer id or session id is required"]

    try:
        CustomerContact(
            name=(request.customer_name or "").strip(),
            email=(request.customer_email or "").strip(),
            phone=(request.customer_phone or "").strip(),
        )
    except ValidationError as exc:
        errors.update(exc.messages)

    if errors:
        raise ValidationError(errors)

    return {
        "customer_id": request.customer_id,
        "customer_name": request.customer_name.strip(),
        "customer_email": request.customer_email.strip(),
        "customer_phone": request.customer_phone.strip(),
        "delivery_method": request.delivery_method,
        "delivery_address": (request.delivery_address or "").strip() or None,
        "payment_method": request.payment_method,
        "notes": request.notes,
    }


class OrderWorkflow(DomainService):
    def place_order(self, request: PlaceOrderRequest) -> Result:
        with self.domain.domain_context():
            try:
                fields = validate_request(request)
            except ValidationError as exc:
                return Err(exc)

            if request.cart_id:
                try:
                    cart = self.domain.repository_for(ShoppingCart).get(request.cart_id)
                except ObjectNotFoundError:
                    return Err(NotFound("Cart", request.cart_id))
            else:
                cart = find_cart(customer_id=request.customer_id, session_id=request.session_id)

            if cart is None or cart.is_empty:
                logger.info("Checkout rejected: empty cart", customer_id=request.customer_id)
                return Err(EmptyCart(str(cart.id) if cart else ""))

            try:
                command = PlaceOrder(cart_id=str(cart.id), **fields)
            except ValidationError as exc:
                return Err(exc)

            return self._dispatch(
                command,
                not_found=("Cart", str(cart.id)),
                present=lambda order_id: OrderSummary.from_order(self.domain.repository_for(Order).get(order_id)),
            )
