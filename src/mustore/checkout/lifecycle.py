"""Order Lifecycle Manager: administrative status changes with stock settlement."""

from dataclasses import dataclass
from datetime import datetime

import structlog
from protean.exceptions import ValidationError

from mustore.checkout.result import Err, Result
from mustore.checkout.service import DomainService
from mustore.order.order import Order, OrderStatus, PaymentStatus
from mustore.order.status import ChangeOrderStatus, ChangePaymentStatus

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderLine:
    product_id: str
    product_name: str
    product_sku: str
    product_brand: str | None
    unit_price: float
    quantity: int
    subtotal: float


@dataclass(frozen=True)
class OrderDetails:
    id: str
    order_number: str
    customer_id: str | None
    status: str
    payment_status: str
    subtotal: float
    delivery_fee: float
    total: float
    delivery_method: str
    delivery_address: str | None
    payment_method: str
    customer_name: str
    customer_email: str
    customer_phone: str
    notes: str | None
    items: tuple[OrderLine, ...]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderDetails":
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id) if order.customer_id else None,
            status=order.status,
            payment_status=order.payment_status,
            subtotal=order.subtotal,
            delivery_fee=order.delivery_fee,
            total=order.total,
            delivery_method=order.delivery_method,
            delivery_address=order.delivery_address,
            payment_method=order.payment_method,
            customer_name=order.contact.name,
            customer_email=order.contact.email,
            customer_phone=order.contact.phone,
            notes=order.notes,
            items=tuple(
                OrderLine(
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    product_sku=item.product_sku,
                    product_brand=item.product_brand,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                    subtotal=item.subtotal,
                )
                for item in order.items
            ),
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


def _coerce(enum_cls, value, field_name):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError({field_name: [f"Must be one of: {allowed}"]})


class OrderLifecycleManager(DomainService):
    """Moves orders through their lifecycle on behalf of store staff.

    Cancellation returns reserved units to sale; delivery removes them from
    stock. Asking for the status an order already has changes nothing.
    """

    def set_order_status(self, order_id: str, new_status) -> Result:
        with self.domain.domain_context():
            try:
                status = _coerce(OrderStatus, new_status, "status")
            except ValidationError as exc:
                return Err(exc)
            return self._change_status(order_id, status)

    def set_payment_status(self, order_id: str, payment_status) -> Result:
        with self.domain.domain_context():
            try:
                status = _coerce(PaymentStatus, payment_status, "payment_status")
            except ValidationError as exc:
                return Err(exc)
            return self._change_payment_status(order_id, status)

    def update_order(self, order_id: str, status=None, payment_status=None) -> Result:
        """Apply an order status and/or payment status change.

        The order status is applied first; when it is rejected the payment
        status is left untouched.
        """
        with self.domain.domain_context():
            if status is None and payment_status is None:
                return Err(ValidationError({"status": ["Provide status or payment_status"]}))
            try:
                new_status = _coerce(OrderStatus, status, "status") if status is not None else None
                new_payment = (
                    _coerce(PaymentStatus, payment_status, "payment_status") if payment_status is not None else None
                )
            except ValidationError as exc:
                return Err(exc)

            result = None
            if new_status is not None:
                result = self._change_status(order_id, new_status)
                if not result.is_ok:
                    return result
            if new_payment is not None:
                result = self._change_payment_status(order_id, new_payment)
            return result

    def _change_status(self, order_id, status: OrderStatus) -> Result:
        return self._dispatch(
            ChangeOrderStatus(order_id=order_id, status=status.value),
            not_found=("Order", order_id),
            present=self._details,
        )

    def _change_payment_status(self, order_id, payment_status: PaymentStatus) -> Result:
        result = self._dispatch(
            ChangePaymentStatus(order_id=order_id, payment_status=payment_status.value),
            not_found=("Order", order_id),
            present=self._details,
        )
        if result.is_ok:
            logger.info("Payment status updated", order_id=order_id, payment_status=payment_status.value)
        return result

    def _details(self, order_id) -> OrderDetails:
        return OrderDetails.from_order(self.domain.repository_for(Order).get(order_id))
