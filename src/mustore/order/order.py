"""Order aggregate, a placed purchase with snapshot line items.

State Machine:
    pending → processing → shipped → delivered
    pending | processing | shipped → cancelled

``delivered`` and ``cancelled`` are terminal. Line items copy product name,
SKU, brand and price at checkout so later catalogue edits never alter a
placed order. Orders are never deleted.
"""

import json
import re
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from mustore.checkout.errors import InvalidTransition
from mustore.checkout.pricing import DeliveryMethod
from mustore.domain import mustore
from mustore.order.events import OrderPlaced, OrderStatusChanged, PaymentStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    ONLINE = "online"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")
_CENT = Decimal("0.01")


def _cents(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(_CENT)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@mustore.value_object(part_of="Order")
class CustomerContact:
    """Who placed the order, as entered at checkout."""

    name = String(required=True, min_length=2, max_length=255)
    email = String(required=True, max_length=254)
    phone = String(required=True, max_length=20)

    @invariant.post
    def email_must_be_well_formed(self):
        email = self.email or ""
        local_part, _, domain_part = email.partition("@")
        if (
            email.count("@") != 1
            or not local_part
            or "." not in domain_part
            or domain_part.startswith(".")
            or domain_part.endswith(".")
            or any(c.isspace() for c in email)
        ):
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

    @invariant.post
    def phone_must_be_well_formed(self):
        phone = self.phone or ""
        if not re.search(r"\d", phone) or not _PHONE_PATTERN.match(phone):
            raise ValidationError({"phone": [f"Invalid phone number: {phone!r}"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@mustore.entity(part_of="Order")
class OrderItem:
    """A purchased product as it was at checkout time."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    product_sku = String(required=True, max_length=50)
    product_brand = String(max_length=100)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    subtotal = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@mustore.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    customer_id = Identifier()  # Empty for guest orders
    contact = ValueObject(CustomerContact, required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    items = HasMany(OrderItem)
    subtotal = Float(required=True, min_value=0.0)
    delivery_fee = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    delivery_method = String(choices=DeliveryMethod, required=True)
    delivery_address = String(max_length=500)
    payment_method = String(choices=PaymentMethod, required=True)
    notes = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_equal_subtotal_plus_delivery(self):
        if _cents(self.total) != _cents(self.subtotal) + _cents(self.delivery_fee):
            raise ValidationError({"total": ["Order total must equal subtotal plus delivery fee"]})

    @invariant.post
    def subtotal_must_match_items(self):
        if self.items and sum(_cents(i.subtotal) for i in self.items) != _cents(self.subtotal):
            raise ValidationError({"subtotal": ["Order subtotal must equal the sum of its items"]})

    @invariant.post
    def delivery_orders_need_an_address(self):
        if self.delivery_method == DeliveryMethod.DELIVERY.value and not (self.delivery_address or "").strip():
            raise ValidationError({"delivery_address": ["Delivery address is required for delivery"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        contact,
        items,
        pricing,
        delivery_method,
        payment_method,
        customer_id=None,
        delivery_address=None,
        notes=None,
    ):
        """Build a pending order from snapshot items and computed pricing."""
        if not items:
            raise ValidationError({"items": ["Order must have at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            contact=contact,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            items=items,
            subtotal=pricing.subtotal,
            delivery_fee=pricing.delivery_fee,
            total=pricing.total,
            delivery_method=delivery_method,
            delivery_address=delivery_address if delivery_method == DeliveryMethod.DELIVERY.value else None,
            payment_method=payment_method,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id) if customer_id else None,
                items=json.dumps(
                    [
                        {
                            "product_id": str(i.product_id),
                            "product_name": i.product_name,
                            "quantity": i.quantity,
                            "unit_price": i.unit_price,
                        }
                        for i in items
                    ]
                ),
                subtotal=order.subtotal,
                delivery_fee=order.delivery_fee,
                total=order.total,
                delivery_method=delivery_method,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def transition_to(self, new_status: OrderStatus) -> bool:
        """Move to ``new_status``.

        Returns False when the order already has that status (nothing changes),
        True after a real transition. Raises ``InvalidTransition`` otherwise.
        """
        current = OrderStatus(self.status)
        if new_status == current:
            return False
        if new_status not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(current.value, new_status.value)

        now = datetime.now(UTC)
        self.status = new_status.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                new_status=new_status.value,
                changed_at=now,
            )
        )
        return True

    def set_payment_status(self, new_status: PaymentStatus) -> bool:
        current = PaymentStatus(self.payment_status)
        if new_status == current:
            return False

        now = datetime.now(UTC)
        self.payment_status = new_status.value
        self.updated_at = now

        self.raise_(
            PaymentStatusChanged(
                order_id=str(self.id),
                previous_payment_status=current.value,
                new_payment_status=new_status.value,
                changed_at=now,
            )
        )
        return True
