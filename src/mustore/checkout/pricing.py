"""Order pricing: subtotal, delivery fee and total.

Delivery is free for pickup, and for delivery orders whose subtotal reaches
the free-shipping threshold. Everything else pays a flat fee. Both amounts
come from the ``[custom]`` section of the domain configuration.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from protean.utils.globals import current_domain

DEFAULT_FREE_SHIPPING_THRESHOLD = 5000
DEFAULT_DELIVERY_FEE = 300

_CENT = Decimal("0.01")


class DeliveryMethod(Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


@dataclass(frozen=True)
class DeliverySettings:
    free_shipping_threshold: Decimal
    delivery_fee: Decimal

    @classmethod
    def from_config(cls) -> "DeliverySettings":
        custom = current_domain.config.get("custom", {}) or {}
        return cls(
            free_shipping_threshold=Decimal(
                str(custom.get("free_shipping_threshold", DEFAULT_FREE_SHIPPING_THRESHOLD))
            ),
            delivery_fee=Decimal(str(custom.get("delivery_fee", DEFAULT_DELIVERY_FEE))),
        )


@dataclass(frozen=True)
class Pricing:
    subtotal: float
    delivery_fee: float
    total: float


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def line_subtotal(unit_price, quantity: int) -> float:
    return float(_money(unit_price) * quantity)


def calculate_pricing(
    lines: Iterable[tuple[float, int]],
    delivery_method: str,
    settings: DeliverySettings | None = None,
) -> Pricing:
    """Price a set of ``(unit_price, quantity)`` lines for a delivery method."""
    settings = settings or DeliverySettings.from_config()

    subtotal = sum((_money(price) * quantity for price, quantity in lines), Decimal("0"))

    if DeliveryMethod(delivery_method) == DeliveryMethod.PICKUP:
        fee = Decimal("0")
    elif subtotal >= settings.free_shipping_threshold:
        fee = Decimal("0")
    else:
        fee = _money(settings.delivery_fee)

    return Pricing(
        subtotal=float(subtotal),
        delivery_fee=float(fee),
        total=float(subtotal + fee),
    )
