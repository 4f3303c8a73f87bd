"""Business and infrastructure errors raised by checkout and order lifecycle.

Input validation keeps using Protean's ``ValidationError``. The classes here
cover the outcomes a caller must distinguish: an empty cart, a product that
cannot be sold, an illegal status change, a missing record, or a failed
store interaction.
"""


class CheckoutError(Exception):
    """Base class for checkout and order lifecycle errors."""

    code = "checkout_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class EmptyCart(CheckoutError):
    code = "empty_cart"

    def __init__(self, cart_id: str):
        super().__init__("Cart is empty")
        self.cart_id = cart_id


class InsufficientStock(CheckoutError):
    code = "insufficient_stock"

    def __init__(self, product_id: str, product_name: str, requested: int, available: int):
        super().__init__(
            f'Insufficient stock for "{product_name}": {available} available, {requested} requested'
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "product_id": self.product_id,
            "product_name": self.product_name,
            "requested": self.requested,
            "available": self.available,
        }


class ProductUnavailable(CheckoutError):
    code = "product_unavailable"

    def __init__(self, product_id: str, product_name: str | None = None):
        label = f'"{product_name}"' if product_name else product_id
        super().__init__(f"Product {label} is no longer available")
        self.product_id = product_id
        self.product_name = product_name

    def to_dict(self) -> dict:
        return {**super().to_dict(), "product_id": self.product_id}


class NotFound(CheckoutError):
    code = "not_found"

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} {identifier} not found")
        self.kind = kind
        self.identifier = identifier


class InvalidTransition(CheckoutError):
    code = "invalid_transition"

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change order status from {current} to {requested}")
        self.current = current
        self.requested = requested

    def to_dict(self) -> dict:
        return {**super().to_dict(), "current": self.current, "requested": self.requested}


class StoreFailure(CheckoutError):
    """Infrastructure failure. The message shown to callers stays opaque."""

    code = "store_failure"

    def __init__(self, detail: str = "Internal error"):
        super().__init__("Internal error")
        self.detail = detail
