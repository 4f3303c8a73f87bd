"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state. State tracks the ids
returned by the API so follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """A single simulated shopper, signed in or browsing as a guest."""

    customer_id: str | None = None
    session_id: str | None = None
    product_ids: list[str] = field(default_factory=list)
    item_ids: list[str] = field(default_factory=list)
    order_id: str | None = None

    @property
    def headers(self) -> dict:
        headers = {}
        if self.customer_id:
            headers["X-Customer-Id"] = self.customer_id
        if self.session_id:
            headers["X-Session-Id"] = self.session_id
        return headers


@dataclass
class FulfilmentState:
    """An order being walked through its status lifecycle by an administrator."""

    product_id: str | None = None
    order_id: str | None = None
    current_status: str = "pending"
