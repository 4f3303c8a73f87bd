"""Human-readable order numbers: ``MS-YYMMDD-XXXXXX``."""

import secrets
from datetime import UTC, datetime

from protean.utils.globals import current_domain

from mustore.order.order import Order

PREFIX = "MS"
MAX_ATTEMPTS = 10


def format_order_number(moment: datetime, suffix: str) -> str:
    return f"{PREFIX}-{moment:%y%m%d}-{suffix.upper()}"


def next_order_number(moment: datetime | None = None) -> str:
    """Generate an order number not used by any stored order."""
    moment = moment or datetime.now(UTC)
    dao = current_domain.repository_for(Order)._dao
    for _ in range(MAX_ATTEMPTS):
        candidate = format_order_number(moment, secrets.token_hex(3))
        if not dao.query.filter(order_number=candidate).all().items:
            return candidate
    raise RuntimeError("Could not allocate a unique order number")
