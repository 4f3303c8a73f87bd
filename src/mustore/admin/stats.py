"""Store statistics for the administration dashboard."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from protean.utils.globals import current_domain

from mustore.catalogue.product.product import Product
from mustore.order.order import Order, OrderStatus

POPULAR_WINDOW = timedelta(days=30)
POPULAR_LIMIT = 5


@dataclass
class PopularProduct:
    product_id: str
    name: str
    quantity_sold: int


@dataclass
class StoreStats:
    total_orders: int
    pending_orders: int
    available_products: int
    monthly_revenue: float
    popular_products: list[PopularProduct] = field(default_factory=list)


def _aware(moment):
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def store_stats(now: datetime | None = None) -> StoreStats:
    now = now or datetime.now(UTC)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    window_start = now - POPULAR_WINDOW

    order_repo = current_domain.repository_for(Order)
    orders = [order_repo.get(o.id) for o in order_repo._dao.query.all().items]
    active = [o for o in orders if o.status != OrderStatus.CANCELLED.value]

    revenue = sum(
        (Decimal(str(o.total)) for o in active if o.created_at and _aware(o.created_at) >= month_start),
        Decimal("0"),
    )

    sold = Counter()
    names = {}
    for order in active:
        if not order.created_at or _aware(order.created_at) < window_start:
            continue
        for item in order.items:
            sold[str(item.product_id)] += item.quantity
            names[str(item.product_id)] = item.product_name

    products = current_domain.repository_for(Product)._dao.query.filter(is_available=True).all().items

    return StoreStats(
        total_orders=len(orders),
        pending_orders=sum(1 for o in orders if o.status == OrderStatus.PENDING.value),
        available_products=len(products),
        monthly_revenue=float(revenue),
        popular_products=[
            PopularProduct(product_id=product_id, name=names[product_id], quantity_sold=quantity)
            for product_id, quantity in sold.most_common(POPULAR_LIMIT)
        ],
    )
