"""Read-side helpers for the product catalogue.

Only exact-match filters are pushed down to the repository; ranges, text
search, sorting and paging are applied to the fetched rows so the same code
runs against every configured provider.
"""

from dataclasses import dataclass
from decimal import Decimal

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from mustore.catalogue.category.category import get_category_by_slug
from mustore.catalogue.product.product import Product

SORT_FIELDS = ("price", "name", "created_at")
SORT_ORDERS = ("ASC", "DESC")
MAX_LIMIT = 100
SIMILAR_PRICE_SPREAD = Decimal("0.3")
SIMILAR_LIMIT = 4


@dataclass
class ProductFilter:
    category: str | None = None  # category slug, matches category or subcategory
    brand_id: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    in_stock: bool = False
    featured: bool = False
    search: str | None = None
    sort: str = "created_at"
    order: str = "DESC"
    limit: int = 20
    offset: int = 0

    def validate(self):
        errors = {}
        if self.sort not in SORT_FIELDS:
            errors["sort"] = [f"Sort must be one of: {', '.join(SORT_FIELDS)}"]
        if self.order.upper() not in SORT_ORDERS:
            errors["order"] = ["Order must be ASC or DESC"]
        if not 1 <= self.limit <= MAX_LIMIT:
            errors["limit"] = [f"Limit must be between 1 and {MAX_LIMIT}"]
        if self.offset < 0:
            errors["offset"] = ["Offset cannot be negative"]
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            errors["min_price"] = ["Minimum price cannot exceed maximum price"]
        if errors:
            raise ValidationError(errors)


@dataclass
class ProductPage:
    products: list
    total: int
    limit: int
    offset: int


def _all_available():
    repo = current_domain.repository_for(Product)
    return repo._dao.query.filter(is_available=True).all().items


def list_products(criteria: ProductFilter | None = None) -> ProductPage:
    criteria = criteria or ProductFilter()
    criteria.validate()

    products = _all_available()

    if criteria.category:
        category = get_category_by_slug(criteria.category)
        category_id = str(category.id)
        products = [
            p for p in products if category_id in (str(p.category_id or ""), str(p.subcategory_id or ""))
        ]
    if criteria.brand_id:
        products = [p for p in products if str(p.brand_id or "") == str(criteria.brand_id)]
    if criteria.min_price is not None:
        products = [p for p in products if p.price >= criteria.min_price]
    if criteria.max_price is not None:
        products = [p for p in products if p.price <= criteria.max_price]
    if criteria.in_stock:
        products = [p for p in products if p.available_quantity > 0]
    if criteria.featured:
        products = [p for p in products if p.is_featured]
    if criteria.search:
        needle = criteria.search.lower()
        products = [
            p
            for p in products
            if needle in (p.name or "").lower() or needle in (p.description or "").lower()
        ]

    # Rows with an empty sort key go last regardless of direction
    present = [p for p in products if getattr(p, criteria.sort) is not None]
    missing = [p for p in products if getattr(p, criteria.sort) is None]
    present.sort(key=lambda p: getattr(p, criteria.sort), reverse=criteria.order.upper() == "DESC")
    products = present + missing

    page = products[criteria.offset : criteria.offset + criteria.limit]
    return ProductPage(products=page, total=len(products), limit=criteria.limit, offset=criteria.offset)


def get_product(identifier: str) -> Product:
    """Find an available product by id or by slug."""
    repo = current_domain.repository_for(Product)
    try:
        product = repo.get(identifier)
    except ObjectNotFoundError:
        matches = repo._dao.query.filter(slug=identifier).all().items
        if not matches:
            raise ObjectNotFoundError(f"Product {identifier!r} does not exist")
        product = matches[0]

    if not product.is_available:
        raise ObjectNotFoundError(f"Product {identifier!r} does not exist")
    return product


def similar_products(product_id: str) -> list[Product]:
    """Available products of the same category priced within 30% of the given one."""
    product = current_domain.repository_for(Product).get(product_id)
    if not product.category_id:
        return []

    price = Decimal(str(product.price))
    low, high = price * (1 - SIMILAR_PRICE_SPREAD), price * (1 + SIMILAR_PRICE_SPREAD)

    candidates = [
        p
        for p in _all_available()
        if str(p.id) != str(product.id)
        and str(p.category_id or "") == str(product.category_id)
        and low <= Decimal(str(p.price)) <= high
    ]
    candidates.sort(key=lambda p: abs(Decimal(str(p.price)) - price))
    return candidates[:SIMILAR_LIMIT]
