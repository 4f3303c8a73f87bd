"""Cart lines joined with current catalogue data and a price summary."""

from dataclasses import dataclass, field

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from mustore.cart.cart import ShoppingCart
from mustore.catalogue.brand.brand import Brand
from mustore.catalogue.product.product import Product
from mustore.checkout.pricing import DeliveryMethod, calculate_pricing, line_subtotal


@dataclass
class CartLine:
    item_id: str
    product_id: str
    name: str
    sku: str
    brand: str | None
    price: float
    quantity: int
    available_quantity: int
    is_available: bool
    subtotal: float


@dataclass
class CartSummary:
    items_count: int = 0
    total_quantity: int = 0
    subtotal: float = 0.0
    delivery: float = 0.0
    total: float = 0.0


@dataclass
class CartView:
    cart_id: str
    items: list[CartLine] = field(default_factory=list)
    summary: CartSummary = field(default_factory=CartSummary)


def _brand_name(brand_id, cache):
    if not brand_id:
        return None
    key = str(brand_id)
    if key not in cache:
        try:
            cache[key] = current_domain.repository_for(Brand).get(brand_id).name
        except ObjectNotFoundError:
            cache[key] = None
    return cache[key]


def cart_view(cart_id) -> CartView:
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    products = current_domain.repository_for(Product)
    brands = {}

    lines = []
    for item in cart.items:
        try:
            product = products.get(item.product_id)
        except ObjectNotFoundError:
            continue
        lines.append(
            CartLine(
                item_id=str(item.id),
                product_id=str(product.id),
                name=product.name,
                sku=product.sku,
                brand=_brand_name(product.brand_id, brands),
                price=product.price,
                quantity=item.quantity,
                available_quantity=product.available_quantity,
                is_available=product.is_available,
                subtotal=line_subtotal(product.price, item.quantity),
            )
        )

    if not lines:
        return CartView(cart_id=str(cart.id))

    pricing = calculate_pricing(
        [(line.price, line.quantity) for line in lines],
        DeliveryMethod.DELIVERY.value,
    )
    return CartView(
        cart_id=str(cart.id),
        items=lines,
        summary=CartSummary(
            items_count=len(lines),
            total_quantity=sum(line.quantity for line in lines),
            subtotal=pricing.subtotal,
            delivery=pricing.delivery_fee,
            total=pricing.total,
        ),
    )
