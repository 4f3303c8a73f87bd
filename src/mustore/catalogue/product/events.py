"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from mustore.domain import mustore


@mustore.event(part_of="Product")
class ProductCreated:
    """A new product was added to the catalogue."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    sku = String(required=True)
    name = String(required=True)
    price = Float(required=True)
    stock_quantity = Integer(required=True)
    created_at = DateTime(required=True)


@mustore.event(part_of="Product")
class ProductDetailsUpdated:
    """Descriptive attributes or the price of a product changed."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    updated_at = DateTime(required=True)


@mustore.event(part_of="Product")
class ProductAvailabilityChanged:
    """A product was withdrawn from sale or put back on sale."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    is_available = Boolean(default=True)
    changed_at = DateTime(required=True)


@mustore.event(part_of="Product")
class ProductRestocked:
    """Physical units were added to the stock of a product."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_stock_quantity = Integer(required=True)
    restocked_at = DateTime(required=True)


@mustore.event(part_of="Product")
class StockReserved:
    """Units were put on hold for an order."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    order_id = Identifier()
    quantity = Integer(required=True)
    new_reserved_quantity = Integer(required=True)
    new_available_quantity = Integer(required=True)
    reserved_at = DateTime(required=True)


@mustore.event(part_of="Product")
class ReservationReleased:
    """A hold was lifted because its order was cancelled."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    order_id = Identifier()
    quantity = Integer(required=True)
    new_reserved_quantity = Integer(required=True)
    new_available_quantity = Integer(required=True)
    released_at = DateTime(required=True)


@mustore.event(part_of="Product")
class StockConsumed:
    """Reserved units left inventory because their order was delivered."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    order_id = Identifier()
    quantity = Integer(required=True)
    new_stock_quantity = Integer(required=True)
    new_reserved_quantity = Integer(required=True)
    consumed_at = DateTime(required=True)
