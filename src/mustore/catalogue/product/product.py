"""Product aggregate: catalogue entry plus its stock counters.

Stock Model:
    stock_quantity:    Physical units owned by the store
    reserved_quantity: Units held by orders that are not yet delivered
    available:         stock_quantity - reserved_quantity (what can be sold)

Reservations are taken at checkout, released when an order is cancelled and
consumed (together with the physical units) when an order is delivered.
"""

import json
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from mustore.catalogue.product.events import (
    ProductAvailabilityChanged,
    ProductCreated,
    ProductDetailsUpdated,
    ProductRestocked,
    ReservationReleased,
    StockConsumed,
    StockReserved,
)
from mustore.catalogue.shared import sku_errors, slugify
from mustore.checkout.errors import InsufficientStock, ProductUnavailable
from mustore.domain import mustore


@mustore.aggregate
class Product:
    sku = String(required=True, min_length=3, max_length=50, unique=True)
    name = String(required=True, max_length=255)
    slug = String(required=True, max_length=300, unique=True)
    brand_id = Identifier()
    category_id = Identifier()
    subcategory_id = Identifier()
    description = Text()
    specifications = Text()  # JSON object of attribute -> value
    price = Float(required=True, min_value=0.01)
    old_price = Float(min_value=0.0)
    stock_quantity = Integer(default=0, min_value=0)
    reserved_quantity = Integer(default=0, min_value=0)
    is_available = Boolean(default=True)
    is_featured = Boolean(default=False)
    is_new = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def reserved_quantity_cannot_exceed_stock(self):
        if (self.reserved_quantity or 0) > (self.stock_quantity or 0):
            raise ValidationError(
                {
                    "reserved_quantity": [
                        f"Reserved quantity ({self.reserved_quantity}) "
                        f"cannot exceed stock quantity ({self.stock_quantity})"
                    ]
                }
            )

    @invariant.post
    def sku_must_be_valid_format(self):
        errors = sku_errors(self.sku or "")
        if errors:
            raise ValidationError({"sku": errors})

    @property
    def available_quantity(self) -> int:
        return (self.stock_quantity or 0) - (self.reserved_quantity or 0)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        sku,
        name,
        price,
        stock_quantity=0,
        slug=None,
        brand_id=None,
        category_id=None,
        subcategory_id=None,
        description=None,
        specifications=None,
        old_price=None,
        is_available=True,
        is_featured=False,
        is_new=False,
    ):
        now = datetime.now(UTC)
        specs_json = json.dumps(specifications) if isinstance(specifications, dict) else specifications

        product = cls(
            sku=sku,
            name=name,
            slug=slug or slugify(f"{name}-{sku}"),
            brand_id=brand_id,
            category_id=category_id,
            subcategory_id=subcategory_id,
            description=description,
            specifications=specs_json,
            price=price,
            old_price=old_price,
            stock_quantity=stock_quantity,
            reserved_quantity=0,
            is_available=is_available,
            is_featured=is_featured,
            is_new=is_new,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                sku=sku,
                name=name,
                price=price,
                stock_quantity=stock_quantity,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Catalogue maintenance
    # -------------------------------------------------------------------
    def update_details(
        self,
        name=None,
        description=None,
        specifications=None,
        price=None,
        old_price=None,
        is_featured=None,
        is_new=None,
    ):
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if specifications is not None:
            self.specifications = (
                json.dumps(specifications) if isinstance(specifications, dict) else specifications
            )
        if price is not None:
            self.price = price
        if old_price is not None:
            self.old_price = old_price
        if is_featured is not None:
            self.is_featured = is_featured
        if is_new is not None:
            self.is_new = is_new

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductDetailsUpdated(
                product_id=str(self.id),
                name=self.name,
                price=self.price,
                updated_at=now,
            )
        )

    def deactivate(self):
        """Withdraw the product from sale. Existing reservations stay in place."""
        if not self.is_available:
            raise ValidationError({"is_available": ["Product is already withdrawn from sale"]})
        self._set_availability(False)

    def activate(self):
        if self.is_available:
            raise ValidationError({"is_available": ["Product is already on sale"]})
        self._set_availability(True)

    def _set_availability(self, is_available):
        now = datetime.now(UTC)
        self.is_available = is_available
        self.updated_at = now
        self.raise_(
            ProductAvailabilityChanged(
                product_id=str(self.id),
                is_available=is_available,
                changed_at=now,
            )
        )

    def restock(self, quantity):
        """Add physical units to the stock."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        now = datetime.now(UTC)
        self.stock_quantity = self.stock_quantity + quantity
        self.updated_at = now

        self.raise_(
            ProductRestocked(
                product_id=str(self.id),
                quantity=quantity,
                new_stock_quantity=self.stock_quantity,
                restocked_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------
    def ensure_can_reserve(self, quantity):
        """Raise when ``quantity`` units cannot be reserved right now."""
        if not self.is_available:
            raise ProductUnavailable(str(self.id), self.name)
        if quantity > self.available_quantity:
            raise InsufficientStock(
                product_id=str(self.id),
                product_name=self.name,
                requested=quantity,
                available=self.available_quantity,
            )

    def reserve(self, quantity, order_id=None):
        """Hold ``quantity`` units for an order."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        self.ensure_can_reserve(quantity)

        now = datetime.now(UTC)
        self.reserved_quantity = self.reserved_quantity + quantity
        self.updated_at = now

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                order_id=str(order_id) if order_id else None,
                quantity=quantity,
                new_reserved_quantity=self.reserved_quantity,
                new_available_quantity=self.available_quantity,
                reserved_at=now,
            )
        )

    def release(self, quantity, order_id=None):
        """Lift a hold previously taken by ``reserve``."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if quantity > self.reserved_quantity:
            raise ValidationError(
                {"quantity": [f"Cannot release {quantity} units: only {self.reserved_quantity} reserved"]}
            )

        now = datetime.now(UTC)
        self.reserved_quantity = self.reserved_quantity - quantity
        self.updated_at = now

        self.raise_(
            ReservationReleased(
                product_id=str(self.id),
                order_id=str(order_id) if order_id else None,
                quantity=quantity,
                new_reserved_quantity=self.reserved_quantity,
                new_available_quantity=self.available_quantity,
                released_at=now,
            )
        )

    def consume(self, quantity, order_id=None):
        """Turn a hold into a shipment: both counters drop by ``quantity``."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if quantity > self.reserved_quantity:
            raise ValidationError(
                {"quantity": [f"Cannot consume {quantity} units: only {self.reserved_quantity} reserved"]}
            )

        now = datetime.now(UTC)
        with atomic_change(self):
            self.reserved_quantity = self.reserved_quantity - quantity
            self.stock_quantity = self.stock_quantity - quantity
            self.updated_at = now

        self.raise_(
            StockConsumed(
                product_id=str(self.id),
                order_id=str(order_id) if order_id else None,
                quantity=quantity,
                new_stock_quantity=self.stock_quantity,
                new_reserved_quantity=self.reserved_quantity,
                consumed_at=now,
            )
        )
