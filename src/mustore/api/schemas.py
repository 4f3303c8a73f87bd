"""Pydantic request/response schemas for the MuStore API."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


class BrandResponse(BaseModel):
    id: str
    name: str
    slug: str
    country: str | None = None
    description: str | None = None

    @classmethod
    def from_brand(cls, brand) -> BrandResponse:
        return cls(
            id=str(brand.id),
            name=brand.name,
            slug=brand.slug,
            country=brand.country,
            description=brand.description,
        )


class CategoryResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    subcategories: list[CategoryResponse] = []

    @classmethod
    def from_category(cls, category, subcategories=()) -> CategoryResponse:
        return cls(
            id=str(category.id),
            name=category.name,
            slug=category.slug,
            description=category.description,
            subcategories=[cls.from_category(sub) for sub in subcategories],
        )


CategoryResponse.model_rebuild()


class ProductResponse(BaseModel):
    id: str
    sku: str
    name: str
    slug: str
    brand_id: str | None = None
    category_id: str | None = None
    subcategory_id: str | None = None
    description: str | None = None
    specifications: dict = {}
    price: float
    old_price: float | None = None
    stock_quantity: int
    available_quantity: int
    is_available: bool
    is_featured: bool
    is_new: bool

    @classmethod
    def from_product(cls, product) -> ProductResponse:
        return cls(
            id=str(product.id),
            sku=product.sku,
            name=product.name,
            slug=product.slug,
            brand_id=str(product.brand_id) if product.brand_id else None,
            category_id=str(product.category_id) if product.category_id else None,
            subcategory_id=str(product.subcategory_id) if product.subcategory_id else None,
            description=product.description,
            specifications=json.loads(product.specifications) if product.specifications else {},
            price=product.price,
            old_price=product.old_price,
            stock_quantity=product.stock_quantity,
            available_quantity=product.available_quantity,
            is_available=product.is_available,
            is_featured=bool(product.is_featured),
            is_new=bool(product.is_new),
        )


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total: int
    limit: int
    offset: int


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "sku": "YAM-C40",
                    "name": "Yamaha C40 Classical Guitar",
                    "price": 12990,
                    "stock_quantity": 15,
                    "specifications": {"strings": "nylon", "top": "spruce"},
                }
            ]
        }
    }

    sku: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9-]+$")
    name: str = Field(..., max_length=255)
    price: float = Field(..., gt=0)
    old_price: float | None = Field(None, ge=0)
    stock_quantity: int = Field(0, ge=0)
    slug: str | None = Field(None, max_length=300)
    brand_id: str | None = None
    category_id: str | None = None
    subcategory_id: str | None = None
    description: str | None = None
    specifications: dict | None = None
    is_featured: bool = False
    is_new: bool = False


class RestockRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class ProductIdResponse(BaseModel):
    product_id: str


class StockResponse(BaseModel):
    product_id: str
    stock_quantity: int


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1, le=99)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(..., ge=1, le=99)


class CartLineResponse(BaseModel):
    item_id: str
    product_id: str
    name: str
    sku: str
    brand: str | None = None
    price: float
    quantity: int
    available_quantity: int
    is_available: bool
    subtotal: float


class CartSummaryResponse(BaseModel):
    items_count: int
    total_quantity: int
    subtotal: float
    delivery: float
    total: float


class CartResponse(BaseModel):
    cart_id: str
    items: list[CartLineResponse]
    summary: CartSummaryResponse

    @classmethod
    def from_view(cls, view) -> CartResponse:
        return cls(
            cart_id=view.cart_id,
            items=[CartLineResponse(**line.__dict__) for line in view.items],
            summary=CartSummaryResponse(**view.summary.__dict__),
        )


class ItemIdResponse(BaseModel):
    item_id: str


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


class AddFavoriteRequest(BaseModel):
    product_id: str


class FavoriteResponse(BaseModel):
    id: str
    product: ProductResponse
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class PlaceOrderRequestSchema(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_name": "Ivan Petrov",
                    "customer_email": "ivan@example.com",
                    "customer_phone": "+7 900 123-45-67",
                    "delivery_method": "delivery",
                    "delivery_address": "Moscow, Tverskaya 1",
                    "payment_method": "card",
                }
            ]
        }
    }

    customer_name: str = Field(..., min_length=2, max_length=255)
    customer_email: str = Field(..., max_length=254)
    customer_phone: str = Field(..., max_length=20)
    delivery_method: Literal["pickup", "delivery"]
    delivery_address: str | None = Field(None, max_length=500)
    payment_method: Literal["cash", "card", "online"] = "cash"
    notes: str | None = Field(None, max_length=1000)


class OrderSummaryResponse(BaseModel):
    id: str
    order_number: str
    status: str
    total: float
    created_at: datetime


class OrderLineResponse(BaseModel):
    product_id: str
    product_name: str
    product_sku: str
    product_brand: str | None = None
    unit_price: float
    quantity: int
    subtotal: float


class OrderResponse(BaseModel):
    id: str
    order_number: str
    status: str
    payment_status: str
    subtotal: float
    delivery_fee: float
    total: float
    delivery_method: str
    delivery_address: str | None = None
    payment_method: str
    customer_name: str
    customer_email: str
    customer_phone: str
    notes: str | None = None
    items: list[OrderLineResponse]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_details(cls, details) -> OrderResponse:
        data = {k: v for k, v in details.__dict__.items() if k != "customer_id"}
        data["items"] = [OrderLineResponse(**line.__dict__) for line in details.items]
        return cls(**data)


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    limit: int
    offset: int


class UpdateOrderRequest(BaseModel):
    status: Literal["pending", "processing", "shipped", "delivered", "cancelled"] | None = None
    payment_status: Literal["pending", "paid", "failed"] | None = None


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


class PopularProductResponse(BaseModel):
    product_id: str
    name: str
    quantity_sold: int


class StatsResponse(BaseModel):
    total_orders: int
    pending_orders: int
    available_products: int
    monthly_revenue: float
    popular_products: list[PopularProductResponse]


class StatusResponse(BaseModel):
    status: str = "ok"
