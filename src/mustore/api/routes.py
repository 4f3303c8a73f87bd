"""FastAPI routes for MuStore: catalogue, cart, favorites, orders and admin."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from mustore.admin.stats import store_stats
from mustore.api.dependencies import (
    Caller,
    get_caller,
    get_lifecycle_manager,
    get_workflow,
    require_admin,
    require_customer,
)
from mustore.api.errors import error_response
from mustore.api.schemas import (
    AddFavoriteRequest,
    AddToCartRequest,
    BrandResponse,
    CartResponse,
    CategoryResponse,
    CreateProductRequest,
    FavoriteResponse,
    ItemIdResponse,
    OrderListResponse,
    OrderResponse,
    OrderSummaryResponse,
    PlaceOrderRequestSchema,
    PopularProductResponse,
    ProductIdResponse,
    ProductListResponse,
    ProductResponse,
    RestockRequest,
    StatsResponse,
    StatusResponse,
    StockResponse,
    UpdateCartQuantityRequest,
    UpdateOrderRequest,
)
from mustore.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from mustore.cart.management import MergeGuestCart, resolve_cart
from mustore.cart.view import cart_view
from mustore.catalogue.brand.brand import list_brands
from mustore.catalogue.category.category import category_tree, get_category
from mustore.catalogue.product.management import (
    ActivateProduct,
    CreateProduct,
    DeactivateProduct,
    RestockProduct,
)
from mustore.catalogue.product.queries import ProductFilter, get_product, list_products, similar_products
from mustore.checkout.lifecycle import OrderDetails, OrderLifecycleManager
from mustore.checkout.workflow import OrderWorkflow, PlaceOrderRequest
from mustore.favorites.favorite import AddFavorite, RemoveFavorite, favorites_for
from mustore.order.queries import order_for_customer, orders_for_customer

catalogue_router = APIRouter(tags=["catalogue"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
favorites_router = APIRouter(prefix="/favorites", tags=["favorites"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


@catalogue_router.get("/brands", response_model=list[BrandResponse])
async def get_brands() -> list[BrandResponse]:
    return [BrandResponse.from_brand(brand) for brand in list_brands()]


@catalogue_router.get("/categories", response_model=list[CategoryResponse])
async def get_categories() -> list[CategoryResponse]:
    return [CategoryResponse.from_category(node["category"], node["subcategories"]) for node in category_tree()]


@catalogue_router.get("/categories/{slug}", response_model=CategoryResponse)
async def get_category_detail(slug: str) -> CategoryResponse:
    node = get_category(slug)
    return CategoryResponse.from_category(node["category"], node["subcategories"])


@catalogue_router.get("/products", response_model=ProductListResponse)
async def get_products(
    category: str | None = None,
    brand_id: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    in_stock: bool = False,
    featured: bool = False,
    search: str | None = None,
    sort: str = "created_at",
    order: str = "DESC",
    limit: int = Query(20),
    offset: int = Query(0),
) -> ProductListResponse:
    page = list_products(
        ProductFilter(
            category=category,
            brand_id=brand_id,
            min_price=min_price,
            max_price=max_price,
            in_stock=in_stock,
            featured=featured,
            search=search,
            sort=sort,
            order=order,
            limit=limit,
            offset=offset,
        )
    )
    return ProductListResponse(
        products=[ProductResponse.from_product(p) for p in page.products],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@catalogue_router.get("/products/{identifier}", response_model=ProductResponse)
async def get_product_detail(identifier: str) -> ProductResponse:
    return ProductResponse.from_product(get_product(identifier))


@catalogue_router.get("/products/{product_id}/similar", response_model=list[ProductResponse])
async def get_similar_products(product_id: str) -> list[ProductResponse]:
    return [ProductResponse.from_product(p) for p in similar_products(product_id)]


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------


def _cart_id(caller: Caller) -> str:
    """Resolve the caller's cart, folding in their guest cart after sign-in."""
    if caller.customer_id and caller.session_id:
        current_domain.process(
            MergeGuestCart(customer_id=caller.customer_id, session_id=caller.session_id),
            asynchronous=False,
        )
    return resolve_cart(customer_id=caller.customer_id, session_id=caller.session_id)


@cart_router.get("", response_model=CartResponse)
async def get_cart(caller: Caller = Depends(get_caller)) -> CartResponse:
    return CartResponse.from_view(cart_view(_cart_id(caller)))


@cart_router.post("/items", status_code=201, response_model=ItemIdResponse)
async def add_to_cart(body: AddToCartRequest, caller: Caller = Depends(get_caller)) -> ItemIdResponse:
    command = AddToCart(cart_id=_cart_id(caller), product_id=body.product_id, quantity=body.quantity)
    item_id = current_domain.process(command, asynchronous=False)
    return ItemIdResponse(item_id=item_id)


@cart_router.put("/items/{item_id}", response_model=StatusResponse)
async def update_cart_item(
    item_id: str, body: UpdateCartQuantityRequest, caller: Caller = Depends(get_caller)
) -> StatusResponse:
    command = UpdateCartQuantity(cart_id=_cart_id(caller), item_id=item_id, new_quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(item_id: str, caller: Caller = Depends(get_caller)) -> StatusResponse:
    current_domain.process(RemoveFromCart(cart_id=_cart_id(caller), item_id=item_id), asynchronous=False)
    return StatusResponse()


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(caller: Caller = Depends(get_caller)) -> StatusResponse:
    current_domain.process(ClearCart(cart_id=_cart_id(caller)), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


@favorites_router.get("", response_model=list[FavoriteResponse])
async def get_favorites(customer_id: str = Depends(require_customer)) -> list[FavoriteResponse]:
    return [
        FavoriteResponse(
            id=str(entry["favorite"].id),
            product=ProductResponse.from_product(entry["product"]),
            created_at=entry["favorite"].created_at,
        )
        for entry in favorites_for(customer_id)
    ]


@favorites_router.post("", status_code=201, response_model=StatusResponse)
async def add_favorite(body: AddFavoriteRequest, customer_id: str = Depends(require_customer)) -> StatusResponse:
    current_domain.process(AddFavorite(customer_id=customer_id, product_id=body.product_id), asynchronous=False)
    return StatusResponse()


@favorites_router.delete("/{product_id}", response_model=StatusResponse)
async def remove_favorite(product_id: str, customer_id: str = Depends(require_customer)) -> StatusResponse:
    current_domain.process(RemoveFavorite(customer_id=customer_id, product_id=product_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@order_router.post("", status_code=201, response_model=OrderSummaryResponse)
async def place_order(
    body: PlaceOrderRequestSchema,
    caller: Caller = Depends(get_caller),
    workflow: OrderWorkflow = Depends(get_workflow),
):
    if caller.customer_id and caller.session_id:
        _cart_id(caller)

    result = workflow.place_order(
        PlaceOrderRequest(
            customer_id=caller.customer_id,
            session_id=None if caller.customer_id else caller.session_id,
            **body.model_dump(),
        )
    )
    if not result.is_ok:
        return error_response(result)
    return OrderSummaryResponse(**result.value.__dict__)


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    status: str | None = None,
    limit: int = Query(20),
    offset: int = Query(0, ge=0),
    customer_id: str = Depends(require_customer),
) -> OrderListResponse:
    page = orders_for_customer(customer_id, status=status, limit=limit, offset=offset)
    return OrderListResponse(
        orders=[OrderResponse.from_details(OrderDetails.from_order(o)) for o in page.orders],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, customer_id: str = Depends(require_customer)) -> OrderResponse:
    return OrderResponse.from_details(OrderDetails.from_order(order_for_customer(customer_id, order_id)))


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@admin_router.get("/stats", response_model=StatsResponse)
async def get_stats() -> StatsResponse:
    stats = store_stats()
    return StatsResponse(
        total_orders=stats.total_orders,
        pending_orders=stats.pending_orders,
        available_products=stats.available_products,
        monthly_revenue=stats.monthly_revenue,
        popular_products=[PopularProductResponse(**p.__dict__) for p in stats.popular_products],
    )


@admin_router.put("/orders/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: str,
    body: UpdateOrderRequest,
    manager: OrderLifecycleManager = Depends(get_lifecycle_manager),
):
    result = manager.update_order(order_id, status=body.status, payment_status=body.payment_status)
    if not result.is_ok:
        return error_response(result)
    return OrderResponse.from_details(result.value)


@admin_router.post("/products", status_code=201, response_model=ProductIdResponse)
async def create_product(body: CreateProductRequest) -> ProductIdResponse:
    data = body.model_dump()
    if data["specifications"] is not None:
        data["specifications"] = json.dumps(data["specifications"], ensure_ascii=False)
    product_id = current_domain.process(CreateProduct(**data), asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@admin_router.post("/products/{product_id}/restock", response_model=StockResponse)
async def restock_product(product_id: str, body: RestockRequest) -> StockResponse:
    stock = current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return StockResponse(product_id=product_id, stock_quantity=stock)


@admin_router.post("/products/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str) -> StatusResponse:
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@admin_router.post("/products/{product_id}/activate", response_model=StatusResponse)
async def activate_product(product_id: str) -> StatusResponse:
    current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()
