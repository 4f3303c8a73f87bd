"""MuStore HTTP API package."""

from mustore.api.routes import (
    admin_router,
    cart_router,
    catalogue_router,
    favorites_router,
    order_router,
)

__all__ = ["catalogue_router", "cart_router", "favorites_router", "order_router", "admin_router"]
