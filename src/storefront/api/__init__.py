from storefront.api.context import bind_request_context
from storefront.api.errors import register_error_handlers
from storefront.api.routes import (
    balance_router,
    cart_router,
    checkout_router,
    maintenance_router,
    order_router,
    product_router,
)

__all__ = [
    "bind_request_context",
    "balance_router",
    "cart_router",
    "checkout_router",
    "maintenance_router",
    "order_router",
    "product_router",
    "register_error_handlers",
]
