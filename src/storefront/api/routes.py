"""FastAPI routes for the Storefront — carts, checkout, orders, balance and products."""

from fastapi import APIRouter, Cookie, Query, Response
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront import config
from storefront.api.schemas import (
    BalanceResponse,
    CartActionRequest,
    CartResponse,
    CheckoutRequest,
    CreditRequest,
    MergeTrackingRequest,
    ReleaseAbandonedCartsRequest,
    UpdateOrderStatusRequest,
    order_to_dict,
)
from storefront.cart import service as cart_service
from storefront.cart.abandonment import ReleaseAbandonedCarts
from storefront.cart.management import get_or_create_cart
from storefront.catalogue.ingestion import refresh_catalogue
from storefront.checkout.service import checkout as place_order
from storefront.errors import OperationNotAllowed
from storefront.ledger.balance import credit_points, get_balance
from storefront.order.fulfillment import MergeOrderTracking, UpdateOrderStatus
from storefront.order.order import PaymentMethod
from storefront.order.queries import get_order, list_orders_for_user
from storefront.utils.locks import process_exclusively


def _set_cart_cookie(response: Response, cart_id: str) -> None:
    response.set_cookie(
        key=config.CART_COOKIE_NAME,
        value=cart_id,
        max_age=config.CART_COOKIE_MAX_AGE,
        httponly=True,
        secure=config.is_production(),
        samesite="lax",
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("")
async def get_cart(
    response: Response,
    cart_id: str | None = Query(default=None),
    cart_cookie: str | None = Cookie(default=None, alias=config.CART_COOKIE_NAME),
):
    cart = get_or_create_cart(cart_id or cart_cookie)
    _set_cart_cookie(response, str(cart.id))
    return {"cart": CartResponse.from_cart(cart).model_dump()}


@cart_router.post("")
async def update_cart(
    body: CartActionRequest,
    response: Response,
    cart_cookie: str | None = Cookie(default=None, alias=config.CART_COOKIE_NAME),
):
    cart_id = body.cart_id or cart_cookie

    if body.action == "add":
        missing = [name for name in ("product_id", "variant_id", "price") if getattr(body, name) is None]
        if missing:
            raise ValidationError({name: ["is required"] for name in missing})
        cart_id = cart_service.add_item(
            cart_id,
            product_id=body.product_id,
            variant_id=body.variant_id,
            amount=body.price.amount,
            currency_code=body.price.currency_code,
            title=body.title,
            quantity=body.quantity or 1,
        )
    else:
        if not cart_id:
            raise ValidationError({"cart_id": ["is required"]})
        if not body.item_id:
            raise ValidationError({"item_id": ["is required"]})
        if body.action == "update":
            if body.quantity is None:
                raise ValidationError({"quantity": ["is required"]})
            cart_service.update_quantity(cart_id, body.item_id, body.quantity)
        else:
            cart_service.remove_item(cart_id, body.item_id)

    cart = get_or_create_cart(cart_id)
    _set_cart_cookie(response, str(cart.id))
    return {"cart": CartResponse.from_cart(cart).model_dump()}


@cart_router.delete("/{cart_id}")
async def clear_cart(cart_id: str, response: Response):
    cleared = cart_service.clear(cart_id)
    response.delete_cookie(config.CART_COOKIE_NAME)
    return {"cleared": cleared}


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("")
async def checkout(
    body: CheckoutRequest,
    response: Response,
    cart_cookie: str | None = Cookie(default=None, alias=config.CART_COOKIE_NAME),
):
    user_id = body.user_id or config.default_user_id()
    order = place_order(
        cart_id=body.cart_id or cart_cookie,
        user_id=user_id,
        payment_method=body.payment_method,
        customer=body.customer.model_dump(exclude_none=True) if body.customer else None,
        shipping_address=body.shipping_address.model_dump(exclude_none=True) if body.shipping_address else None,
    )
    response.delete_cookie(config.CART_COOKIE_NAME)

    result = {"success": True, "order": order_to_dict(order)}
    if order.payment_method == PaymentMethod.POINTS.value:
        result["message"] = "Order placed successfully with dust payment!"
        result["balance"] = get_balance(user_id)
    else:
        result["message"] = "Order placed successfully!"
    return result


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("")
async def list_orders(user_id: str | None = Query(default=None)):
    orders = list_orders_for_user(user_id or config.default_user_id())
    return {"orders": [order_to_dict(order) for order in orders]}


@order_router.get("/{order_id}")
async def get_order_detail(order_id: str):
    return {"order": order_to_dict(get_order(order_id))}


@order_router.patch("/{order_id}/status")
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest):
    get_order(order_id)
    command = UpdateOrderStatus(order_id=order_id, status=body.status)
    process_exclusively(command, f"order:{order_id}", timeout=config.checkout_lock_timeout())
    return {"order": order_to_dict(get_order(order_id))}


@order_router.patch("/{order_id}/tracking")
async def merge_order_tracking(order_id: str, body: MergeTrackingRequest):
    get_order(order_id)
    command = MergeOrderTracking(order_id=order_id, **body.model_dump(exclude_none=True))
    process_exclusively(command, f"order:{order_id}", timeout=config.checkout_lock_timeout())
    return {"order": order_to_dict(get_order(order_id))}


# ---------------------------------------------------------------------------
# Balance Router
# ---------------------------------------------------------------------------
balance_router = APIRouter(prefix="/balance", tags=["balance"])


@balance_router.get("", response_model=BalanceResponse)
async def read_balance(user_id: str | None = Query(default=None)) -> BalanceResponse:
    user_id = user_id or config.default_user_id()
    return BalanceResponse(user_id=user_id, balance=get_balance(user_id))


@balance_router.post("/test-credit")
async def grant_test_credit(body: CreditRequest | None = None):
    """Credit a fixed amount of points to a user. Disabled in production."""
    if config.is_production():
        raise OperationNotAllowed("Test credits are disabled in production")

    user_id = (body.user_id if body else None) or config.default_user_id()
    amount = config.test_credit_amount()
    balance = credit_points(user_id, amount)
    return {
        "success": True,
        "user_id": user_id,
        "credited": amount,
        "balance": balance,
        "message": f"Credited {amount} dust",
    }


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("")
async def list_products():
    products = refresh_catalogue()
    return {"products": [product.to_dict() for product in products], "count": len(products)}


# ---------------------------------------------------------------------------
# Maintenance Router
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/release-abandoned-carts")
async def release_abandoned_carts(body: ReleaseAbandonedCartsRequest | None = None):
    """Clear idle carts and return their reserved stock.

    Designed to be called periodically by an external scheduler.
    """
    command = ReleaseAbandonedCarts(idle_minutes=body.idle_minutes if body else None)
    released = current_domain.process(command, asynchronous=False)
    return {"released": released}
