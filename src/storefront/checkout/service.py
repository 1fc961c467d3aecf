"""Checkout entry point — runs PlaceOrder under the cart and user locks.

The cart lock is taken first and the cart re-read under it. Locks on the
paying user and every variant in the cart follow, and all are held from
before the balance is read until the order has been committed and the
cart cleared. A checkout that cannot get the locks
within ``CHECKOUT_LOCK_TIMEOUT`` seconds is refused with
CheckoutInProgress and is never retried here: the competing request may
already have charged the user.
"""

import json
import time

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront import config
from storefront.cart.management import ClearCart, find_cart
from storefront.checkout.placement import PlaceOrder, validate_cart
from storefront.errors import CheckoutInProgress, ResourceBusy
from storefront.order.order import Order
from storefront.utils.locks import keyed_locks

logger = structlog.get_logger(__name__)


def _clear_cart(cart_id):
    """Delete the settled cart. The order stands even if this fails."""
    try:
        current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    except Exception:
        logger.exception("Failed to clear cart after checkout", cart_id=cart_id)


def checkout(cart_id, user_id=None, payment_method=None, customer=None, shipping_address=None) -> Order:
    """Settle the cart and return the created order.

    ``customer`` and ``shipping_address`` are plain dicts.
    """
    if not cart_id:
        raise ValidationError({"cart_id": ["Cart ID required"]})

    user_id = user_id or config.default_user_id()
    validate_cart(find_cart(cart_id))

    timeout = config.checkout_lock_timeout()
    started = time.monotonic()
    try:
        with keyed_locks.hold(f"cart:{cart_id}", timeout=timeout):
            # Lines can change until the cart lock is held
            cart = find_cart(cart_id)
            validate_cart(cart)

            keys = [f"user:{user_id}"]
            keys.extend(f"variant:{item.variant_id}" for item in cart.items)
            remaining = max(0.0, timeout - (time.monotonic() - started))

            with keyed_locks.hold(*keys, timeout=remaining):
                order_id = current_domain.process(
                    PlaceOrder(
                        cart_id=str(cart.id),
                        user_id=str(user_id),
                        payment_method=payment_method,
                        customer=json.dumps(customer) if customer else None,
                        shipping_address=json.dumps(shipping_address) if shipping_address else None,
                    ),
                    asynchronous=False,
                )
                _clear_cart(str(cart.id))
    except ResourceBusy as exc:
        raise CheckoutInProgress(exc.key) from exc

    elapsed = time.monotonic() - started
    if elapsed > timeout:
        logger.warning("Checkout exceeded its deadline", order_id=order_id, elapsed=round(elapsed, 3))

    return current_domain.repository_for(Order).get(order_id)
