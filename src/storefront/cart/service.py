"""Cart operations serialized per cart and per variant.

Each mutation takes the cart's lock first and only then reads the cart to
find the variants whose reservations it may touch. Those variant locks are
taken next, so the command cannot interleave with a checkout of the same
cart or with another cart reserving the same stock.
"""

import time

from storefront import config
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.management import ClearCart, find_cart
from storefront.utils.locks import keyed_locks, process_exclusively


def _line_variants(cart, item_id):
    item = cart.find_item(item_id) if cart else None
    return [str(item.variant_id)] if item else []


def _cart_variants(cart):
    return sorted({str(item.variant_id) for item in cart.items}) if cart else []


def _process_for_cart(command, cart_id, variants_of):
    """Process ``command`` under the cart lock and the locks of ``variants_of(cart)``.

    ``variants_of`` is evaluated while the cart lock is held.
    """
    timeout = config.checkout_lock_timeout()
    deadline = time.monotonic() + timeout
    cart_keys = [f"cart:{cart_id}"] if cart_id else []

    with keyed_locks.hold(*cart_keys, timeout=timeout):
        variant_keys = [f"variant:{variant_id}" for variant_id in variants_of(find_cart(cart_id))]
        remaining = max(0.0, deadline - time.monotonic())
        return process_exclusively(command, *variant_keys, timeout=remaining)


def add_item(cart_id, product_id, variant_id, amount, currency_code, title="", quantity=1) -> str:
    """Add a line and return the id of the (possibly new) cart."""
    command = AddToCart(
        cart_id=cart_id,
        product_id=product_id,
        variant_id=variant_id,
        title=title,
        amount=amount,
        currency_code=currency_code,
        quantity=quantity,
    )
    return _process_for_cart(command, cart_id, lambda cart: [variant_id])


def update_quantity(cart_id, item_id, quantity) -> str:
    command = UpdateCartQuantity(cart_id=cart_id, item_id=item_id, new_quantity=quantity)
    return _process_for_cart(command, cart_id, lambda cart: _line_variants(cart, item_id))


def remove_item(cart_id, item_id) -> str:
    command = RemoveFromCart(cart_id=cart_id, item_id=item_id)
    return _process_for_cart(command, cart_id, lambda cart: _line_variants(cart, item_id))


def clear(cart_id) -> bool:
    return _process_for_cart(ClearCart(cart_id=cart_id), cart_id, _cart_variants)
