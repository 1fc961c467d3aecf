"""Cart management — creation, lookup and clearing."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.inventory.availability import find_stock
from storefront.inventory.stock import InventoryItem

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class CreateCart:
    """Create an empty cart, optionally under a client-issued identifier."""

    cart_id = Identifier()


@storefront.command(part_of="Cart")
class ClearCart:
    """Delete a cart entirely, returning any stock it still holds."""

    cart_id = Identifier(required=True)


def find_cart(cart_id) -> Cart | None:
    if not cart_id:
        return None
    try:
        return current_domain.repository_for(Cart).get(str(cart_id))
    except ObjectNotFoundError:
        return None


def get_or_create_cart(cart_id=None) -> Cart:
    """Return the cart for ``cart_id``, creating an empty one when unknown."""
    cart = find_cart(cart_id)
    if cart is not None:
        return cart

    new_id = current_domain.process(CreateCart(cart_id=cart_id), asynchronous=False)
    return current_domain.repository_for(Cart).get(new_id)


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = Cart.create(cart_id=command.cart_id)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        try:
            cart = repo.get(command.cart_id)
        except ObjectNotFoundError:
            return False

        stock_repo = current_domain.repository_for(InventoryItem)
        for variant_id in {str(item.variant_id) for item in cart.items}:
            stock = find_stock(variant_id)
            if stock is not None and stock.release(cart_id=str(cart.id)):
                stock_repo.add(stock)

        repo._dao.delete(cart)
        logger.info("Cart cleared", cart_id=str(cart.id), item_count=len(cart.items))
        return True
