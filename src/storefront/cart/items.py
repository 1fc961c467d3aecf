"""Cart item management — commands and handler.

Line changes adjust the inventory reservation for stock-managed variants in
the same unit of work, so a failed reservation leaves the cart unchanged.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront import config
from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.inventory.availability import find_stock
from storefront.inventory.stock import InventoryItem
from storefront.shared.money import Money


@storefront.command(part_of="Cart")
class AddToCart:
    cart_id = Identifier()  # A new cart is created when absent or unknown
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    title = String(max_length=255, default="")
    amount = Integer(required=True, min_value=1)
    currency_code = String(required=True, max_length=10)
    quantity = Integer(default=1, min_value=config.MIN_QUANTITY, max_value=config.MAX_QUANTITY)


@storefront.command(part_of="Cart")
class UpdateCartQuantity:
    """Set a line's quantity; zero or less removes the line."""

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    new_quantity = Integer(required=True, max_value=config.MAX_QUANTITY)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


def _load_or_create(repo, cart_id):
    if cart_id:
        try:
            return repo.get(cart_id)
        except ObjectNotFoundError:
            pass
    return Cart.create(cart_id=cart_id)


def _adjust_reservation(cart_id, variant_id, delta):
    """Reserve (delta > 0) or release (delta < 0) units of a variant for a cart."""
    if delta == 0:
        return

    stock = find_stock(variant_id)
    if stock is None:
        return

    if delta > 0:
        stock.reserve(cart_id=str(cart_id), quantity=delta)
    else:
        stock.release(cart_id=str(cart_id), quantity=-delta)
    current_domain.repository_for(InventoryItem).add(stock)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = _load_or_create(repo, command.cart_id)

        quantity = command.quantity or 1
        cart.add_item(
            product_id=command.product_id,
            variant_id=command.variant_id,
            title=command.title,
            price=Money.of(command.amount, command.currency_code),
            quantity=quantity,
        )
        _adjust_reservation(cart.id, command.variant_id, quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)

        item = cart.find_item(command.item_id)
        if item is None:
            if command.new_quantity <= 0:
                return str(cart.id)
            raise ValidationError({"item_id": ["Item not found in cart"]})

        variant_id = item.variant_id
        previous_quantity = item.quantity
        cart.update_item_quantity(command.item_id, command.new_quantity)
        _adjust_reservation(cart.id, variant_id, max(command.new_quantity, 0) - previous_quantity)
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)

        removed = cart.remove_item(command.item_id)
        if removed is not None:
            _adjust_reservation(cart.id, removed.variant_id, -removed.quantity)
            repo.add(cart)
        return str(cart.id)
