"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartItemAdded:
    """A variant was added to the cart, or its line quantity increased."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True)
    amount = Integer(required=True)
    currency_code = String(required=True, max_length=10)


@storefront.event(part_of="Cart")
class CartQuantityUpdated:
    """The quantity of a cart line was changed."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True)
