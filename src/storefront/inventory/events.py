"""Domain events for the InventoryItem aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="InventoryItem")
class StockInitialized:
    __version__ = "v1"

    variant_id = Identifier(required=True)
    sku = String(max_length=100)
    quantity = Integer(required=True)
    initialized_at = DateTime(required=True)


@storefront.event(part_of="InventoryItem")
class StockReserved:
    """Units were put on hold for a cart."""

    __version__ = "v1"

    variant_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    quantity = Integer(required=True)
    available = Integer(required=True)
    reserved_at = DateTime(required=True)


@storefront.event(part_of="InventoryItem")
class StockReleased:
    """Held units went back to available stock."""

    __version__ = "v1"

    variant_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    quantity = Integer(required=True)
    available = Integer(required=True)
    released_at = DateTime(required=True)


@storefront.event(part_of="InventoryItem")
class StockFulfilled:
    """Units were sold at checkout and left the stock."""

    __version__ = "v1"

    variant_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    quantity = Integer(required=True)
    stocked = Integer(required=True)
    available = Integer(required=True)
    fulfilled_at = DateTime(required=True)
