"""Read-side helpers over InventoryItem.

A variant without an inventory record is not stock-managed: it is always
available and reservation calls on it are skipped by the callers.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.inventory.stock import InventoryItem


def find_stock(variant_id) -> InventoryItem | None:
    try:
        return current_domain.repository_for(InventoryItem).get(str(variant_id))
    except ObjectNotFoundError:
        return None


def check_availability(variant_id, quantity: int) -> bool:
    stock = find_stock(variant_id)
    if stock is None:
        return True
    return stock.check_availability(quantity)


def available_quantity(variant_id) -> int | None:
    """Units available to sell, or None for variants that are not stock-managed."""
    stock = find_stock(variant_id)
    if stock is None:
        return None
    return stock.available_quantity
