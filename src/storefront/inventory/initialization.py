"""Stock initialization — command and handler.

Catalogue ingestion pushes one InitializeStock per variant on every product
fetch, so initializing a variant that already has a record is a no-op.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.inventory.stock import InventoryItem

logger = structlog.get_logger(__name__)


@storefront.command(part_of="InventoryItem")
class InitializeStock:
    """Create the inventory record for a product variant if it does not exist."""

    variant_id = Identifier(required=True)
    product_id = Identifier()
    sku = String(max_length=100, default="")
    quantity = Integer(default=0, min_value=0)


@storefront.command_handler(part_of=InventoryItem)
class InitializeStockHandler:
    @handle(InitializeStock)
    def initialize_stock(self, command):
        repo = current_domain.repository_for(InventoryItem)
        try:
            existing = repo.get(command.variant_id)
        except ObjectNotFoundError:
            existing = None

        if existing is not None:
            return False

        item = InventoryItem.create(
            variant_id=command.variant_id,
            product_id=command.product_id,
            sku=command.sku or "",
            quantity=command.quantity or 0,
        )
        repo.add(item)
        logger.info("Stock initialized", variant_id=str(command.variant_id), quantity=item.stocked_quantity)
        return True
