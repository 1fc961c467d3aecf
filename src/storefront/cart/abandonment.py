"""Cart abandonment — release stock held by idle carts.

Designed to be triggered periodically by an external scheduler through the
maintenance endpoint. Carts idle beyond the threshold are cleared, which
returns their reservations to available stock.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import DateTime, Integer
from protean.utils.globals import current_domain

from storefront import config
from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.errors import ResourceBusy

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class ReleaseAbandonedCarts:
    """Clear carts that have not changed for ``idle_minutes``."""

    idle_minutes = Integer(min_value=1)  # Defaults to CART_IDLE_MINUTES
    as_of = DateTime()  # Optional: defaults to now


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@storefront.command_handler(part_of=Cart)
class ReleaseAbandonedCartsHandler:
    @handle(ReleaseAbandonedCarts)
    def release_abandoned_carts(self, command):
        as_of = _as_utc(command.as_of or datetime.now(UTC))
        idle_minutes = command.idle_minutes or config.cart_idle_minutes()
        cutoff = as_of - timedelta(minutes=idle_minutes)

        # Queries default to 100 rows; every cart has to be inspected
        carts = current_domain.repository_for(Cart)._dao.query.limit(None).all().items
        idle = [cart for cart in carts if cart.updated_at and _as_utc(cart.updated_at) <= cutoff]

        if not idle:
            logger.info("No abandoned carts found", cutoff=cutoff.isoformat())
            return 0

        from storefront.cart import service as cart_service

        released = 0
        for cart in idle:
            try:
                if cart_service.clear(str(cart.id)):
                    released += 1
            except (ValidationError, InvalidOperationError, ResourceBusy) as exc:
                logger.warning("Failed to release abandoned cart", cart_id=str(cart.id), error=str(exc))

        logger.info("Abandoned carts released", released_count=released, idle_minutes=idle_minutes)
        return released
