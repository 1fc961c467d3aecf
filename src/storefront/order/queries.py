"""Order lookups."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.errors import NotFound
from storefront.order.order import Order


def get_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError:
        raise NotFound("Order not found", {"order_id": str(order_id)}) from None


def list_orders_for_user(user_id) -> list[Order]:
    """All of a user's orders, newest first."""
    query = current_domain.repository_for(Order)._dao.query.filter(user_id=str(user_id))
    return query.order_by("-created_at").limit(None).all().items
