"""Order fulfillment — status updates and tracking merges."""

from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)


@storefront.command(part_of="Order")
class MergeOrderTracking:
    """Merge the supplied tracking fields into the order; omitted fields are kept."""

    order_id = Identifier(required=True)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    tracking_url = String(max_length=500)
    estimated_delivery = String(max_length=100)
    shipped_at = DateTime()
    delivered_at = DateTime()


@storefront.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.set_status(command.status)
        repo.add(order)
        return order.status

    @handle(MergeOrderTracking)
    def merge_tracking(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.merge_tracking(
            tracking_number=command.tracking_number,
            carrier=command.carrier,
            tracking_url=command.tracking_url,
            estimated_delivery=command.estimated_delivery,
            shipped_at=command.shipped_at,
            delivered_at=command.delivered_at,
        )
        repo.add(order)
        return order.status
