"""Order notifications — emails the customer when an order is placed.

Runs after the order has committed. Delivery problems are logged and
swallowed: a failed email never fails or rolls back a checkout.
"""

import json

import structlog
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.errors import UpstreamUnavailable
from storefront.notifications.channel import get_email_channel
from storefront.notifications.channel.email_port import OutgoingEmail
from storefront.notifications.templates.order_confirmation import OrderConfirmationTemplate
from storefront.order.events import OrderPlaced
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Order)
class OrderNotificationsHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        if not event.customer_email:
            logger.info("Order has no customer email, skipping confirmation", order_id=str(event.order_id))
            return

        content = OrderConfirmationTemplate.render(
            {
                "order_id": str(event.order_id),
                "total": event.total,
                "currency_code": event.currency_code,
                "items": json.loads(event.items) if event.items else [],
            }
        )

        try:
            receipt = get_email_channel().send(
                OutgoingEmail(
                    to=event.customer_email,
                    subject=content["subject"],
                    text=content["body"],
                    html=content["html_body"],
                    order_id=str(event.order_id),
                )
            )
        except UpstreamUnavailable as exc:
            logger.warning("Order confirmation not sent", order_id=str(event.order_id), error=exc.message)
            return
        except Exception:
            logger.exception("Order confirmation raised", order_id=str(event.order_id))
            return

        if not receipt.delivered:
            logger.warning(
                "Order confirmation delivery failed",
                order_id=str(event.order_id),
                error=receipt.error,
            )
            return

        logger.info(
            "Order confirmation sent",
            order_id=str(event.order_id),
            message_id=receipt.message_id,
        )
