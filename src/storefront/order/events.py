"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was settled and the order recorded as confirmed."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    total = Integer(required=True)
    currency_code = String(required=True, max_length=10)
    payment_method = String(required=True, max_length=10)
    transaction_id = String(required=True, max_length=50)
    customer_email = String(max_length=254)
    customer_name = String(max_length=255)
    items = Text(required=True)  # JSON: list of {title, quantity, amount, currency_code}
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = "v1"

    order_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    reason = String(max_length=50)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderTrackingUpdated:
    __version__ = "v1"

    order_id = Identifier(required=True)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    shipped_at = DateTime()
    delivered_at = DateTime()
    updated_at = DateTime(required=True)
