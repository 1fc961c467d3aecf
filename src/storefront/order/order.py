"""Order aggregate — an immutable record of a settled cart plus its fulfillment status.

Orders are created once, at checkout, in the CONFIRMED state. Items are a
copy of the cart lines taken at settlement time. After creation only the
status and tracking information change, and orders are never deleted.

State Machine:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED → COMPLETED
    CANCELLED (from any non-terminal state)

Tracking data drives status forward: the first ``shipped_at`` moves the
order to SHIPPED and ``delivered_at`` moves it to DELIVERED. Both are
idempotent and never move the status backward.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.errors import IllegalTransition
from storefront.order.events import OrderPlaced, OrderStatusChanged, OrderTrackingUpdated
from storefront.shared.money import Money


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    POINTS = "points"
    FIAT = "fiat"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Position along the forward path, used for tracking-driven advances
_PROGRESSION = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.COMPLETED,
]

_TRACKING_FIELDS = (
    "tracking_number",
    "carrier",
    "tracking_url",
    "estimated_delivery",
    "shipped_at",
    "delivered_at",
)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class CustomerDetails:
    email = String(required=True, max_length=254)
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    phone = String(max_length=30)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured at checkout and never changed."""

    address1 = String(required=True, max_length=255)
    address2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@storefront.value_object(part_of="Order")
class OrderTracking:
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    tracking_url = String(max_length=500)
    estimated_delivery = String(max_length=100)
    shipped_at = DateTime()
    delivered_at = DateTime()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    title = String(max_length=255, default="")
    quantity = Integer(required=True, min_value=1)
    price = ValueObject(Money, required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total = Integer(required=True, min_value=0)
    currency_code = String(required=True, max_length=10)
    status = String(choices=OrderStatus, default=OrderStatus.CONFIRMED.value)
    payment_method = String(required=True, choices=PaymentMethod)
    transaction_id = String(required=True, max_length=50)
    customer = ValueObject(CustomerDetails)
    shipping_address = ValueObject(ShippingAddress)
    tracking = ValueObject(OrderTracking)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        items_data,
        currency_code,
        payment_method,
        transaction_id,
        customer=None,
        shipping_address=None,
    ):
        """Create a confirmed order from a snapshot of cart lines.

        ``customer`` and ``shipping_address`` are CustomerDetails and
        ShippingAddress value objects, or None.
        """
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=line["product_id"],
                variant_id=line["variant_id"],
                title=line.get("title", ""),
                quantity=line["quantity"],
                price=Money.of(line["amount"], line["currency_code"]),
            )
            for line in items_data
        ]
        total = sum(item.price.amount * item.quantity for item in items)

        order = cls(
            user_id=user_id,
            total=total,
            currency_code=currency_code,
            status=OrderStatus.CONFIRMED.value,
            payment_method=payment_method,
            transaction_id=transaction_id,
            customer=customer,
            shipping_address=shipping_address,
            created_at=now,
            updated_at=now,
        )
        order.add_items(items)
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                total=total,
                currency_code=currency_code,
                payment_method=payment_method,
                transaction_id=transaction_id,
                customer_email=order.customer.email if order.customer else None,
                customer_name=order.customer.full_name if order.customer else None,
                items=json.dumps(
                    [
                        {
                            "title": item.title,
                            "quantity": item.quantity,
                            "amount": item.price.amount,
                            "currency_code": item.price.currency_code,
                        }
                        for item in items
                    ]
                ),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise IllegalTransition(current.value, target_status.value)

    def _move_to(self, target_status, reason):
        previous = self.status
        self.status = target_status.value
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target_status.value,
                reason=reason,
                changed_at=now,
            )
        )

    def set_status(self, status):
        """Move to ``status`` along the transition table.

        Setting the current status again is a no-op. Returns True when the
        status changed.
        """
        target = OrderStatus(status)
        if target == OrderStatus(self.status):
            return False

        self._assert_can_transition(target)
        self._move_to(target, reason="status_update")
        return True

    def _advance_to(self, target, reason):
        """Move forward to ``target`` unless the order is at or past it."""
        current = OrderStatus(self.status)
        if current == OrderStatus.CANCELLED:
            return False
        if _PROGRESSION.index(current) >= _PROGRESSION.index(target):
            return False
        self._move_to(target, reason=reason)
        return True

    # -------------------------------------------------------------------
    # Tracking
    # -------------------------------------------------------------------
    def merge_tracking(self, **changes):
        """Shallow-merge tracking fields and derive status from them.

        Fields passed as None are left untouched.
        """
        unknown = set(changes) - set(_TRACKING_FIELDS)
        if unknown:
            raise ValidationError({"tracking": [f"Unknown tracking fields: {', '.join(sorted(unknown))}"]})

        current = {field: getattr(self.tracking, field) if self.tracking else None for field in _TRACKING_FIELDS}
        merged = dict(current)
        merged.update({key: value for key, value in changes.items() if value is not None})

        if merged != current:
            self.tracking = OrderTracking(**merged)
            now = datetime.now(UTC)
            self.updated_at = now
            self.raise_(
                OrderTrackingUpdated(
                    order_id=str(self.id),
                    tracking_number=merged.get("tracking_number"),
                    carrier=merged.get("carrier"),
                    shipped_at=merged.get("shipped_at"),
                    delivered_at=merged.get("delivered_at"),
                    updated_at=now,
                )
            )

        if merged.get("shipped_at"):
            self._advance_to(OrderStatus.SHIPPED, reason="tracking_shipped")
        if merged.get("delivered_at"):
            self._advance_to(OrderStatus.DELIVERED, reason="tracking_delivered")
