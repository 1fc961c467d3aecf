"""InventoryItem aggregate — stock and reservations for one product variant.

Stock Level Model:
    stocked:   Units physically available to sell
    reserved:  Held by carts, not yet sold
    available: stocked - reserved

Carts reserve stock when a line is added and release it when the line
shrinks, is removed, or the cart is abandoned. Checkout fulfills the
cart's reservation, which decrements both stocked and reserved units.

The aggregate is keyed by variant id. Variants without an InventoryItem
are not stock-managed.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.domain import storefront
from storefront.inventory.events import (
    StockFulfilled,
    StockInitialized,
    StockReleased,
    StockReserved,
)


@storefront.entity(part_of="InventoryItem")
class Reservation:
    """Units of the variant held by one cart."""

    cart_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    reserved_at = DateTime(required=True)


@storefront.aggregate
class InventoryItem:
    variant_id = Identifier(identifier=True, required=True)
    product_id = Identifier()
    sku = String(max_length=100, default="")
    stocked_quantity = Integer(default=0, min_value=0)
    reserved_quantity = Integer(default=0, min_value=0)
    reservations = HasMany(Reservation)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def reserved_cannot_exceed_stocked(self):
        if self.reserved_quantity > self.stocked_quantity:
            raise ValidationError(
                {
                    "reserved_quantity": [
                        f"Reserved quantity {self.reserved_quantity} exceeds stocked quantity {self.stocked_quantity}"
                    ]
                }
            )

    @invariant.post
    def reserved_must_match_reservations(self):
        held = sum(r.quantity for r in self.reservations)
        if self.reserved_quantity != held:
            raise ValidationError({"reserved_quantity": ["Reserved quantity does not match reservations"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, variant_id, sku="", quantity=0, product_id=None):
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        now = datetime.now(UTC)
        item = cls(
            variant_id=variant_id,
            product_id=product_id,
            sku=sku or "",
            stocked_quantity=quantity,
            reserved_quantity=0,
            created_at=now,
            updated_at=now,
        )
        item.raise_(
            StockInitialized(
                variant_id=str(variant_id),
                sku=sku or "",
                quantity=quantity,
                initialized_at=now,
            )
        )
        return item

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def available_quantity(self) -> int:
        return self.stocked_quantity - self.reserved_quantity

    def check_availability(self, quantity) -> bool:
        return self.available_quantity >= quantity

    def reservation_for(self, cart_id):
        return next((r for r in self.reservations if str(r.cart_id) == str(cart_id)), None)

    # -------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------
    def reserve(self, cart_id, quantity):
        """Hold ``quantity`` more units for a cart."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        available = self.available_quantity
        if available < quantity:
            raise ValidationError({"quantity": [f"Insufficient stock: {available} available, {quantity} requested"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            reservation = self.reservation_for(cart_id)
            if reservation:
                reservation.quantity += quantity
            else:
                self.add_reservations(Reservation(cart_id=cart_id, quantity=quantity, reserved_at=now))
            self.reserved_quantity += quantity
            self.updated_at = now

        self.raise_(
            StockReserved(
                variant_id=str(self.variant_id),
                cart_id=str(cart_id),
                quantity=quantity,
                available=self.available_quantity,
                reserved_at=now,
            )
        )

    def release(self, cart_id, quantity=None):
        """Return a cart's held units to available stock.

        Releases the whole reservation when ``quantity`` is None. Releasing
        more than is held is floored at zero.
        """
        reservation = self.reservation_for(cart_id)
        if reservation is None:
            return 0

        released = reservation.quantity if quantity is None else min(quantity, reservation.quantity)
        if released <= 0:
            return 0

        now = datetime.now(UTC)
        with atomic_change(self):
            if released == reservation.quantity:
                self.remove_reservations(reservation)
            else:
                reservation.quantity -= released
            self.reserved_quantity = max(0, self.reserved_quantity - released)
            self.updated_at = now

        self.raise_(
            StockReleased(
                variant_id=str(self.variant_id),
                cart_id=str(cart_id),
                quantity=released,
                available=self.available_quantity,
                released_at=now,
            )
        )
        return released

    def fulfill(self, cart_id, quantity):
        """Sell ``quantity`` units to a cart, consuming its reservation.

        Units beyond what the cart already holds must be available.
        """
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        reservation = self.reservation_for(cart_id)
        held = reservation.quantity if reservation else 0
        consumed = min(held, quantity)
        shortfall = quantity - consumed
        if shortfall > self.available_quantity:
            raise ValidationError(
                {"quantity": [f"Insufficient stock: {self.available_quantity + consumed} available, {quantity} requested"]}
            )

        now = datetime.now(UTC)
        with atomic_change(self):
            if reservation:
                self.remove_reservations(reservation)
            # Any surplus the cart held beyond the sold quantity goes back to stock
            self.reserved_quantity -= held
            self.stocked_quantity -= quantity
            self.updated_at = now

        self.raise_(
            StockFulfilled(
                variant_id=str(self.variant_id),
                cart_id=str(cart_id),
                quantity=quantity,
                stocked=self.stocked_quantity,
                available=self.available_quantity,
                fulfilled_at=now,
            )
        )
