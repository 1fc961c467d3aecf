"""Cart aggregate — the shopper's pending selection of product variants.

A cart holds items of a single currency family. Fiat and points items can
never share a cart; the guard runs before the line is added so a rejected
add leaves the cart untouched. The total and currency code are recomputed
after every mutation.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, ValueObject

from storefront import config
from storefront.cart.events import CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.domain import storefront
from storefront.errors import CurrencyConflict
from storefront.shared.money import CurrencyFamily, Money

_CONFLICT_MESSAGES = {
    CurrencyFamily.POINTS: (
        "Cannot add dust products to a cart with regular products. Please checkout your current cart first."
    ),
    CurrencyFamily.FIAT: (
        "Cannot add regular products to a cart with dust products. Please checkout your current cart first."
    ),
}


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    title = String(max_length=255, default="")
    quantity = Integer(required=True, min_value=config.MIN_QUANTITY, max_value=config.MAX_QUANTITY)
    price = ValueObject(Money, required=True)
    added_at = DateTime()

    @property
    def line_total(self) -> int:
        return self.price.amount * self.quantity


@storefront.aggregate
class Cart:
    items = HasMany(CartItem)
    total = Integer(default=0, min_value=0)
    currency_code = String(max_length=10, default=config.DEFAULT_CURRENCY)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_match_items(self):
        expected = sum(item.line_total for item in self.items)
        if self.total != expected:
            raise ValidationError({"total": [f"Cart total {self.total} does not match item total {expected}"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, cart_id=None):
        now = datetime.now(UTC)
        fields = {
            "total": 0,
            "currency_code": config.DEFAULT_CURRENCY,
            "created_at": now,
            "updated_at": now,
        }
        if cart_id:
            fields["id"] = cart_id
        return cls(**fields)

    # -------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------
    @property
    def family(self) -> CurrencyFamily | None:
        """Currency family of the items in the cart, None when empty."""
        if not self.items:
            return None
        return CurrencyFamily(self.items[0].price.family)

    @property
    def is_mixed(self) -> bool:
        return self.currency_code == config.MIXED_CURRENCY

    def currency_codes(self) -> set[str]:
        """Distinct currency codes present in the cart."""
        return {item.price.currency_code for item in self.items}

    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def snapshot(self) -> list[dict]:
        """Plain copy of the current lines, detached from the aggregate."""
        return [
            {
                "product_id": str(item.product_id),
                "variant_id": str(item.variant_id),
                "title": item.title or "",
                "quantity": item.quantity,
                "amount": item.price.amount,
                "currency_code": item.price.currency_code,
            }
            for item in self.items
        ]

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, variant_id, title, price, quantity=1):
        """Add ``quantity`` of a variant, merging into an existing line.

        Returns the affected line.
        """
        incoming = CurrencyFamily(price.family)
        if self.family is not None and incoming != self.family:
            raise CurrencyConflict(
                _CONFLICT_MESSAGES[incoming],
                {"cart_currency": self.currency_code, "item_currency": price.currency_code},
            )

        existing = next((i for i in self.items if str(i.variant_id) == str(variant_id)), None)
        if existing and existing.quantity + quantity > config.MAX_QUANTITY:
            raise ValidationError(
                {"quantity": [f"At most {config.MAX_QUANTITY} per item, {existing.quantity} already in cart"]}
            )
        now = datetime.now(UTC)

        with atomic_change(self):
            if existing:
                existing.quantity += quantity
                line = existing
            else:
                line = CartItem(
                    product_id=product_id,
                    variant_id=variant_id,
                    title=title or "",
                    quantity=quantity,
                    price=price,
                    added_at=now,
                )
                self.add_items(line)
            self._recompute()
            self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(line.id),
                product_id=str(product_id),
                variant_id=str(variant_id),
                quantity=quantity,
                amount=price.amount,
                currency_code=price.currency_code,
            )
        )
        return line

    def update_item_quantity(self, item_id, quantity):
        """Set a line's quantity. Zero or less removes the line."""
        if quantity <= 0:
            return self.remove_item(item_id)

        item = self.find_item(item_id)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        previous_quantity = item.quantity
        with atomic_change(self):
            item.quantity = quantity
            self._recompute()
            self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                variant_id=str(item.variant_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )
        return item

    def remove_item(self, item_id):
        """Drop a line if present. Returns the removed line or None."""
        item = self.find_item(item_id)
        if item is None:
            return None

        with atomic_change(self):
            self.remove_items(item)
            self._recompute()
            self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                variant_id=str(item.variant_id),
                quantity=item.quantity,
            )
        )
        return item

    def _recompute(self):
        self.total = sum(item.line_total for item in self.items)
        codes = self.currency_codes()
        if not codes:
            self.currency_code = config.DEFAULT_CURRENCY
        elif len(codes) == 1:
            self.currency_code = codes.pop()
        else:
            self.currency_code = config.MIXED_CURRENCY
