"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands and aggregates.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from storefront.shared.money import format_price


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class PriceSchema(BaseModel):
    amount: int = Field(gt=0)
    currency_code: str = Field(min_length=1)


class CustomerSchema(BaseModel):
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


class ShippingAddressSchema(BaseModel):
    address1: str
    address2: str | None = None
    city: str
    state: str | None = None
    postal_code: str
    country: str


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class CartActionRequest(BaseModel):
    """One mutation of a cart. Which fields are required depends on ``action``."""

    action: Literal["add", "update", "remove"]
    cart_id: str | None = None
    product_id: str | None = None
    variant_id: str | None = None
    title: str = ""
    price: PriceSchema | None = None
    quantity: int | None = None
    item_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "action": "add",
                    "cart_id": "cart-001",
                    "product_id": "prod_01",
                    "variant_id": "variant_01",
                    "title": "Dust Hoodie",
                    "price": {"amount": 5000, "currency_code": "dust"},
                    "quantity": 1,
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Checkout Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    cart_id: str | None = None
    user_id: str | None = None
    payment_method: Literal["points", "fiat"] | None = None
    customer: CustomerSchema | None = None
    shipping_address: ShippingAddressSchema | None = None

    @field_validator("payment_method", mode="before")
    @classmethod
    def accept_dust_alias(cls, value):
        if isinstance(value, str) and value.lower() == "dust":
            return "points"
        return value


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class UpdateOrderStatusRequest(BaseModel):
    status: str


class MergeTrackingRequest(BaseModel):
    tracking_number: str | None = None
    carrier: str | None = None
    tracking_url: str | None = None
    estimated_delivery: str | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None


# ---------------------------------------------------------------------------
# Balance Request Schemas
# ---------------------------------------------------------------------------
class CreditRequest(BaseModel):
    user_id: str | None = None


class ReleaseAbandonedCartsRequest(BaseModel):
    idle_minutes: int | None = Field(default=None, ge=1)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartItemResponse(BaseModel):
    id: str
    product_id: str
    variant_id: str
    title: str
    quantity: int
    price: dict[str, Any]


class CartResponse(BaseModel):
    id: str | None
    items: list[CartItemResponse] = []
    total: int = 0
    currency: str
    formatted_total: str | None = None

    @classmethod
    def from_cart(cls, cart) -> "CartResponse":
        return cls(
            id=str(cart.id),
            items=[
                CartItemResponse(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    variant_id=str(item.variant_id),
                    title=item.title or "",
                    quantity=item.quantity,
                    price={"amount": item.price.amount, "currency_code": item.price.currency_code},
                )
                for item in cart.items
            ],
            total=cart.total,
            currency=cart.currency_code,
            formatted_total=None if cart.is_mixed else format_price(cart.total, cart.currency_code),
        )


def order_to_dict(order) -> dict[str, Any]:
    """Serialize an Order aggregate for API responses."""

    def _dump(value_object):
        if value_object is None:
            return None
        return {key: value for key, value in value_object.to_dict().items() if value is not None}

    return {
        "id": str(order.id),
        "user_id": str(order.user_id),
        "status": order.status,
        "payment_method": order.payment_method,
        "transaction_id": order.transaction_id,
        "total": order.total,
        "currency": order.currency_code,
        "formatted_total": format_price(order.total, order.currency_code),
        "items": [
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "variant_id": str(item.variant_id),
                "title": item.title or "",
                "quantity": item.quantity,
                "price": {"amount": item.price.amount, "currency_code": item.price.currency_code},
            }
            for item in order.items
        ],
        "customer": _dump(order.customer),
        "shipping_address": _dump(order.shipping_address),
        "tracking": _dump(order.tracking),
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
    }


class BalanceResponse(BaseModel):
    user_id: str
    balance: int
