"""Business-rule errors raised by the storefront domain.

Every error carries a stable ``code``, the HTTP status the API layer
answers with, and a ``details`` dict that is merged into the JSON error
body so clients can render a useful message.
"""

from typing import Any


class StorefrontError(Exception):
    """Base class for storefront business-rule failures."""

    code = "storefront_error"
    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code, **self.details}


class CurrencyConflict(StorefrontError):
    """Item currency family differs from the family already in the cart."""

    code = "currency_conflict"


class MixedCurrency(StorefrontError):
    code = "mixed_currency"

    def __init__(self, currencies):
        super().__init__(
            "Cart contains items with different currencies. Please checkout items with the same currency separately.",
            {"currencies": sorted(currencies)},
        )


class InvalidCartComposition(StorefrontError):
    code = "invalid_cart_composition"


class EmptyCart(StorefrontError):
    code = "empty_cart"

    def __init__(self, message: str = "Cart is empty or not found"):
        super().__init__(message)


class InsufficientBalance(StorefrontError):
    code = "insufficient_balance"

    def __init__(self, balance: int, required: int):
        self.balance = balance
        self.required = required
        super().__init__("Insufficient dust balance", {"balance": balance, "required": required})


class IllegalTransition(StorefrontError):
    code = "illegal_transition"

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot transition from {current} to {target}",
            {"current": current, "target": target},
        )


class PaymentDeclined(StorefrontError):
    code = "payment_declined"
    status_code = 402


class NotFound(StorefrontError):
    code = "not_found"
    status_code = 404


class ResourceBusy(StorefrontError):
    """Another request holds the lock on a cart, user or variant."""

    code = "resource_busy"
    status_code = 409

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"{key} is being modified by another request", {"resource": key})


class CheckoutInProgress(ResourceBusy):
    """Another checkout holds the cart or user lock.

    The outcome of the competing request is unknown, so the caller must
    inspect orders and balance before retrying.
    """

    code = "checkout_in_progress"

    def __init__(self, key: str):
        super().__init__(key, "Checkout already in progress for this cart or user. Check your orders before retrying.")


class UpstreamUnavailable(StorefrontError):
    """A backing service (catalogue, email provider) could not be reached."""

    code = "upstream_unavailable"
    status_code = 502


class OperationNotAllowed(StorefrontError):
    """The operation is disabled in the current environment."""

    code = "operation_not_allowed"
    status_code = 403
