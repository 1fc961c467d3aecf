"""Money value object and currency-family classification.

Two currency families exist: fiat (amounts in minor units, e.g. cents) and
points (whole "dust" points). Several codes may denominate the points
currency; they collapse to a single canonical code on the way in so the
rest of the domain never compares alias strings.
"""

from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Integer, String

from storefront import config
from storefront.domain import storefront


class CurrencyFamily(Enum):
    FIAT = "fiat"
    POINTS = "points"


def normalize_currency_code(code: str | None) -> str:
    """Lowercase ``code`` and fold points aliases into the canonical code."""
    if not code:
        raise ValidationError({"currency_code": ["Currency code is required"]})

    normalized = code.strip().lower()
    if normalized in config.points_currency_aliases():
        return config.POINTS_CURRENCY
    return normalized


def currency_family(code: str) -> CurrencyFamily:
    if normalize_currency_code(code) == config.POINTS_CURRENCY:
        return CurrencyFamily.POINTS
    return CurrencyFamily.FIAT


def format_price(amount: int, currency_code: str) -> str:
    """Human-readable price for emails and API payloads."""
    code = normalize_currency_code(currency_code)
    if currency_family(code) == CurrencyFamily.POINTS:
        return f"{amount:,} ⚡ Dust"
    if code == "usd":
        return f"${amount / 100:,.2f}"
    return f"{amount / 100:,.2f} {code.upper()}"


@storefront.value_object
class Money:
    """An amount tagged with its canonical currency code and family."""

    amount = Integer(required=True, min_value=0)
    currency_code = String(required=True, max_length=10)
    family = String(required=True, choices=CurrencyFamily)

    @invariant.post
    def family_must_match_currency(self):
        if currency_family(self.currency_code) != CurrencyFamily(self.family):
            raise ValidationError({"family": [f"Currency {self.currency_code} does not belong to {self.family}"]})

    @classmethod
    def of(cls, amount, currency_code):
        code = normalize_currency_code(currency_code)
        return cls(
            amount=amount,
            currency_code=code,
            family=currency_family(code).value,
        )

    @property
    def is_points(self) -> bool:
        return CurrencyFamily(self.family) == CurrencyFamily.POINTS
