"""Fiat payment gateway port (abstract interface).

Checkout charges fiat carts through this contract so the provider
integration can be swapped without touching the settlement flow.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ChargeResult:
    """Result of a charge attempt."""

    success: bool
    transaction_id: str | None = None
    failure_reason: str | None = None


class FiatGateway(ABC):
    """Abstract fiat payment gateway."""

    @abstractmethod
    def charge(self, amount: int, currency_code: str, idempotency_key: str) -> ChargeResult:
        """Charge ``amount`` minor units of ``currency_code``."""
        ...
