"""Simulated fiat gateway — payments always succeed unless configured otherwise.

Used in development and tests in place of a real provider. Calls are
recorded for assertions.
"""

from uuid import uuid4

from storefront.checkout.gateway.port import ChargeResult, FiatGateway


class SimulatedGateway(FiatGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def charge(self, amount: int, currency_code: str, idempotency_key: str) -> ChargeResult:
        self.calls.append(
            {
                "method": "charge",
                "amount": amount,
                "currency_code": currency_code,
                "idempotency_key": idempotency_key,
            }
        )

        if self.should_succeed:
            return ChargeResult(success=True, transaction_id=f"fiat_tx_{uuid4().hex[:16]}")
        return ChargeResult(success=False, failure_reason=self.failure_reason)
