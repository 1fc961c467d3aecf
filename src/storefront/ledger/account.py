"""PointsAccount aggregate — a user's balance of the in-app points currency.

The balance only moves through ``credit`` and ``debit``. A debit checks and
subtracts in one step and fails closed: when the amount exceeds the balance
nothing changes. Checkout goes through ``settle``, which debits and issues
the transaction id the order records.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.domain import storefront
from storefront.errors import InsufficientBalance
from storefront.ledger.events import PointsCredited, PointsDebited


class TransactionKind(Enum):
    CREDIT = "credit"
    DEBIT = "debit"


def new_transaction_id(prefix: str = "dust_tx") -> str:
    return f"{prefix}_{uuid4().hex[:16]}"


@storefront.entity(part_of="PointsAccount")
class PointsTransaction:
    """One movement of points, kept for audit."""

    transaction_id = String(required=True, max_length=50)
    kind = String(required=True, choices=TransactionKind)
    amount = Integer(required=True, min_value=1)
    balance_after = Integer(required=True, min_value=0)
    recorded_at = DateTime(required=True)


@storefront.aggregate
class PointsAccount:
    user_id = Identifier(identifier=True, required=True)
    balance = Integer(default=0, min_value=0)
    transactions = HasMany(PointsTransaction)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def balance_cannot_be_negative(self):
        if self.balance is not None and self.balance < 0:
            raise ValidationError({"balance": ["Balance cannot be negative"]})

    @classmethod
    def open(cls, user_id, opening_balance=0):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            balance=opening_balance,
            created_at=now,
            updated_at=now,
        )

    def _record(self, kind, amount, transaction_id):
        now = datetime.now(UTC)
        self.add_transactions(
            PointsTransaction(
                transaction_id=transaction_id,
                kind=kind.value,
                amount=amount,
                balance_after=self.balance,
                recorded_at=now,
            )
        )
        self.updated_at = now
        return now

    def credit(self, amount, transaction_id=None):
        """Add points unconditionally. Returns the new balance."""
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Credit amount must be positive"]})

        transaction_id = transaction_id or new_transaction_id("dust_cr")
        with atomic_change(self):
            self.balance += amount
            recorded_at = self._record(TransactionKind.CREDIT, amount, transaction_id)

        self.raise_(
            PointsCredited(
                user_id=str(self.user_id),
                transaction_id=transaction_id,
                amount=amount,
                balance=self.balance,
                credited_at=recorded_at,
            )
        )
        return self.balance

    def debit(self, amount, transaction_id=None):
        """Subtract points, failing closed when the balance is short.

        Returns the new balance.
        """
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Debit amount must be positive"]})
        if amount > self.balance:
            raise InsufficientBalance(balance=self.balance, required=amount)

        transaction_id = transaction_id or new_transaction_id()
        with atomic_change(self):
            self.balance -= amount
            recorded_at = self._record(TransactionKind.DEBIT, amount, transaction_id)

        self.raise_(
            PointsDebited(
                user_id=str(self.user_id),
                transaction_id=transaction_id,
                amount=amount,
                balance=self.balance,
                debited_at=recorded_at,
            )
        )
        return self.balance

    def settle(self, amount) -> str:
        """Debit ``amount`` for a purchase and return its transaction id."""
        transaction_id = new_transaction_id()
        self.debit(amount, transaction_id=transaction_id)
        return transaction_id
