"""Application tests for points balance and crediting."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.ledger.account import PointsAccount
from storefront.ledger.balance import CreditPoints, credit_points, get_balance


class TestBalance:
    def test_unknown_user_has_opening_balance(self):
        assert get_balance("user-new") == 0

    def test_opening_balance_is_configurable(self, monkeypatch):
        monkeypatch.setenv("POINTS_OPENING_BALANCE", "250")
        assert get_balance("user-new") == 250


class TestCreditPoints:
    def test_credit_creates_account(self):
        balance = current_domain.process(CreditPoints(user_id="user-001", amount=10000), asynchronous=False)
        assert balance == 10000
        account = current_domain.repository_for(PointsAccount).get("user-001")
        assert account.balance == 10000
        assert len(account.transactions) == 1

    def test_credits_accumulate(self):
        credit_points("user-001", 100)
        assert credit_points("user-001", 50) == 150
        assert get_balance("user-001") == 150

    def test_non_positive_credit_rejected(self):
        with pytest.raises(ValidationError):
            current_domain.process(CreditPoints(user_id="user-001", amount=0), asynchronous=False)
        assert get_balance("user-001") == 0
