"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from pytest_bdd import given, parsers, then

from storefront.cart import service as cart_service
from storefront.ledger.balance import credit_points, get_balance
from storefront.order.queries import get_order

USER = "user-bdd"


@pytest.fixture()
def user_id():
    return USER


@pytest.fixture()
def outcome():
    """Container for the last result or captured error."""
    return {"order": None, "error": None}


@pytest.fixture()
def cart():
    return {"id": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("the shopper has {amount:d} dust"))
def _(user_id, amount):
    credit_points(user_id, amount)


@given(parsers.cfparse('the cart holds {quantity:d} of a product priced {amount:d} "{currency}"'))
def _(cart, quantity, amount, currency):
    cart["id"] = cart_service.add_item(
        cart["id"],
        product_id=f"prod-{currency}",
        variant_id=f"var-{currency}",
        amount=amount,
        currency_code=currency,
        title="Item",
        quantity=quantity,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the shopper has {amount:d} dust left"))
def _(user_id, amount):
    assert get_balance(user_id) == amount


@then(parsers.cfparse('the order status is "{status}"'))
def _(outcome, status):
    assert get_order(outcome["order"].id).status == status
