"""BDD tests for the order lifecycle."""

from datetime import UTC, datetime

from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

from storefront.cart import service as cart_service
from storefront.checkout.service import checkout
from storefront.errors import IllegalTransition
from storefront.order.fulfillment import MergeOrderTracking, UpdateOrderStatus
from storefront.order.queries import get_order

scenarios("features/order_lifecycle.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a placed order paid in "{currency}"'))
def _(outcome, user_id, currency):
    cart_id = cart_service.add_item(None, "prod-001", "var-001", 2500, currency, title="T-Shirt")
    outcome["order"] = checkout(cart_id, user_id=user_id)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the order status is set to "{status}"'))
def _(outcome, status):
    try:
        current_domain.process(
            UpdateOrderStatus(order_id=str(outcome["order"].id), status=status),
            asynchronous=False,
        )
    except IllegalTransition as exc:
        outcome["error"] = exc


@when(parsers.cfparse('tracking is recorded with carrier "{carrier}" and a ship date'))
def _(outcome, carrier):
    current_domain.process(
        MergeOrderTracking(order_id=str(outcome["order"].id), carrier=carrier, shipped_at=datetime.now(UTC)),
        asynchronous=False,
    )


@when("tracking is recorded with a delivery date")
def _(outcome):
    current_domain.process(
        MergeOrderTracking(order_id=str(outcome["order"].id), delivered_at=datetime.now(UTC)),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the status update is refused")
def _(outcome):
    assert isinstance(outcome["error"], IllegalTransition)


@then(parsers.cfparse('the order carrier is "{carrier}"'))
def _(outcome, carrier):
    assert get_order(outcome["order"].id).tracking.carrier == carrier
