"""Application tests for order status updates and tracking merges."""

from datetime import UTC, datetime

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.cart import service as cart_service
from storefront.checkout.service import checkout
from storefront.errors import IllegalTransition, NotFound
from storefront.order.fulfillment import MergeOrderTracking, UpdateOrderStatus
from storefront.order.order import OrderStatus
from storefront.order.queries import get_order, list_orders_for_user


def _place_order(user_id="user-001"):
    cart_id = cart_service.add_item(None, "prod-1", "var-1", 2500, "usd", title="T-Shirt")
    return checkout(cart_id, user_id=user_id)


def _status(order_id, status):
    return current_domain.process(UpdateOrderStatus(order_id=order_id, status=status), asynchronous=False)


class TestUpdateOrderStatus:
    def test_walk_the_happy_path(self):
        order_id = str(_place_order().id)
        for status in ("processing", "shipped", "delivered", "completed"):
            assert _status(order_id, status) == status
        assert get_order(order_id).status == OrderStatus.COMPLETED.value

    def test_illegal_transition_persists_nothing(self):
        order_id = str(_place_order().id)
        with pytest.raises(IllegalTransition):
            _status(order_id, "delivered")
        assert get_order(order_id).status == OrderStatus.CONFIRMED.value

    def test_unknown_status_rejected(self):
        order_id = str(_place_order().id)
        with pytest.raises(ValidationError):
            _status(order_id, "teleported")

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            _status("missing", "processing")


class TestMergeOrderTracking:
    def test_tracking_merged_and_status_advanced(self):
        order_id = str(_place_order().id)
        shipped_at = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)

        status = current_domain.process(
            MergeOrderTracking(order_id=order_id, tracking_number="1Z999", carrier="UPS", shipped_at=shipped_at),
            asynchronous=False,
        )

        assert status == OrderStatus.SHIPPED.value
        order = get_order(order_id)
        assert order.tracking.tracking_number == "1Z999"
        assert order.tracking.carrier == "UPS"

    def test_partial_merge_keeps_fields(self):
        order_id = str(_place_order().id)
        current_domain.process(MergeOrderTracking(order_id=order_id, carrier="UPS"), asynchronous=False)
        current_domain.process(MergeOrderTracking(order_id=order_id, tracking_number="1Z999"), asynchronous=False)

        tracking = get_order(order_id).tracking
        assert tracking.carrier == "UPS"
        assert tracking.tracking_number == "1Z999"


class TestQueries:
    def test_get_unknown_order(self):
        with pytest.raises(NotFound):
            get_order("missing")

    def test_list_orders_newest_first(self):
        first = _place_order()
        second = _place_order()
        _place_order(user_id="someone-else")

        orders = list_orders_for_user("user-001")
        assert {str(o.id) for o in orders} == {str(first.id), str(second.id)}
        assert orders[0].created_at >= orders[1].created_at

    def test_list_returns_every_order_beyond_a_page(self):
        placed = [_place_order() for _ in range(105)]

        orders = list_orders_for_user("user-001")
        assert len(orders) == 105
        assert {str(o.id) for o in orders} == {str(o.id) for o in placed}
        assert all(a.created_at >= b.created_at for a, b in zip(orders, orders[1:]))
        assert orders[0].created_at == max(o.created_at for o in placed)
