"""Application tests for order confirmation emails."""

import pytest

from storefront.cart import service as cart_service
from storefront.checkout.service import checkout
from storefront.errors import UpstreamUnavailable
from storefront.notifications.channel import set_email_channel
from storefront.notifications.channel.email_port import EmailChannel
from storefront.notifications.channel.fake_email import FakeEmailAdapter
from storefront.order.queries import list_orders_for_user

CUSTOMER = {"email": "ada@example.com", "first_name": "Ada"}


class _RaisingChannel(EmailChannel):
    def __init__(self, exc):
        self.exc = exc

    def send(self, email):
        raise self.exc


@pytest.fixture
def email():
    channel = FakeEmailAdapter()
    set_email_channel(channel)
    return channel


def _checkout(customer=CUSTOMER):
    cart_id = cart_service.add_item(None, "prod-1", "var-1", 2500, "usd", title="T-Shirt", quantity=2)
    return checkout(cart_id, user_id="user-001", customer=customer)


class TestOrderConfirmation:
    def test_email_sent_on_checkout(self, email):
        order = _checkout()
        sent = email.sent_to("ada@example.com")
        assert len(sent) == 1
        assert sent[0].subject == f"Order Confirmation - Order #{order.id}"
        assert sent[0].order_id == str(order.id)
        assert "$50.00" in sent[0].text
        assert "T-Shirt" in sent[0].html

    def test_no_email_without_customer(self, email):
        _checkout(customer=None)
        assert email.outbox == []


class TestDeliveryFailures:
    def test_rejected_delivery_does_not_fail_checkout(self):
        set_email_channel(FakeEmailAdapter(reject_with="Mailbox full"))
        order = _checkout()
        assert order.id is not None
        assert len(list_orders_for_user("user-001")) == 1

    def test_unavailable_provider_does_not_fail_checkout(self):
        set_email_channel(_RaisingChannel(UpstreamUnavailable("Email provider unavailable")))
        assert _checkout().id is not None

    def test_unexpected_error_does_not_fail_checkout(self):
        set_email_channel(_RaisingChannel(RuntimeError("boom")))
        assert _checkout().id is not None
