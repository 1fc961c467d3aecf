"""Integration tests for the Resend email adapter using httpx.MockTransport."""

import json

import httpx
import pytest

from storefront.errors import UpstreamUnavailable
from storefront.notifications.channel import get_email_channel
from storefront.notifications.channel.email_port import DeliveryReceipt, OutgoingEmail
from storefront.notifications.channel.fake_email import FakeEmailAdapter
from storefront.notifications.channel.resend_email import ResendEmailAdapter


def _adapter(handler):
    return ResendEmailAdapter(
        api_key="re_test",
        from_email="shop@example.com",
        transport=httpx.MockTransport(handler),
    )


class TestResendEmailAdapter:
    def test_send(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": "msg_123"})

        email = OutgoingEmail(to="ada@example.com", subject="Hello", text="Body", html="<p>Body</p>", order_id="ord-1")
        receipt = _adapter(handler).send(email)

        assert receipt == DeliveryReceipt(delivered=True, message_id="msg_123")
        request = seen[0]
        assert request.url.path == "/emails"
        assert request.headers["authorization"] == "Bearer re_test"
        payload = json.loads(request.content)
        assert payload["from"] == "shop@example.com"
        assert payload["to"] == ["ada@example.com"]
        assert payload["html"] == "<p>Body</p>"
        assert payload["tags"] == [{"name": "order_id", "value": "ord-1"}]

    def test_no_tags_without_order(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"id": "msg_124"})

        _adapter(handler).send(OutgoingEmail(to="ada@example.com", subject="Hello", text="Body"))

        assert "tags" not in seen[0]
        assert "html" not in seen[0]

    def test_rejected(self):
        receipt = _adapter(lambda request: httpx.Response(422, text="invalid")).send(
            OutgoingEmail(to="x", subject="s", text="b")
        )
        assert receipt.delivered is False
        assert receipt.message_id is None
        assert receipt.error == "invalid"

    def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(UpstreamUnavailable):
            _adapter(handler).send(OutgoingEmail(to="ada@example.com", subject="Hello", text="Body"))


class TestChannelSelection:
    def test_fake_by_default(self, monkeypatch):
        monkeypatch.delenv("RESEND_API_KEY", raising=False)
        monkeypatch.delenv("EMAIL_ADAPTER", raising=False)
        assert isinstance(get_email_channel(), FakeEmailAdapter)

    def test_resend_when_key_present(self, monkeypatch):
        monkeypatch.setenv("RESEND_API_KEY", "re_live")
        monkeypatch.delenv("EMAIL_ADAPTER", raising=False)
        channel = get_email_channel()
        assert isinstance(channel, ResendEmailAdapter)
        assert channel.api_key == "re_live"
