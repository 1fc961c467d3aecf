"""Resend email adapter — delivers mail through the Resend HTTP API."""

import httpx
import structlog

from storefront.errors import UpstreamUnavailable
from storefront.notifications.channel.email_port import DeliveryReceipt, EmailChannel, OutgoingEmail

logger = structlog.get_logger(__name__)

RESEND_API_URL = "https://api.resend.com"


class ResendEmailAdapter(EmailChannel):
    def __init__(self, api_key: str, from_email: str, timeout: float = 10.0, transport=None):
        self.api_key = api_key
        self.from_email = from_email
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=RESEND_API_URL,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.api_key}"},
            transport=self._transport,
        )

    def _payload(self, email: OutgoingEmail) -> dict:
        payload = {"from": self.from_email, "to": [email.to], "subject": email.subject, "text": email.text}
        if email.html:
            payload["html"] = email.html
        if email.order_id:
            # Resend tag values allow only letters, digits, underscores and dashes
            payload["tags"] = [{"name": "order_id", "value": email.order_id}]
        return payload

    def send(self, email: OutgoingEmail) -> DeliveryReceipt:
        try:
            with self._client() as client:
                response = client.post("/emails", json=self._payload(email))
        except httpx.RequestError as exc:
            logger.error("Resend unavailable", error=str(exc))
            raise UpstreamUnavailable("Email provider unavailable", {"provider": "resend"}) from exc

        if response.status_code >= 400:
            logger.warning("Resend rejected email", status_code=response.status_code, to=email.to)
            return DeliveryReceipt(delivered=False, error=response.text)

        return DeliveryReceipt(delivered=True, message_id=response.json().get("id"))
