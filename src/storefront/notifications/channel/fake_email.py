"""In-memory email adapter, the default outside production."""

from uuid import uuid4

from storefront.notifications.channel.email_port import DeliveryReceipt, EmailChannel, OutgoingEmail


class FakeEmailAdapter(EmailChannel):
    """Keeps delivered emails in ``outbox``.

    ``reject_with`` makes every send come back undelivered with that error.
    """

    def __init__(self, reject_with: str | None = None):
        self.outbox: list[OutgoingEmail] = []
        self.reject_with = reject_with

    def send(self, email: OutgoingEmail) -> DeliveryReceipt:
        if self.reject_with:
            return DeliveryReceipt(delivered=False, error=self.reject_with)

        self.outbox.append(email)
        return DeliveryReceipt(delivered=True, message_id=f"email-{uuid4().hex[:12]}")

    def sent_to(self, address: str) -> list[OutgoingEmail]:
        return [email for email in self.outbox if email.to == address]
