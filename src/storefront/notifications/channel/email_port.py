"""Email channel port.

Order emails go out through this contract. Adapters report delivery with a
DeliveryReceipt and raise UpstreamUnavailable only when the provider
cannot be reached at all.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    text: str
    html: str | None = None
    order_id: str | None = None


@dataclass(frozen=True)
class DeliveryReceipt:
    """What the provider said about one email."""

    delivered: bool
    message_id: str | None = None
    error: str | None = None


class EmailChannel(ABC):
    @abstractmethod
    def send(self, email: OutgoingEmail) -> DeliveryReceipt: ...
