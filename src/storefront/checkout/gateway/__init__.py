"""Fiat gateway factory.

Provides get_gateway() / set_gateway() to swap implementations. The
SimulatedGateway is the default.
"""

from storefront.checkout.gateway.port import FiatGateway
from storefront.checkout.gateway.simulated import SimulatedGateway

_current_gateway: FiatGateway | None = None


def get_gateway() -> FiatGateway:
    """Return the current fiat gateway. Defaults to SimulatedGateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = SimulatedGateway()
    return _current_gateway


def set_gateway(gateway: FiatGateway) -> None:
    """Override the active gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
