"""Email channel registry.

Uses the fake adapter by default. Setting RESEND_API_KEY (or
EMAIL_ADAPTER=resend) switches to Resend.
"""

from storefront import config
from storefront.notifications.channel.email_port import EmailChannel

_email_channel: EmailChannel | None = None


def get_email_channel() -> EmailChannel:
    """Return the configured email adapter (singleton)."""
    global _email_channel
    if _email_channel is None:
        adapter = config.email_adapter()
        if adapter == "fake":
            from storefront.notifications.channel.fake_email import FakeEmailAdapter

            _email_channel = FakeEmailAdapter()
        elif adapter == "resend":
            from storefront.notifications.channel.resend_email import ResendEmailAdapter

            _email_channel = ResendEmailAdapter(
                api_key=config.resend_api_key(),
                from_email=config.resend_from_email(),
            )
        else:
            raise ValueError(f"Unknown email adapter: {adapter}")
    return _email_channel


def set_email_channel(channel: EmailChannel) -> None:
    global _email_channel
    _email_channel = channel


def reset_channels():
    """Reset the channel singleton (useful for testing)."""
    global _email_channel
    _email_channel = None
