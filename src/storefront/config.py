"""Runtime settings for the storefront, read from the environment.

Values are resolved on every call so tests can override them with
``monkeypatch.setenv`` without reloading modules.
"""

import os

DEFAULT_CURRENCY = "usd"
MIXED_CURRENCY = "mixed"
POINTS_CURRENCY = "dust"

MIN_QUANTITY = 1
MAX_QUANTITY = 99

CART_COOKIE_NAME = "cart_id"
CART_COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days


def environment() -> str:
    return os.environ.get("PROTEAN_ENV", "development").lower()


def is_production() -> bool:
    return environment() == "production"


def points_currency_aliases() -> frozenset[str]:
    """Currency codes that denominate the points currency."""
    raw = os.environ.get("POINTS_CURRENCY_ALIASES", "dust,xpf")
    return frozenset(code.strip().lower() for code in raw.split(",") if code.strip())


def default_user_id() -> str:
    return os.environ.get("STOREFRONT_DEFAULT_USER_ID", "user_test_1")


def opening_points_balance() -> int:
    """Balance reported for users without a points account."""
    return int(os.environ.get("POINTS_OPENING_BALANCE", "0"))


def test_credit_amount() -> int:
    return int(os.environ.get("POINTS_TEST_CREDIT", "10000"))


def checkout_lock_timeout() -> float:
    """Seconds to wait for the cart and user locks before giving up."""
    return float(os.environ.get("CHECKOUT_LOCK_TIMEOUT", "5"))


def cart_idle_minutes() -> int:
    return int(os.environ.get("CART_IDLE_MINUTES", "60"))


def default_stock_quantity() -> int:
    return int(os.environ.get("DEFAULT_STOCK_QUANTITY", "999"))


def medusa_backend_url() -> str:
    return os.environ.get("MEDUSA_BACKEND_URL", "http://localhost:9000")


def medusa_publishable_key() -> str | None:
    return os.environ.get("MEDUSA_PUBLISHABLE_API_KEY")


def medusa_timeout() -> float:
    return float(os.environ.get("MEDUSA_TIMEOUT", "10"))


def email_adapter() -> str:
    """``resend`` when an API key is configured, ``fake`` otherwise."""
    default = "resend" if os.environ.get("RESEND_API_KEY") else "fake"
    return os.environ.get("EMAIL_ADAPTER", default)


def resend_api_key() -> str | None:
    return os.environ.get("RESEND_API_KEY")


def resend_from_email() -> str:
    return os.environ.get("RESEND_FROM_EMAIL", "onboarding@resend.dev")
