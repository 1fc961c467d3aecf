"""Tests for cart validation and payment-method resolution at checkout."""

import pytest

from storefront.cart.cart import Cart
from storefront.checkout.placement import resolve_payment_method, validate_cart
from storefront.errors import EmptyCart, InvalidCartComposition, MixedCurrency
from storefront.order.order import PaymentMethod
from storefront.shared.money import Money


def _cart(*lines):
    cart = Cart.create(cart_id="cart-001")
    for index, (amount, code) in enumerate(lines):
        cart.add_item(f"prod-{index}", f"var-{index}", f"Item {index}", Money.of(amount, code))
    return cart


class TestValidateCart:
    def test_missing_cart(self):
        with pytest.raises(EmptyCart) as exc:
            validate_cart(None)
        assert exc.value.message == "Cart is empty or not found"

    def test_empty_cart(self):
        with pytest.raises(EmptyCart):
            validate_cart(_cart())

    def test_mixed_cart_lists_currencies(self):
        with pytest.raises(MixedCurrency) as exc:
            validate_cart(_cart((100, "usd"), (100, "eur")))
        assert exc.value.details["currencies"] == ["eur", "usd"]

    def test_single_currency_cart_passes(self):
        validate_cart(_cart((100, "usd"), (200, "usd")))


class TestResolvePaymentMethod:
    def test_points_cart_settles_in_points(self):
        assert resolve_payment_method(_cart((500, "dust"))) == PaymentMethod.POINTS

    def test_points_cart_ignores_fiat_request(self):
        cart = _cart((500, "dust"))
        assert resolve_payment_method(cart, PaymentMethod.FIAT.value) == PaymentMethod.POINTS

    def test_fiat_cart_settles_in_fiat(self):
        assert resolve_payment_method(_cart((2500, "usd"))) == PaymentMethod.FIAT

    def test_fiat_cart_cannot_pay_with_points(self):
        with pytest.raises(InvalidCartComposition):
            resolve_payment_method(_cart((2500, "usd")), PaymentMethod.POINTS.value)

    def test_points_lines_in_fiat_cart_rejected(self):
        cart = _cart((2500, "usd"))
        # Bypass the add guard to simulate a corrupted cart
        cart.items[0].price = Money.of(2500, "dust")
        with pytest.raises(InvalidCartComposition):
            resolve_payment_method(cart)
