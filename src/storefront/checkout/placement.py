"""Order placement — settles a cart and records the order in one unit of work.

Flow of a single PlaceOrder:

    ValidateCart → resolve payment method → fulfill stock →
    (points settlement | fiat charge) → create order

The points debit, the stock decrements and the new order commit together.
A failure at any step raises before commit, so no order exists, the
balance is unchanged and the cart is left as it was. Clearing the cart
happens afterwards, outside this unit of work.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.management import find_cart
from storefront.checkout.gateway import get_gateway
from storefront.domain import storefront
from storefront.errors import (
    EmptyCart,
    InsufficientBalance,
    InvalidCartComposition,
    MixedCurrency,
    PaymentDeclined,
)
from storefront.inventory.availability import find_stock
from storefront.inventory.stock import InventoryItem
from storefront.ledger.account import PointsAccount
from storefront.ledger.balance import load_account
from storefront.order.order import CustomerDetails, Order, PaymentMethod, ShippingAddress
from storefront.shared.money import CurrencyFamily, currency_family

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    payment_method = String(choices=PaymentMethod)  # Requested; points carts always settle in points
    customer = Text()  # JSON: {email, first_name, last_name, phone}
    shipping_address = Text()  # JSON: {address1, address2, city, state, postal_code, country}


def validate_cart(cart):
    """Reject carts that cannot be settled."""
    if cart is None or not cart.items:
        raise EmptyCart()
    if cart.is_mixed:
        raise MixedCurrency(cart.currency_codes())


def resolve_payment_method(cart, requested=None) -> PaymentMethod:
    """Decide how the cart settles.

    A points-denominated cart always settles in points, whatever the client
    asked for. Every line must then be priced in points.
    """
    points_lines = [item for item in cart.items if item.price.is_points]

    if currency_family(cart.currency_code) == CurrencyFamily.POINTS:
        if len(points_lines) != len(cart.items):
            raise InvalidCartComposition(
                "Dust cart contains items that are not priced in dust",
                {"currency_code": cart.currency_code},
            )
        return PaymentMethod.POINTS

    if points_lines:
        raise InvalidCartComposition(
            "Cart contains dust-priced items but is not denominated in dust",
            {"currency_code": cart.currency_code},
        )
    if requested and PaymentMethod(requested) == PaymentMethod.POINTS:
        raise InvalidCartComposition(
            "Dust can only pay for dust-priced items",
            {"currency_code": cart.currency_code},
        )
    return PaymentMethod.FIAT


def _fulfill_stock(cart):
    repo = current_domain.repository_for(InventoryItem)
    for item in cart.items:
        stock = find_stock(item.variant_id)
        if stock is None:
            continue
        stock.fulfill(cart_id=str(cart.id), quantity=item.quantity)
        repo.add(stock)


def _settle_points(user_id, amount):
    account = load_account(user_id)
    if account.balance < amount:
        raise InsufficientBalance(balance=account.balance, required=amount)

    transaction_id = account.settle(amount)
    current_domain.repository_for(PointsAccount).add(account)
    return transaction_id


def _charge_fiat(cart):
    result = get_gateway().charge(
        amount=cart.total,
        currency_code=cart.currency_code,
        idempotency_key=f"checkout-{cart.id}",
    )
    if not result.success:
        raise PaymentDeclined(result.failure_reason or "Payment declined")
    return result.transaction_id


def _load_json(value):
    if not value:
        return None
    return json.loads(value) if isinstance(value, str) else value


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = find_cart(command.cart_id)
        validate_cart(cart)
        method = resolve_payment_method(cart, command.payment_method)

        customer_data = _load_json(command.customer)
        address_data = _load_json(command.shipping_address)
        customer = CustomerDetails(**customer_data) if customer_data else None
        shipping_address = ShippingAddress(**address_data) if address_data else None

        # Lines are copied before settlement so the order never references live cart state
        items_data = cart.snapshot()

        _fulfill_stock(cart)
        if method == PaymentMethod.POINTS:
            transaction_id = _settle_points(command.user_id, cart.total)
        else:
            transaction_id = _charge_fiat(cart)

        order = Order.place(
            user_id=command.user_id,
            items_data=items_data,
            currency_code=cart.currency_code,
            payment_method=method.value,
            transaction_id=transaction_id,
            customer=customer,
            shipping_address=shipping_address,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            cart_id=str(cart.id),
            user_id=str(command.user_id),
            payment_method=method.value,
            total=order.total,
            currency_code=order.currency_code,
        )
        return str(order.id)
