"""Points balance queries and crediting.

Only crediting is exposed as a command. Debits happen exclusively through
``PointsAccount.settle`` inside checkout.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront import config
from storefront.domain import storefront
from storefront.ledger.account import PointsAccount
from storefront.utils.locks import process_exclusively

logger = structlog.get_logger(__name__)


def load_account(user_id) -> PointsAccount:
    """Return the user's account, or a fresh unsaved one at the opening balance."""
    try:
        return current_domain.repository_for(PointsAccount).get(str(user_id))
    except ObjectNotFoundError:
        return PointsAccount.open(user_id=str(user_id), opening_balance=config.opening_points_balance())


def get_balance(user_id) -> int:
    return load_account(user_id).balance


@storefront.command(part_of="PointsAccount")
class CreditPoints:
    user_id = Identifier(required=True)
    amount = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=PointsAccount)
class CreditPointsHandler:
    @handle(CreditPoints)
    def credit_points(self, command):
        account = load_account(command.user_id)
        balance = account.credit(command.amount)
        current_domain.repository_for(PointsAccount).add(account)
        logger.info("Points credited", user_id=str(command.user_id), amount=command.amount, balance=balance)
        return balance


def credit_points(user_id, amount: int) -> int:
    """Credit ``amount`` points to a user while holding the user's lock."""
    return process_exclusively(
        CreditPoints(user_id=user_id, amount=amount),
        f"user:{user_id}",
        timeout=config.checkout_lock_timeout(),
    )
