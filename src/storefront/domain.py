"""Storefront bounded context — carts, points ledger, inventory and orders.

Everything that has to commit together at checkout (points debit, stock
fulfillment and order creation) lives in this single domain so that one
unit of work covers it.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
