"""Domain events for the PointsAccount aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="PointsAccount")
class PointsCredited:
    __version__ = "v1"

    user_id = Identifier(required=True)
    transaction_id = String(required=True, max_length=50)
    amount = Integer(required=True)
    balance = Integer(required=True)
    credited_at = DateTime(required=True)


@storefront.event(part_of="PointsAccount")
class PointsDebited:
    """Points left the account, normally to settle an order."""

    __version__ = "v1"

    user_id = Identifier(required=True)
    transaction_id = String(required=True, max_length=50)
    amount = Integer(required=True)
    balance = Integer(required=True)
    debited_at = DateTime(required=True)
