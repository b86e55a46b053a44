"""Domain events for the Payment aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Payment")
class PaymentInitiated:
    """A payment intent was created at the gateway and recorded locally."""

    __version__ = 1

    payment_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier()
    amount = Integer(required=True)
    currency = String(required=True)
    payment_method = String(required=True)
    initiated_at = DateTime(required=True)


@storefront.event(part_of="Payment")
class PaymentStatusChanged:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier()
    previous_status = String(required=True)
    new_status = String(required=True)
    source = String(required=True)  # webhook, reconciliation
    changed_at = DateTime(required=True)


@storefront.event(part_of="Payment")
class RefundRequested:
    """A refund was accepted by the gateway; completion arrives as a webhook."""

    __version__ = 1

    payment_id = Identifier(required=True)
    refund_id = String(required=True)
    amount = Integer(required=True)
    requested_at = DateTime(required=True)
