"""Explicit payment status reconciliation: command and handler.

Used by operators when a webhook was lost. Applies the same transition graph
as webhooks but strictly: moving to the current status is a no-op, any other
edge outside the graph is rejected.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import wrap_errors
from storefront.payment.payment import Payment, PaymentStatus
from storefront.payment.webhook import sync_order_payment_status

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Payment")
class ReconcilePaymentStatus:
    payment_id = Identifier(required=True)
    status = String(required=True, max_length=50)


@storefront.command_handler(part_of=Payment)
class ReconcilePaymentStatusHandler:
    @handle(ReconcilePaymentStatus)
    def reconcile(self, command):
        with wrap_errors("reconcile_payment"):
            target = PaymentStatus.parse(command.status)
            repo = current_domain.repository_for(Payment)
            payment = repo.get(command.payment_id)
            previous = payment.status

            if payment.transition_to(target):
                repo.add(payment)
                sync_order_payment_status(payment)

        logger.info(
            "Payment reconciled",
            payment_id=str(command.payment_id),
            previous_status=previous,
            new_status=payment.status,
        )
        return payment.status
