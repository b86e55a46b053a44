"""Payment refund: command and handler.

Asks the gateway to refund a succeeded payment. The payment itself stays
``Succeeded`` until the gateway confirms with a ``charge.refunded`` webhook.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import ThirdPartyError, wrap_errors
from storefront.gateway import get_gateway
from storefront.gateway.port import GatewayError
from storefront.payment.payment import Payment

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Payment")
class RequestRefund:
    """Request a refund for a payment. ``amount`` defaults to the full payment."""

    payment_id = Identifier(required=True)
    amount = Integer(min_value=1)


@storefront.command_handler(part_of=Payment)
class RequestRefundHandler:
    @handle(RequestRefund)
    def request_refund(self, command):
        with wrap_errors("refund_payment"):
            repo = current_domain.repository_for(Payment)
            payment = repo.get(command.payment_id)
            amount = command.amount or payment.amount
            payment.assert_refundable(amount)

            try:
                refund_id = get_gateway().create_refund(str(payment.id), amount)
            except GatewayError as exc:
                raise ThirdPartyError(f"Payment gateway error: {exc.message}") from exc

            payment.record_refund_request(refund_id, amount)
            repo.add(payment)

        logger.info("Refund requested", payment_id=str(payment.id), refund_id=refund_id, amount=amount)
        return refund_id
