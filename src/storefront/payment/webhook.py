"""Gateway webhook processing: command and handler.

The gateway delivers events at least once and in no particular order. Each
delivery is verified, then classified against the payment's current state:

- ``applied``: the payment moved forward
- ``duplicate``: the event id was seen before, or the payment is already there
- ``stale``: the payment has moved past the reported state
- ``ignored``: an event type this service does not act on

A report that is ahead of the payment (a refund for a payment that has not
succeeded yet) raises ``InvalidTransition`` and is not recorded, so the
gateway's redelivery is processed once the payment catches up.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import MalformedEvent, NotFound, ThirdPartyError, wrap_errors
from storefront.gateway import get_gateway
from storefront.gateway.port import GatewayError
from storefront.order.order import Order
from storefront.payment.ledger import ProcessedWebhook
from storefront.payment.payment import ApplyOutcome, Payment, PaymentStatus

logger = structlog.get_logger(__name__)

# event type -> (field of data.object holding the intent id, target status)
EVENT_TARGETS = {
    "payment_intent.succeeded": ("id", PaymentStatus.SUCCEEDED),
    "payment_intent.payment_failed": ("id", PaymentStatus.FAILED),
    "charge.refunded": ("payment_intent", PaymentStatus.REFUNDED),
}


def sync_order_payment_status(payment: Payment) -> None:
    """Mirror the payment's status onto its linked order, if any."""
    if not payment.order_id:
        return

    repo = current_domain.repository_for(Order)
    try:
        order = repo.get(payment.order_id)
    except ObjectNotFoundError:
        logger.warning("Linked order missing", payment_id=str(payment.id), order_id=str(payment.order_id))
        return

    # The order follows only the payment it currently references
    if order.payment_intent_id != payment.id:
        logger.info(
            "Order references another payment, not mirrored",
            payment_id=str(payment.id),
            order_id=str(order.id),
            linked_payment_id=order.payment_intent_id,
        )
        return

    order.record_payment_status(PaymentStatus(payment.status))
    repo.add(order)


@storefront.command(part_of="Payment")
class ProcessGatewayWebhook:
    raw_body = Text(required=True)
    signature = String(required=True, max_length=1000)


@storefront.command_handler(part_of=Payment)
class ProcessGatewayWebhookHandler:
    @handle(ProcessGatewayWebhook)
    def process_webhook(self, command):
        with wrap_errors("process_webhook"):
            try:
                event = get_gateway().verify_webhook_signature(command.raw_body, command.signature)
            except GatewayError as exc:
                logger.warning("Webhook rejected", error=exc.message)
                raise ThirdPartyError(f"Webhook verification failed: {exc.message}") from exc

            ledger = current_domain.repository_for(ProcessedWebhook)
            if ledger.seen(event.id):
                logger.info("Webhook already processed", event_id=event.id, event_type=event.type)
                return ApplyOutcome.DUPLICATE

            payment_id = None
            target = EVENT_TARGETS.get(event.type)
            if target is None:
                outcome = ApplyOutcome.IGNORED
            else:
                key, status = target
                payment_id = event.data.get(key)
                if not payment_id:
                    raise MalformedEvent(f"Event {event.id} ({event.type}) has no data.object.{key}")

                repo = current_domain.repository_for(Payment)
                try:
                    payment = repo.get(payment_id)
                except ObjectNotFoundError as exc:
                    raise NotFound(f"Payment {payment_id} not found") from exc

                outcome = payment.apply_gateway_status(status, occurred_at=event.created)
                if outcome == ApplyOutcome.APPLIED:
                    repo.add(payment)
                    sync_order_payment_status(payment)

            ledger.add(
                ProcessedWebhook(
                    id=event.id,
                    event_type=event.type,
                    payment_id=payment_id,
                    outcome=outcome.value,
                    received_at=datetime.now(UTC),
                )
            )

        logger.info(
            "Webhook processed",
            event_id=event.id,
            event_type=event.type,
            payment_id=payment_id,
            outcome=outcome.value,
        )
        return outcome
