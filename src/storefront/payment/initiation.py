"""Payment initiation: command and handler.

Creates the payment intent at the gateway first. The local record is only
written once the gateway has answered, so a gateway failure leaves nothing
behind. When the request names an order, the order is linked to the new
intent in the same unit of work.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.config import get_setting
from storefront.domain import storefront
from storefront.errors import NotFound, ThirdPartyError, wrap_errors
from storefront.gateway import get_gateway
from storefront.gateway.port import GatewayError
from storefront.order.order import Order
from storefront.payment.payment import CARD_PAYMENT_METHODS, Payment, PaymentStatus

logger = structlog.get_logger(__name__)

INITIATED_MESSAGE = "Payment initiated successfully."


@dataclass(frozen=True)
class PaymentInitiation:
    payment_id: str
    client_secret: str | None
    status: str
    message: str = INITIATED_MESSAGE


@storefront.command(part_of="Payment")
class InitiatePayment:
    customer_id = Identifier(required=True)
    amount = Integer(required=True, min_value=1)  # minor currency units
    currency = String(max_length=3)
    description = String(max_length=500)
    payment_method = String(required=True, max_length=50)
    payment_method_token = String(max_length=255)
    order_id = Identifier()


@storefront.command_handler(part_of=Payment)
class InitiatePaymentHandler:
    @handle(InitiatePayment)
    def initiate_payment(self, command):
        with wrap_errors("initiate_payment"):
            order = None
            if command.order_id:
                try:
                    order = current_domain.repository_for(Order).get(command.order_id)
                except ObjectNotFoundError as exc:
                    raise NotFound(f"Order {command.order_id} not found") from exc
                order.assert_payable()

            currency = (command.currency or get_setting("DEFAULT_CURRENCY")).lower()
            gateway = get_gateway()
            try:
                intent = gateway.create_payment_intent(
                    amount=command.amount,
                    currency=currency,
                    description=command.description,
                    customer_id=str(command.customer_id),
                )
                if command.payment_method.lower() in CARD_PAYMENT_METHODS and command.payment_method_token:
                    method_id = gateway.create_payment_method_from_token(command.payment_method_token)
                    gateway.attach_payment_method_to_intent(method_id, intent.intent_id)
            except GatewayError as exc:
                logger.warning(
                    "Gateway rejected payment initiation",
                    customer_id=str(command.customer_id),
                    amount=command.amount,
                    error=exc.message,
                )
                raise ThirdPartyError(f"Payment gateway error: {exc.message}") from exc

            payment = Payment.create(
                intent_id=intent.intent_id,
                customer_id=command.customer_id,
                amount=command.amount,
                currency=currency,
                description=command.description,
                payment_method=command.payment_method,
                order_id=command.order_id,
            )
            current_domain.repository_for(Payment).add(payment)

            if order is not None:
                order.link_payment(intent.intent_id)
                current_domain.repository_for(Order).add(order)

        logger.info(
            "Payment initiated",
            payment_id=intent.intent_id,
            customer_id=str(command.customer_id),
            order_id=str(command.order_id) if command.order_id else None,
            amount=command.amount,
            currency=currency,
        )
        return PaymentInitiation(
            payment_id=intent.intent_id,
            client_secret=intent.client_secret,
            status=PaymentStatus.PENDING.value,
        )
