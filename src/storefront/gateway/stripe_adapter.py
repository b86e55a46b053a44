"""Stripe payment gateway adapter.

Wraps the stripe-python SDK. Every SDK failure is re-raised as
``GatewayError`` so callers handle one error type regardless of provider.
HTTP calls are bounded by ``timeout`` seconds and retried by the SDK up to
``max_network_retries`` times on network errors.
"""

from datetime import UTC, datetime

import stripe
import structlog

from storefront.gateway.port import (
    GatewayError,
    GatewayEvent,
    PaymentGateway,
    PaymentIntentResult,
    SignatureVerificationError,
)

logger = structlog.get_logger(__name__)


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(
        self,
        api_key: str,
        webhook_secret: str | None,
        timeout: float = 10,
        max_network_retries: int = 2,
    ) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret

        stripe.api_key = api_key
        stripe.max_network_retries = max_network_retries
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    @staticmethod
    def _error(operation: str, exc: stripe.StripeError) -> GatewayError:
        logger.warning("Stripe call failed", operation=operation, error=str(exc), code=exc.code)
        return GatewayError(exc.user_message or str(exc), code=exc.code)

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        description: str | None,
        customer_id: str,
    ) -> PaymentIntentResult:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                description=description,
                metadata={"customer_id": customer_id},
            )
        except stripe.StripeError as exc:
            raise self._error("create_payment_intent", exc) from exc

        logger.info("Stripe payment intent created", intent_id=intent.id, amount=amount, currency=currency)
        return PaymentIntentResult(
            intent_id=intent.id,
            client_secret=intent.client_secret,
            status=intent.status,
        )

    def create_payment_method_from_token(self, token: str) -> str:
        try:
            method = stripe.PaymentMethod.create(type="card", card={"token": token})
        except stripe.StripeError as exc:
            raise self._error("create_payment_method", exc) from exc
        return method.id

    def attach_payment_method_to_intent(self, method_id: str, intent_id: str) -> None:
        try:
            stripe.PaymentIntent.modify(intent_id, payment_method=method_id)
        except stripe.StripeError as exc:
            raise self._error("attach_payment_method", exc) from exc

    def create_refund(self, intent_id: str, amount: int) -> str:
        try:
            refund = stripe.Refund.create(payment_intent=intent_id, amount=amount)
        except stripe.StripeError as exc:
            raise self._error("create_refund", exc) from exc

        logger.info("Stripe refund created", intent_id=intent_id, refund_id=refund.id, amount=amount)
        return refund.id

    def verify_webhook_signature(self, payload: str, signature: str) -> GatewayEvent:
        if not self.webhook_secret:
            raise SignatureVerificationError("Webhook secret is not configured")

        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as exc:
            logger.warning("Webhook signature invalid", error=str(exc))
            raise SignatureVerificationError("Invalid webhook signature") from exc
        except ValueError as exc:
            raise GatewayError(f"Webhook payload is not valid JSON: {exc}") from exc

        return GatewayEvent(
            id=event.id,
            type=event.type,
            data=event.data.object.to_dict(),
            created=datetime.fromtimestamp(event.created, UTC) if event.created else None,
        )
