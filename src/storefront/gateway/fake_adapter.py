"""Configurable fake payment gateway for development and testing.

This adapter simulates the gateway without any external calls. It can be
configured at runtime to succeed or fail, making it useful for:
- Manual API testing via /payments/gateway/configure
- Automated tests with predictable outcomes
- Development without real gateway credentials

Webhook payloads are accepted when signed with ``test-signature`` and are
parsed as the same JSON envelope the real gateway posts.
"""

import json
from datetime import UTC, datetime
from uuid import uuid4

from storefront.gateway.port import (
    GatewayError,
    GatewayEvent,
    PaymentGateway,
    PaymentIntentResult,
    SignatureVerificationError,
)

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _fail_unless_configured(self) -> None:
        if not self.should_succeed:
            raise GatewayError(self.failure_reason, code="card_declined")

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        description: str | None,
        customer_id: str,
    ) -> PaymentIntentResult:
        self.calls.append(
            {
                "method": "create_payment_intent",
                "amount": amount,
                "currency": currency,
                "description": description,
                "customer_id": customer_id,
            }
        )
        self._fail_unless_configured()

        intent_id = f"pi_fake_{uuid4().hex[:16]}"
        return PaymentIntentResult(
            intent_id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
            status="requires_payment_method",
        )

    def create_payment_method_from_token(self, token: str) -> str:
        self.calls.append({"method": "create_payment_method_from_token", "token": token})
        self._fail_unless_configured()
        return f"pm_fake_{uuid4().hex[:16]}"

    def attach_payment_method_to_intent(self, method_id: str, intent_id: str) -> None:
        self.calls.append(
            {
                "method": "attach_payment_method_to_intent",
                "method_id": method_id,
                "intent_id": intent_id,
            }
        )
        self._fail_unless_configured()

    def create_refund(self, intent_id: str, amount: int) -> str:
        self.calls.append({"method": "create_refund", "intent_id": intent_id, "amount": amount})
        self._fail_unless_configured()
        return f"re_fake_{uuid4().hex[:16]}"

    def verify_webhook_signature(self, payload: str, signature: str) -> GatewayEvent:
        if signature != TEST_SIGNATURE:
            raise SignatureVerificationError("Invalid webhook signature")

        try:
            body = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise GatewayError(f"Webhook payload is not valid JSON: {exc}") from exc

        created = body.get("created")
        return GatewayEvent(
            id=body.get("id") or f"evt_fake_{uuid4().hex[:16]}",
            type=body.get("type", ""),
            data=(body.get("data") or {}).get("object") or {},
            created=datetime.fromtimestamp(created, UTC) if created else None,
        )
