"""Payment gateway port (abstract interface).

Defines the contract every gateway adapter implements so that the payment
orchestrator and webhook processor never depend on a specific provider.
Adapters raise ``GatewayError`` for any rejected, timed out or otherwise
failed call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime


class GatewayError(Exception):
    """A gateway call failed or a webhook could not be verified."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class SignatureVerificationError(GatewayError):
    pass


@dataclass(frozen=True)
class PaymentIntentResult:
    """A payment intent as created at the gateway."""

    intent_id: str
    client_secret: str | None
    status: str


@dataclass(frozen=True)
class GatewayEvent:
    """A verified webhook event."""

    id: str
    type: str
    data: dict = field(default_factory=dict)  # the event's ``data.object``
    created: datetime | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        description: str | None,
        customer_id: str,
    ) -> PaymentIntentResult:
        """Create a payment intent for ``amount`` minor units of ``currency``."""
        ...

    @abstractmethod
    def create_payment_method_from_token(self, token: str) -> str:
        """Create a card payment method from a client-side token and return its id."""
        ...

    @abstractmethod
    def attach_payment_method_to_intent(self, method_id: str, intent_id: str) -> None:
        ...

    @abstractmethod
    def create_refund(self, intent_id: str, amount: int) -> str:
        """Refund ``amount`` of a captured intent and return the gateway refund id."""
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: str, signature: str) -> GatewayEvent:
        """Verify that a webhook payload is authentic and return the parsed event."""
        ...
