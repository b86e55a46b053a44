"""Payment aggregate: local record of a gateway payment intent.

The gateway is the identity authority: a payment's id is the intent id the
gateway returned. Status only moves forward, driven by verified webhooks or
explicit reconciliation.

State Machine:
    PENDING → SUCCEEDED → REFUNDED
    PENDING → FAILED
    FAILED and REFUNDED are terminal.

Webhooks are delivered at least once and in any order. ``apply_gateway_status``
therefore classifies each report instead of failing on it: a repeat of the
current state is a duplicate, a state the payment has already moved past is
stale, and only a report that is genuinely ahead of the graph (e.g. a refund
for a payment that has not succeeded yet) is rejected, so the gateway
redelivers it later.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront
from storefront.errors import BadRequest, InvalidTransition
from storefront.payment.events import PaymentInitiated, PaymentStatusChanged, RefundRequested


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentStatus(Enum):
    PENDING = "Pending"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    REFUNDED = "Refunded"

    @classmethod
    def parse(cls, value: str) -> "PaymentStatus":
        for status in cls:
            if status.value.lower() == str(value).strip().lower():
                return status
        raise BadRequest(f"Unknown payment status: {value}")


class ApplyOutcome(Enum):
    APPLIED = "applied"
    DUPLICATE = "duplicate"
    STALE = "stale"
    IGNORED = "ignored"


CARD_PAYMENT_METHODS = {"card", "credit_card", "debit_card"}

_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.SUCCEEDED, PaymentStatus.FAILED},
    PaymentStatus.SUCCEEDED: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: set(),  # Terminal
    PaymentStatus.REFUNDED: set(),  # Terminal
}

# States a payment can no longer return to once it is in the key state
_SUPERSEDED = {
    PaymentStatus.PENDING: set(),
    PaymentStatus.SUCCEEDED: {PaymentStatus.PENDING, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING, PaymentStatus.SUCCEEDED, PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: {PaymentStatus.PENDING, PaymentStatus.SUCCEEDED, PaymentStatus.FAILED},
}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Payment:
    id = Identifier(identifier=True)  # gateway payment intent id
    customer_id = Identifier(required=True)
    order_id = Identifier()
    amount = Integer(required=True, min_value=1)  # minor currency units
    currency = String(required=True, max_length=3)
    description = String(max_length=500)
    payment_method = String(required=True, max_length=50)
    status = String(
        choices=PaymentStatus,
        default=PaymentStatus.PENDING.value,
    )
    last_event_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        intent_id: str,
        customer_id: str,
        amount: int,
        currency: str,
        description: str | None,
        payment_method: str,
        order_id: str | None = None,
    ):
        now = datetime.now(UTC)
        payment = cls(
            id=intent_id,
            customer_id=customer_id,
            order_id=order_id,
            amount=amount,
            currency=currency.lower(),
            description=description,
            payment_method=payment_method,
            status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentInitiated(
                payment_id=intent_id,
                customer_id=str(customer_id),
                order_id=str(order_id) if order_id else None,
                amount=amount,
                currency=currency.lower(),
                payment_method=payment_method,
                initiated_at=now,
            )
        )
        return payment

    @property
    def is_card_payment(self) -> bool:
        return (self.payment_method or "").lower() in CARD_PAYMENT_METHODS

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _record(self, target: PaymentStatus, source: str, occurred_at: datetime | None = None) -> None:
        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        if occurred_at is not None:
            self.last_event_at = occurred_at
        self.raise_(
            PaymentStatusChanged(
                payment_id=str(self.id),
                order_id=str(self.order_id) if self.order_id else None,
                previous_status=previous,
                new_status=target.value,
                source=source,
                changed_at=now,
            )
        )

    def transition_to(self, target: PaymentStatus) -> bool:
        """Strict transition used for reconciliation.

        Returns False when the payment is already in ``target``; raises
        ``InvalidTransition`` for any edge outside the graph.
        """
        current = PaymentStatus(self.status)
        if current == target:
            return False
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition("payment", current.value, target.value)

        self._record(target, source="reconciliation")
        return True

    def apply_gateway_status(self, target: PaymentStatus, occurred_at: datetime | None = None) -> ApplyOutcome:
        """Apply a status reported by a gateway webhook."""
        current = PaymentStatus(self.status)
        if current == target:
            return ApplyOutcome.DUPLICATE
        if target in _SUPERSEDED[current]:
            return ApplyOutcome.STALE
        if occurred_at is not None and self.last_event_at is not None and occurred_at < self.last_event_at:
            return ApplyOutcome.STALE
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition("payment", current.value, target.value)

        self._record(target, source="webhook", occurred_at=occurred_at)
        return ApplyOutcome.APPLIED

    # -------------------------------------------------------------------
    # Refunds
    # -------------------------------------------------------------------
    def assert_refundable(self, amount: int) -> None:
        if PaymentStatus(self.status) != PaymentStatus.SUCCEEDED:
            raise BadRequest(f"Only succeeded payments can be refunded (payment is {self.status})")
        if amount < 1 or amount > self.amount:
            raise BadRequest(f"Refund amount must be between 1 and {self.amount}")

    def record_refund_request(self, refund_id: str, amount: int) -> None:
        self.assert_refundable(amount)
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            RefundRequested(
                payment_id=str(self.id),
                refund_id=refund_id,
                amount=amount,
                requested_at=now,
            )
        )


@storefront.repository(part_of=Payment)
class PaymentRepository:
    def for_customer(self, customer_id: str, page: int, size: int):
        """One page of a customer's payments, newest first. Returns a ResultSet (items, total)."""
        return (
            self._dao.query.filter(customer_id=customer_id)
            .order_by("-created_at")
            .offset((page - 1) * size)
            .limit(size)
            .all()
        )
