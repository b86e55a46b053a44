"""Order aggregate: the durable record of a checked-out cart.

An order captures an immutable snapshot of the cart lines (product, quantity
and the unit price at checkout) and a total frozen at creation. Later
catalogue price changes never touch an existing order.

State Machine:
    PENDING → CONFIRMED → SHIPPING → DELIVERED
    PENDING/CONFIRMED → CANCELLED
    DELIVERED and CANCELLED are terminal.

``payment_status`` mirrors the linked payment and moves independently of
``status``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import BadRequest, Conflict, InvalidTransition
from storefront.order.events import (
    OrderCreated,
    OrderPaymentLinked,
    OrderPaymentStatusUpdated,
    OrderStatusChanged,
)
from storefront.payment.payment import PaymentStatus


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    SHIPPING = "Shipping"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: str) -> "OrderStatus":
        """Look up a status by value, ignoring case."""
        for status in cls:
            if status.value.lower() == str(value).strip().lower():
                return status
        raise BadRequest(f"Unknown order status: {value}")


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPING, OrderStatus.CANCELLED},
    OrderStatus.SHIPPING: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Delivery address captured at checkout. Every part is required."""

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A line of the order snapshot. Written once, never modified."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    created_at = DateTime(required=True)

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    payment_status = String(
        choices=PaymentStatus,
        default=PaymentStatus.PENDING.value,
    )
    total_amount = Float(required=True, min_value=0.0)
    payment_intent_id = String(max_length=255)
    shipping_address = ValueObject(ShippingAddress, required=True)
    items = HasMany(OrderItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id, items_data, shipping_address):
        """Assemble a new order from cart lines.

        Args:
            customer_id: The customer placing the order.
            items_data: List of dicts with product_id, quantity, unit_price.
            shipping_address: Dict with street, city, state, postal_code, country.
        """
        if not items_data:
            raise BadRequest("An order needs at least one item")

        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=str(item["product_id"]),
                quantity=item["quantity"],
                unit_price=item["unit_price"],
                created_at=now,
            )
            for item in items_data
        ]
        total_amount = sum(item.line_total for item in items)

        order = cls(
            customer_id=str(customer_id),
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            total_amount=total_amount,
            shipping_address=ShippingAddress(**shipping_address),
            items=items,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                customer_id=str(customer_id),
                total_amount=total_amount,
                item_count=len(items),
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    @staticmethod
    def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
        return target in _VALID_TRANSITIONS.get(current, set())

    def transition_to(self, target: OrderStatus) -> None:
        """Move the order to ``target``; any edge outside the graph is rejected untouched."""
        current = OrderStatus(self.status)
        if not self.can_transition(current, target):
            raise InvalidTransition("order", current.value, target.value)

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment linkage
    # -------------------------------------------------------------------
    def assert_payable(self) -> None:
        if OrderStatus(self.status) == OrderStatus.CANCELLED:
            raise BadRequest(f"Order {self.id} is cancelled and cannot take a payment")
        if self.payment_status == PaymentStatus.SUCCEEDED.value:
            raise Conflict(f"Order {self.id} is already paid by {self.payment_intent_id}")

    def link_payment(self, payment_intent_id: str) -> None:
        self.assert_payable()

        now = datetime.now(UTC)
        self.payment_intent_id = payment_intent_id
        self.payment_status = PaymentStatus.PENDING.value
        self.updated_at = now
        self.raise_(
            OrderPaymentLinked(
                order_id=str(self.id),
                payment_intent_id=payment_intent_id,
                linked_at=now,
            )
        )

    def record_payment_status(self, payment_status: PaymentStatus) -> None:
        if self.payment_status == payment_status.value:
            return

        now = datetime.now(UTC)
        self.payment_status = payment_status.value
        self.updated_at = now
        self.raise_(
            OrderPaymentStatusUpdated(
                order_id=str(self.id),
                payment_intent_id=self.payment_intent_id,
                payment_status=payment_status.value,
                updated_at=now,
            )
        )


@storefront.repository(part_of=Order)
class OrderRepository:
    def for_customer(self, customer_id: str, page: int, size: int):
        """One page of a customer's orders, newest first. Returns a ResultSet (items, total)."""
        return (
            self._dao.query.filter(customer_id=customer_id)
            .order_by("-created_at")
            .offset((page - 1) * size)
            .limit(size)
            .all()
        )
