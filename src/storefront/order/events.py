"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderCreated:
    """A cart was turned into an order and its stock reserved."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total_amount = Float(required=True)
    item_count = Integer(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentLinked:
    """A gateway payment intent was attached to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_intent_id = String(required=True)
    linked_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentStatusUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_intent_id = String()
    payment_status = String(required=True)
    updated_at = DateTime(required=True)
