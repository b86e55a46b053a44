"""Order creation: command and handler.

Reads the customer's cart, reserves stock for every line and writes the
order. Reservation and the order write share the handler's unit of work, so
nothing is committed unless both succeed.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.errors import EmptyCart, NotFound, wrap_errors
from storefront.inventory.gate import InventoryGate
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CreateOrder:
    customer_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: address dict


@storefront.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        with wrap_errors("create_order"):
            cart = current_domain.repository_for(ShoppingCart).for_customer(str(command.customer_id))
            if cart is None:
                raise NotFound(f"Cart for customer {command.customer_id} not found")
            if cart.is_empty:
                raise EmptyCart()

            shipping_address = (
                json.loads(command.shipping_address)
                if isinstance(command.shipping_address, str)
                else command.shipping_address
            )

            # Build first so a bad address fails before any stock moves
            order = Order.create(
                customer_id=command.customer_id,
                items_data=[
                    {
                        "product_id": str(item.product_id),
                        "quantity": item.quantity,
                        "unit_price": item.unit_price,
                    }
                    for item in cart.items
                ],
                shipping_address=shipping_address,
            )

            InventoryGate().reserve(cart.demands())
            current_domain.repository_for(Order).add(order)

        logger.info(
            "Order created",
            order_id=str(order.id),
            customer_id=str(command.customer_id),
            total_amount=order.total_amount,
            item_count=len(order.items),
        )
        return str(order.id)
