"""Order status updates: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import wrap_errors
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        with wrap_errors("update_order_status"):
            target = OrderStatus.parse(command.status)
            repo = current_domain.repository_for(Order)
            order = repo.get(command.order_id)
            previous = order.status
            order.transition_to(target)
            repo.add(order)

        logger.info(
            "Order status updated",
            order_id=str(command.order_id),
            previous_status=previous,
            new_status=target.value,
        )
        return str(order.id)
