"""Order read paths."""

from protean.utils.globals import current_domain

from storefront.config import pagination
from storefront.errors import wrap_errors
from storefront.order.order import Order


def get_order(order_id: str) -> Order:
    """Fetch an order with its items. Raises ``NotFound`` when absent."""
    with wrap_errors("get_order"):
        return current_domain.repository_for(Order).get(order_id)


def list_orders(customer_id: str, page: int | None = 1, size: int | None = None) -> tuple[list[Order], int]:
    """One page of the customer's orders (newest first) and the customer's total order count."""
    page, size = pagination(page, size)
    with wrap_errors("list_orders"):
        results = current_domain.repository_for(Order).for_customer(customer_id, page, size)
    return list(results.items), results.total
