"""Payment read paths."""

from protean.utils.globals import current_domain

from storefront.config import pagination
from storefront.errors import wrap_errors
from storefront.payment.payment import Payment


def get_payment(payment_id: str) -> Payment:
    with wrap_errors("get_payment"):
        return current_domain.repository_for(Payment).get(payment_id)


def list_payments(customer_id: str, page: int | None = 1, size: int | None = None) -> tuple[list[Payment], int]:
    """One page of the customer's payments (newest first) and their total count."""
    page, size = pagination(page, size)
    with wrap_errors("list_payments"):
        results = current_domain.repository_for(Payment).for_customer(customer_id, page, size)
    return list(results.items), results.total
