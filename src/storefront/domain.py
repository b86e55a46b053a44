"""Storefront bounded context: Checkout and Payment Settlement.

Turns a customer's cart into a durable order (reserving stock on the way),
requests payment authorization from an external gateway and reconciles the
final payment outcome from gateway webhooks.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging

configure_logging()

storefront = Domain(name="storefront")
