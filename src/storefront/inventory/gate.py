"""Inventory gate: verifies and reserves stock for a set of demands.

Every demand is checked before anything is touched, so a shortage on any
product leaves all stock as it was. Each decrement is then a single
conditional update keyed on the stock value that was read; a zero row count
means another order got there first, and the product is re-read and
re-checked rather than overwritten.

Reservation is not compensated by this module. Callers run it inside the
same unit of work as the order write so that a failure before commit
discards both.
"""

from collections import OrderedDict
from itertools import count

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.errors import BadRequest, InsufficientStock, NotFound

logger = structlog.get_logger(__name__)


def _aggregate(demands):
    totals = OrderedDict()
    for product_id, quantity in demands:
        if quantity < 1:
            raise BadRequest(f"Requested quantity for product {product_id} must be at least 1")
        totals[str(product_id)] = totals.get(str(product_id), 0) + quantity
    return totals


class InventoryGate:
    def __init__(self) -> None:
        self.repo = current_domain.repository_for(Product)

    def _load(self, product_id: str) -> Product:
        try:
            return self.repo.get(product_id)
        except ObjectNotFoundError as exc:
            raise NotFound(f"Product {product_id} not found") from exc

    def _check(self, product: Product, quantity: int) -> None:
        if not product.is_active:
            raise BadRequest(f"Product {product.id} is not available for sale ({product.status})")
        if not product.can_supply(quantity):
            raise InsufficientStock(str(product.id), product.stock_quantity, quantity)

    def reserve(self, demands) -> dict[str, int]:
        """Reserve ``quantity`` units for each ``(product_id, quantity)`` demand.

        Returns the remaining stock per product. Raises ``NotFound``,
        ``BadRequest`` (inactive product) or ``InsufficientStock``.
        """
        totals = _aggregate(demands)

        # Verify everything up front
        products = {}
        for product_id, quantity in totals.items():
            product = self._load(product_id)
            self._check(product, quantity)
            products[product_id] = product

        remaining = {}
        for product_id, quantity in totals.items():
            remaining[product_id] = self._reserve_one(products[product_id], quantity)
        return remaining

    def _reserve_one(self, product: Product, quantity: int) -> int:
        product_id = str(product.id)
        # A lost update means another writer consumed stock, so each pass either
        # succeeds or the re-check eventually fails with InsufficientStock
        for attempt in count(1):
            observed = product.stock_quantity
            if self.repo.decrement_stock(product_id, observed, quantity) == 1:
                logger.info(
                    "Stock reserved",
                    product_id=product_id,
                    quantity=quantity,
                    remaining=observed - quantity,
                    attempt=attempt,
                )
                return observed - quantity

            logger.warning(
                "Stock changed during reservation, retrying",
                product_id=product_id,
                observed=observed,
                attempt=attempt,
            )
            product = self._load(product_id)
            self._check(product, quantity)
