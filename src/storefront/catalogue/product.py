"""Product aggregate: the stock and price subset of a catalogue product.

The catalogue owns product records; the checkout core only reads price and
status and moves ``stock_quantity`` down when an order reserves it.
"""

import threading
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Integer, String
from protean.utils.query import Q

from storefront.domain import storefront


class ProductStatus(Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    DISCONTINUED = "Discontinued"


@storefront.aggregate
class Product:
    name = String(required=True, max_length=200)
    sku = String(required=True, max_length=50)
    price = Float(required=True, min_value=0.0)
    stock_quantity = Integer(default=0, min_value=0)
    status = String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, sku, price, stock_quantity=0, status=ProductStatus.ACTIVE.value):
        now = datetime.now(UTC)
        return cls(
            name=name,
            sku=sku,
            price=price,
            stock_quantity=stock_quantity,
            status=status,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_active(self) -> bool:
        return ProductStatus(self.status) == ProductStatus.ACTIVE

    def can_supply(self, quantity: int) -> bool:
        return (self.stock_quantity or 0) >= quantity


# The memory provider copies its store per session and has no row locks
_decrement_lock = threading.Lock()


@storefront.repository(part_of=Product)
class ProductRepository:
    """Product persistence with a conditional stock decrement."""

    def decrement_stock(self, product_id: str, observed: int, quantity: int) -> int:
        """Move stock from ``observed`` to ``observed - quantity`` in one conditional update.

        The update only matches while the stored stock still equals the value
        the caller read, so two writers can never both consume the same units.
        Returns the number of rows changed (0 or 1).
        """
        with _decrement_lock:
            return self._dao._update_all(
                Q(id=product_id, stock_quantity=observed),
                {"stock_quantity": observed - quantity, "updated_at": datetime.now(UTC)},
            )
