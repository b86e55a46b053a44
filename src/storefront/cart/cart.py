"""Shopping cart: read model of the cart service.

Cart contents are managed and validated by the cart service; checkout only
reads them. ``add_item`` exists so carts can be seeded and kept consistent
(line total = quantity x unit price, total = sum of line totals).
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer

from storefront.domain import storefront


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    total = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, total=0.0, created_at=now, updated_at=now)

    def add_item(self, product_id, quantity, unit_price):
        """Add a line, merging with an existing line for the same product."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = next((i for i in self.items if str(i.product_id) == str(product_id)), None)
        if existing:
            if existing.unit_price != unit_price:
                raise ValidationError({"unit_price": ["Unit price differs from the existing cart line"]})
            existing.quantity += quantity
        else:
            self.add_items(CartItem(product_id=product_id, quantity=quantity, unit_price=unit_price))

        self.total = sum(item.line_total for item in self.items)
        self.updated_at = datetime.now(UTC)

    def demands(self) -> list[tuple[str, int]]:
        """(product_id, quantity) pairs for stock reservation."""
        return [(str(item.product_id), item.quantity) for item in self.items]

    @property
    def is_empty(self) -> bool:
        return not self.items


@storefront.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def for_customer(self, customer_id: str) -> ShoppingCart | None:
        """The customer's cart, or None when the cart service has none on record."""
        return self._dao.query.filter(customer_id=customer_id).all().first
