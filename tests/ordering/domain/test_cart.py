"""Cart read model: line merging and totals."""

import pytest
from protean.exceptions import ValidationError
from storefront.cart.cart import ShoppingCart


class TestShoppingCart:
    def test_new_cart_is_empty(self):
        cart = ShoppingCart.create("cust-001")
        assert cart.is_empty
        assert cart.total == 0.0

    def test_total_tracks_lines(self):
        cart = ShoppingCart.create("cust-001")
        cart.add_item("prod-a", 2, 10.0)
        cart.add_item("prod-b", 1, 25.0)
        assert cart.total == 45.0

    def test_same_product_merges(self):
        cart = ShoppingCart.create("cust-001")
        cart.add_item("prod-a", 2, 10.0)
        cart.add_item("prod-a", 1, 10.0)
        assert len(cart.items) == 1
        assert cart.demands() == [("prod-a", 3)]

    def test_price_mismatch_rejected(self):
        cart = ShoppingCart.create("cust-001")
        cart.add_item("prod-a", 2, 10.0)
        with pytest.raises(ValidationError):
            cart.add_item("prod-a", 1, 12.0)

    def test_zero_quantity_rejected(self):
        cart = ShoppingCart.create("cust-001")
        with pytest.raises(ValidationError):
            cart.add_item("prod-a", 0, 10.0)
