"""Stock reservation through the inventory gate."""

import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest
from protean import current_domain
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import BadRequest, InsufficientStock, NotFound
from storefront.inventory.gate import InventoryGate


def _stock(product):
    return current_domain.repository_for(Product).get(product.id).stock_quantity


class TestReserve:
    def test_decrements_each_product(self, make_product):
        a = make_product(stock_quantity=5, name="A")
        b = make_product(stock_quantity=5, name="B")

        remaining = InventoryGate().reserve([(a.id, 2), (b.id, 1)])

        assert remaining == {str(a.id): 3, str(b.id): 4}
        assert _stock(a) == 3
        assert _stock(b) == 4

    def test_repeated_product_lines_are_summed(self, make_product):
        a = make_product(stock_quantity=5)
        InventoryGate().reserve([(a.id, 2), (a.id, 2)])
        assert _stock(a) == 1

    def test_exact_stock_can_be_reserved(self, make_product):
        a = make_product(stock_quantity=3)
        InventoryGate().reserve([(a.id, 3)])
        assert _stock(a) == 0

    def test_shortage_leaves_all_stock_untouched(self, make_product):
        a = make_product(stock_quantity=5, name="A")
        b = make_product(stock_quantity=1, name="B")

        with pytest.raises(InsufficientStock) as exc:
            InventoryGate().reserve([(a.id, 2), (b.id, 3)])

        assert exc.value.product_id == str(b.id)
        assert exc.value.available == 1
        assert _stock(a) == 5
        assert _stock(b) == 1

    def test_unknown_product(self, make_product):
        with pytest.raises(NotFound):
            InventoryGate().reserve([("no-such-product", 1)])

    @pytest.mark.parametrize("status", ["Inactive", "Discontinued"])
    def test_unavailable_product_rejected(self, make_product, status):
        a = make_product(stock_quantity=5, status=status)
        with pytest.raises(BadRequest):
            InventoryGate().reserve([(a.id, 1)])
        assert _stock(a) == 5

    def test_non_positive_quantity_rejected(self, make_product):
        a = make_product(stock_quantity=5)
        with pytest.raises(BadRequest):
            InventoryGate().reserve([(a.id, 0)])


class TestSequentialDemand:
    def test_only_floor_of_stock_over_quantity_succeed(self, make_product):
        a = make_product(stock_quantity=5)
        succeeded, short = 0, 0

        for _ in range(4):
            try:
                InventoryGate().reserve([(a.id, 2)])
                succeeded += 1
            except InsufficientStock:
                short += 1

        assert succeeded == 2
        assert short == 2
        assert _stock(a) == 1


class TestContention:
    def test_lost_update_is_retried_against_fresh_stock(self, make_product):
        a = make_product(stock_quantity=5)
        gate = InventoryGate()
        original = gate.repo.decrement_stock
        observed_values = []

        def racing(product_id, observed, quantity):
            if not observed_values:
                # A competing checkout takes 2 units between our read and write
                original(product_id, observed, 2)
            observed_values.append(observed)
            return original(product_id, observed, quantity)

        with patch.object(gate.repo, "decrement_stock", side_effect=racing):
            remaining = gate.reserve([(a.id, 1)])

        assert observed_values == [5, 3]
        assert remaining == {str(a.id): 2}
        assert _stock(a) == 2

    def test_retry_rechecks_availability(self, make_product):
        a = make_product(stock_quantity=5)
        gate = InventoryGate()
        original = gate.repo.decrement_stock

        def racing(product_id, observed, quantity):
            original(product_id, observed, 4)
            return 0

        with patch.object(gate.repo, "decrement_stock", side_effect=racing):
            with pytest.raises(InsufficientStock):
                gate.reserve([(a.id, 3)])

        assert _stock(a) == 1

    def test_keeps_retrying_while_stock_covers_demand(self, make_product):
        a = make_product(stock_quantity=5)
        gate = InventoryGate()
        original = gate.repo.decrement_stock
        lost = []

        def losing(product_id, observed, quantity):
            if len(lost) < 6:
                lost.append(observed)
                return 0
            return original(product_id, observed, quantity)

        with patch.object(gate.repo, "decrement_stock", side_effect=losing):
            remaining = gate.reserve([(a.id, 1)])

        assert len(lost) == 6
        assert remaining == {str(a.id): 4}
        assert _stock(a) == 4


class TestConcurrentDemand:
    def test_exactly_floor_of_stock_over_quantity_succeed(self, make_product):
        a = make_product(stock_quantity=10)
        workers = 8
        start = threading.Barrier(workers)

        def checkout():
            with storefront.domain_context():
                start.wait()
                try:
                    InventoryGate().reserve([(a.id, 3)])
                    return "reserved"
                except InsufficientStock:
                    return "short"

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda _: checkout(), range(workers)))

        assert results.count("reserved") == 3
        assert results.count("short") == 5
        assert _stock(a) == 1
