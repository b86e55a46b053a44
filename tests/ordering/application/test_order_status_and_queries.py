"""Application tests for order status updates and order reads."""

import json

import pytest
from protean import current_domain
from storefront.errors import BadRequest, InvalidTransition, NotFound
from storefront.order.creation import CreateOrder
from storefront.order.order import Order, OrderStatus
from storefront.order.queries import get_order, list_orders
from storefront.order.status import UpdateOrderStatus


@pytest.fixture()
def place_order(make_product, make_cart, shipping_address):
    def _place(customer_id="cust-001"):
        product = make_product(stock_quantity=100)
        make_cart(customer_id, [(product, 1)])
        command = CreateOrder(customer_id=customer_id, shipping_address=json.dumps(shipping_address))
        return current_domain.process(command, asynchronous=False)

    return _place


def _update(order_id, status):
    return current_domain.process(UpdateOrderStatus(order_id=order_id, status=status), asynchronous=False)


class TestUpdateOrderStatus:
    def test_walks_the_happy_path(self, place_order):
        order_id = place_order()
        for status in ("Confirmed", "Shipping", "Delivered"):
            _update(order_id, status)
        assert get_order(order_id).status == OrderStatus.DELIVERED.value

    def test_accepts_lowercase_status(self, place_order):
        order_id = place_order()
        _update(order_id, "cancelled")
        assert get_order(order_id).status == OrderStatus.CANCELLED.value

    def test_delivered_cannot_return_to_pending(self, place_order):
        order_id = place_order()
        for status in ("Confirmed", "Shipping", "Delivered"):
            _update(order_id, status)

        with pytest.raises(InvalidTransition):
            _update(order_id, "Pending")

        assert get_order(order_id).status == OrderStatus.DELIVERED.value

    def test_unknown_status(self, place_order):
        order_id = place_order()
        with pytest.raises(BadRequest):
            _update(order_id, "Lost")

    def test_unknown_order(self):
        with pytest.raises(NotFound):
            _update("ord-404", "Confirmed")


class TestOrderQueries:
    def test_get_order_includes_items(self, place_order):
        order_id = place_order()
        order = get_order(order_id)
        assert isinstance(order, Order)
        assert len(order.items) == 1

    def test_get_missing_order(self):
        with pytest.raises(NotFound) as exc:
            get_order("ord-404")
        assert exc.value.operation == "get_order"

    def test_list_is_scoped_to_customer(self, place_order):
        place_order("cust-001")
        place_order("cust-002")

        orders, total = list_orders("cust-001")

        assert total == 1
        assert str(orders[0].customer_id) == "cust-001"

    def test_list_pages(self, place_order):
        for _ in range(3):
            place_order("cust-001")

        first, total = list_orders("cust-001", page=1, size=2)
        second, _ = list_orders("cust-001", page=2, size=2)

        assert total == 3
        assert len(first) == 2
        assert len(second) == 1

    def test_list_clamps_bad_paging(self, place_order):
        place_order("cust-001")
        orders, total = list_orders("cust-001", page=0, size=0)
        assert total == 1
        assert len(orders) == 1
