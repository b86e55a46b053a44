"""Order status graph: only the five forward edges are allowed."""

import pytest
from storefront.errors import InvalidTransition
from storefront.order.order import Order, OrderStatus

ALLOWED = {
    (OrderStatus.PENDING, OrderStatus.CONFIRMED),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.CONFIRMED, OrderStatus.SHIPPING),
    (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    (OrderStatus.SHIPPING, OrderStatus.DELIVERED),
}

# Shortest path from Pending to each status
PATHS = {
    OrderStatus.PENDING: [],
    OrderStatus.CONFIRMED: [OrderStatus.CONFIRMED],
    OrderStatus.SHIPPING: [OrderStatus.CONFIRMED, OrderStatus.SHIPPING],
    OrderStatus.DELIVERED: [OrderStatus.CONFIRMED, OrderStatus.SHIPPING, OrderStatus.DELIVERED],
    OrderStatus.CANCELLED: [OrderStatus.CANCELLED],
}


def _order_in(status, shipping_address):
    order = Order.create(
        "cust-001",
        [{"product_id": "prod-a", "quantity": 1, "unit_price": 10.0}],
        shipping_address,
    )
    for step in PATHS[status]:
        order.transition_to(step)
    return order


@pytest.mark.parametrize("current", list(OrderStatus))
@pytest.mark.parametrize("target", list(OrderStatus))
def test_transition_graph(current, target, shipping_address):
    order = _order_in(current, shipping_address)

    if (current, target) in ALLOWED:
        order.transition_to(target)
        assert order.status == target.value
    else:
        with pytest.raises(InvalidTransition):
            order.transition_to(target)
        assert order.status == current.value


def test_parse_is_case_insensitive():
    assert OrderStatus.parse("shipping") == OrderStatus.SHIPPING
    assert OrderStatus.parse(" Delivered ") == OrderStatus.DELIVERED


def test_invalid_transition_names_both_states(shipping_address):
    order = _order_in(OrderStatus.DELIVERED, shipping_address)
    with pytest.raises(InvalidTransition) as exc:
        order.transition_to(OrderStatus.PENDING)
    assert exc.value.current == "Delivered"
    assert exc.value.target == "Pending"
