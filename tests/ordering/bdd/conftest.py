"""Shared BDD fixtures and step definitions for checkout and order status."""

import json

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then, when
from storefront.catalogue.product import Product
from storefront.errors import StorefrontError
from storefront.order.creation import CreateOrder
from storefront.order.order import Order
from storefront.order.queries import list_orders
from storefront.order.status import UpdateOrderStatus


@pytest.fixture()
def products():
    """Products created in the scenario, keyed by their feature-file name."""
    return {}


@pytest.fixture()
def outcome():
    """Result of the last action: ``order_id`` on success, ``error`` on failure."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.parse('a product "{name}" priced {price:f} with {stock:d} units in stock'))
def _(products, make_product, name, price, stock):
    products[name] = make_product(stock_quantity=stock, price=price, name=name)


@given(parsers.parse('customer "{customer_id}" has an empty cart'))
def _(make_cart, customer_id):
    make_cart(customer_id)


@given(
    parsers.re(r'customer "(?P<customer_id>[^"]+)" has (?P<qty>\d+) of "(?P<name>[^"]+)" in the cart'),
    converters={"qty": int},
)
def _(products, make_cart, customer_id, qty, name):
    make_cart(customer_id, [(products[name], qty)])


@given(
    parsers.re(
        r'customer "(?P<customer_id>[^"]+)" has (?P<qty_a>\d+) of "(?P<a>[^"]+)" and (?P<qty_b>\d+) of "(?P<b>[^"]+)" in the cart'
    ),
    converters={"qty_a": int, "qty_b": int},
)
def _(products, make_cart, customer_id, qty_a, a, qty_b, b):
    make_cart(customer_id, [(products[a], qty_a), (products[b], qty_b)])


@given(parsers.parse('customer "{customer_id}" checks out'))
@when(parsers.parse('customer "{customer_id}" checks out'))
def _(outcome, shipping_address, customer_id):
    outcome.clear()
    command = CreateOrder(customer_id=customer_id, shipping_address=json.dumps(shipping_address))
    try:
        outcome["order_id"] = current_domain.process(command, asynchronous=False)
    except StorefrontError as exc:
        outcome["error"] = exc


@given(parsers.parse('the order has moved through "{statuses}"'))
def _(outcome, statuses):
    for status in statuses.split(","):
        command = UpdateOrderStatus(order_id=outcome["order_id"], status=status.strip())
        current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.parse('the order status is set to "{status}"'))
def _(outcome, status):
    outcome.pop("error", None)
    try:
        current_domain.process(UpdateOrderStatus(order_id=outcome["order_id"], status=status), asynchronous=False)
    except StorefrontError as exc:
        outcome["error"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
def _order(outcome) -> Order:
    return current_domain.repository_for(Order).get(outcome["order_id"])


@then(parsers.parse("the order total is {total:f}"))
def _(outcome, total):
    assert _order(outcome).total_amount == pytest.approx(total)


@then(parsers.parse('the order status is "{status}"'))
def _(outcome, status):
    assert _order(outcome).status == status


@then(parsers.parse('product "{name}" has {stock:d} units in stock'))
def _(products, name, stock):
    assert current_domain.repository_for(Product).get(products[name].id).stock_quantity == stock


@then(parsers.parse('the checkout fails with "{message}"'))
def _(outcome, message):
    assert outcome["error"].message == message


@then(parsers.parse('the checkout fails for lack of stock of "{name}"'))
def _(outcome, products, name):
    error = outcome["error"]
    assert error.code == "INSUFFICIENT_STOCK"
    assert error.product_id == str(products[name].id)


@then(parsers.parse('customer "{customer_id}" has no orders'))
def _(customer_id):
    assert list_orders(customer_id) == ([], 0)


@then("the status update fails as an invalid transition")
def _(outcome):
    assert outcome["error"].code == "INVALID_TRANSITION"
