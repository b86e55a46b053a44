import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before any domain module is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.pop("STRIPE_API_KEY", None)


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session", autouse=True)
def setup_db(storefront_bed):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Fixture to automatically cleanup infrastructure after every test"""
    from storefront.gateway import reset_gateway

    yield

    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    reset_gateway()


@pytest.fixture()
def fake_gateway():
    from storefront.gateway import set_gateway
    from storefront.gateway.fake_adapter import FakeGateway

    gateway = FakeGateway()
    set_gateway(gateway)
    return gateway


@pytest.fixture()
def make_product():
    """Persist a product and return it."""
    from protean import current_domain
    from storefront.catalogue.product import Product

    def _make(stock_quantity=5, price=10.0, status="Active", sku=None, name="Widget"):
        product = Product.create(
            name=name,
            sku=sku or f"SKU-{name.upper()}",
            price=price,
            stock_quantity=stock_quantity,
            status=status,
        )
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture()
def make_cart():
    """Persist a cart holding ``(product, quantity)`` lines at the product's price."""
    from protean import current_domain
    from storefront.cart.cart import ShoppingCart

    def _make(customer_id, lines=()):
        cart = ShoppingCart.create(customer_id)
        for product, quantity in lines:
            cart.add_item(str(product.id), quantity, product.price)
        current_domain.repository_for(ShoppingCart).add(cart)
        return cart

    return _make


@pytest.fixture()
def shipping_address():
    return {
        "street": "123 Main St",
        "city": "Springfield",
        "state": "IL",
        "postal_code": "62704",
        "country": "US",
    }
