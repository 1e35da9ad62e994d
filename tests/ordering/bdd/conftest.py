"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from catalogue.store import set_variation_store
from catalogue.store.memory_adapter import InMemoryVariationStore
from catalogue.store.port import Product, Variation
from ordering.cart.items import AddToCart
from ordering.order.checkout import checkout
from ordering.order.order import Order
from protean import current_domain
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def customer_id():
    return "cust-001"


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


@pytest.fixture()
def bdd_store(customers, payment_methods):
    store = InMemoryVariationStore()
    store.add_product(Product(product_id="prod-a", name="Product A", slug="product-a"))
    set_variation_store(store)
    return store


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('variation "{variation_id}" costs {price:d} with {available:d} in stock'))
def _(bdd_store, variation_id, price, available):
    bdd_store.add_variation(
        Variation(
            variation_id=variation_id,
            product_id="prod-a",
            sku=variation_id.upper(),
            name=variation_id,
            unit_price=price,
            available_quantity=available,
        )
    )


@given(parsers.cfparse('the customer has {quantity:d} of "{variation_id}" in the cart'))
def _(bdd_store, customer_id, variation_id, quantity):
    current_domain.process(
        AddToCart(customer_id=customer_id, variation_id=variation_id, quantity=quantity),
        asynchronous=False,
    )


@given("the customer checked out", target_fixture="order")
def _(customer_id):
    return checkout(customer_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{variation_id}" has {available:d} in stock'))
def _(bdd_store, variation_id, available):
    assert bdd_store.get_variation(variation_id).available_quantity == available


@then(parsers.cfparse('the order status history is "{history}"'))
def _(order, history):
    stored = current_domain.repository_for(Order).get(order["id"])
    assert stored.history == [status.strip() for status in history.split(",")]


@then(parsers.cfparse('the order payment is "{payment_status}"'))
def _(order, payment_status):
    stored = current_domain.repository_for(Order).get(order["id"])
    assert stored.payment.status == payment_status


@then(parsers.cfparse("the action fails with {error_name}"))
def _(error, error_name):
    assert error["exc"] is not None
    assert type(error["exc"]).__name__ == error_name
