"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.cart.cart import ShoppingCart
from ordering.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartSaved,
)
from ordering.errors import InvalidRequest
from pytest_bdd import given, parsers, then

_CART_EVENT_CLASSES = {
    "CartItemAdded": CartItemAdded,
    "CartQuantityUpdated": CartQuantityUpdated,
    "CartItemRemoved": CartItemRemoved,
    "CartSaved": CartSaved,
    "CartCleared": CartCleared,
}


def parse_cart_items(text):
    """``P1=2, P2=1`` -> ``{"P1": 2, "P2": 1}``"""
    items = {}
    for entry in text.split(","):
        product_id, _, quantity = entry.strip().partition("=")
        items[product_id.strip()] = int(quantity)
    return items


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def user_id():
    return "user-001"


@pytest.fixture()
def error():
    """Container for captured errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps - Catalog
# ---------------------------------------------------------------------------
@given("the catalog is empty")
def empty_catalog(catalog):
    return catalog


@given(parsers.cfparse('the catalog lists "{product_id}" at {offer_price:f}'))
def catalog_lists_product(catalog, product_id, offer_price):
    catalog.add_product(product_id, offer_price=offer_price)


# ---------------------------------------------------------------------------
# Given steps - Shopping Cart
# ---------------------------------------------------------------------------
@given("an empty cart", target_fixture="cart")
def empty_cart(user_id):
    cart = ShoppingCart.create(user_id=user_id)
    cart._events.clear()
    return cart


@given(parsers.cfparse("a cart holding {items}"), target_fixture="cart")
def cart_holding(user_id, items):
    cart = ShoppingCart.create(user_id=user_id)
    cart.replace(parse_cart_items(items))
    cart._events.clear()
    return cart


# ---------------------------------------------------------------------------
# Then steps - Cart
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart count is {count:d}"))
def cart_count_is(cart, count):
    assert cart.count() == count


@then(parsers.cfparse("the cart holds {items}"))
def cart_holds(cart, items):
    assert cart.snapshot() == parse_cart_items(items)


@then("the cart is empty")
def cart_is_empty(cart):
    assert cart.snapshot() == {}
    assert cart.count() == 0


@then("the cart action fails with an invalid request")
def cart_action_fails(error):
    assert error["exc"] is not None, "Expected an invalid request but none was raised"
    assert isinstance(error["exc"], InvalidRequest)


@then(parsers.cfparse("a {event_type} cart event is raised"))
def cart_event_raised(cart, event_type):
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in cart._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in cart._events]}"


@then("no cart event is raised")
def no_cart_event_raised(cart):
    assert cart._events == []
