"""BDD tests for order placement."""

import pytest
from ordering import errors
from ordering.order.order import Order
from ordering.order.placement import checkout
from protean import current_domain
from protean.exceptions import ProteanException
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/order_placement.feature")


@pytest.fixture()
def outcome():
    return {"order": None, "exc": None, "order_ids": set()}


def _parse_items(text):
    return {product_id.strip(): int(quantity) for product_id, _, quantity in (e.partition("=") for e in text.split(","))}


def _checkout(outcome, user_id, address_id, items, idempotency_key=None):
    lines = [{"product_id": product_id, "quantity": quantity} for product_id, quantity in items.items()]
    try:
        order = checkout(user_id, address_id, lines, idempotency_key=idempotency_key)
    except ProteanException as exc:
        outcome["exc"] = exc
        return
    outcome["order"] = order
    outcome["order_ids"].add(str(order.id))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{user_id}" checks out an empty cart to address "{address_id}"'))
def checkout_empty_cart(outcome, user_id, address_id):
    _checkout(outcome, user_id, address_id, {})


@when(parsers.re(r'"(?P<user_id>[^"]*)" checks out (?P<items>\S+=\d+(?:, \S+=\d+)*) to address "(?P<address_id>[^"]*)"$'))
def checkout_items(outcome, user_id, items, address_id):
    _checkout(outcome, user_id, address_id, _parse_items(items))


@when(
    parsers.re(
        r'"(?P<user_id>[^"]*)" checks out (?P<items>\S+=\d+(?:, \S+=\d+)*) '
        r'to address "(?P<address_id>[^"]*)" with key "(?P<key>[^"]*)"$'
    )
)
def checkout_items_with_key(outcome, user_id, items, address_id, key):
    _checkout(outcome, user_id, address_id, _parse_items(items), idempotency_key=key)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the checkout succeeds")
def checkout_succeeds(outcome):
    assert outcome["exc"] is None, f"Checkout failed: {outcome['exc']!r}"
    assert outcome["order"] is not None


@then(parsers.cfparse("the checkout fails with {error_name}"))
def checkout_fails_with(outcome, error_name):
    assert outcome["order"] is None
    assert isinstance(outcome["exc"], getattr(errors, error_name))


@then(parsers.cfparse("the order amount is {amount:f}"))
def order_amount_is(outcome, amount):
    assert outcome["order"].amount == amount


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(outcome, status):
    assert outcome["order"].status == status


@then(parsers.re(r"(?P<count>\d+) orders? (?:is|are) recorded"), converters={"count": int})
def orders_recorded(outcome, count):
    assert len(outcome["order_ids"]) == count
    for order_id in outcome["order_ids"]:
        assert current_domain.repository_for(Order).get(order_id) is not None


@then("the catalog was not consulted")
def catalog_not_consulted(catalog):
    assert catalog.calls == []
