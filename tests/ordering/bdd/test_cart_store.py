"""BDD tests for the cart store."""

from ordering.errors import InvalidRequest
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/cart_store.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{product_id}" is added to the cart'))
def add_product_to_cart(cart, product_id):
    cart.add_item(product_id)


@when(parsers.cfparse('the quantity of "{product_id}" is set to {qty:d}'))
def set_cart_quantity(cart, product_id, qty, error):
    try:
        cart.set_quantity(product_id, qty)
    except InvalidRequest as exc:
        error["exc"] = exc


@when("the cart is cleared")
def clear_cart(cart):
    cart.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart total is {amount:f}"))
def cart_total_is(cart, catalog, amount):
    assert cart.total_amount(catalog.snapshot()) == amount
