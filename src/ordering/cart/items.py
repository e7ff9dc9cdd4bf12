"""Cart item management: commands and handler.

Each handler hydrates the user's cart, applies one mutation, writes the cart
back and returns the resulting item count.
"""

from protean import handle
from protean.fields import Dict, Identifier, Integer

from ordering.cart.cart import ShoppingCart
from ordering.cart.persistence import load_cart, save_cart
from ordering.domain import ordering


@ordering.command(part_of="ShoppingCart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)  # 0 removes the line


@ordering.command(part_of="ShoppingCart")
class SaveCart:
    """Write back the whole cart mapping held by the client."""

    user_id = Identifier(required=True)
    cart_items = Dict()


@ordering.command(part_of="ShoppingCart")
class ClearCart:
    user_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        cart = load_cart(command.user_id)
        cart.add_item(command.product_id)
        save_cart(cart)
        return cart.count()

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        cart = load_cart(command.user_id)
        cart.set_quantity(command.product_id, command.quantity)
        save_cart(cart)
        return cart.count()

    @handle(SaveCart)
    def save_whole_cart(self, command):
        cart = load_cart(command.user_id)
        cart.replace(command.cart_items or {})
        save_cart(cart)
        return cart.count()

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = load_cart(command.user_id)
        cart.clear()
        save_cart(cart)
        return cart.count()
