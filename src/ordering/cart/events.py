"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer

from ordering.domain import ordering


@ordering.event(part_of="ShoppingCart")
class CartItemAdded:
    """One unit of a product was added to the cart."""

    __version__ = 1

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)  # quantity after the add


@ordering.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart line was set explicitly."""

    __version__ = 1

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A cart line was removed by setting its quantity to zero."""

    __version__ = 1

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartSaved:
    """The whole cart mapping was written back by the client."""

    __version__ = 1

    user_id = Identifier(required=True)
    item_count = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartCleared:
    """The cart was emptied, usually right after checkout."""

    __version__ = 1

    user_id = Identifier(required=True)
