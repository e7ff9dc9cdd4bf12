"""Cart persistence hooks: hydrate a user's cart and write it back.

Loading never fails on bad data: an absent cart starts empty and an
unreadable blob is sanitized. Saving reports failures to the caller as
PersistenceFailure and leaves the in-memory cart exactly as it was.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.errors import PersistenceFailure
from ordering.utils.logging import get_logger

logger = get_logger(__name__)


def load_cart(user_id) -> ShoppingCart:
    """Return the stored cart for ``user_id``, or a fresh empty one."""
    repo = current_domain.repository_for(ShoppingCart)
    try:
        cart = repo.get(user_id)
    except ObjectNotFoundError:
        return ShoppingCart.create(user_id)
    except ValidationError as exc:
        logger.warning("cart_blob_unreadable", user_id=str(user_id), error=str(exc))
        return ShoppingCart.create(user_id)

    if cart.sanitize():
        logger.warning("cart_blob_sanitized", user_id=str(user_id))
    return cart


def save_cart(cart: ShoppingCart) -> None:
    """Write the cart back to storage."""
    try:
        current_domain.repository_for(ShoppingCart).add(cart)
    except Exception as exc:
        logger.error("cart_save_failed", user_id=str(cart.user_id), error=str(exc))
        raise PersistenceFailure({"cart": [f"Could not save cart: {exc}"]}) from exc
