"""Checkout and cart error taxonomy.

All errors carry a ``messages`` dict (field -> list of messages), the same
shape Protean's own exceptions use, so callers can render any of them the
same way.
"""

from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError


class InvalidRequest(ValidationError):
    """Malformed or empty cart, missing address, or a negative quantity."""


class Unauthorized(ProteanException):
    """No resolved user identity."""


class ProductNotFound(ObjectNotFoundError):
    """An item references a product the catalog cannot resolve."""

    def __init__(self, product_id):
        self.product_id = str(product_id)
        super().__init__({"product_id": [f"Product {self.product_id} not found"]})


class PersistenceFailure(ProteanException):
    """The repository write itself failed."""


class CheckoutInProgress(ProteanException):
    """Another checkout for the same user held the lock for too long."""


def error_message(exc) -> str:
    """Flatten an exception's ``messages`` into one human-readable line."""
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        parts = []
        for field, errors in messages.items():
            if isinstance(errors, list | tuple):
                parts.extend(str(error) for error in errors)
            else:
                parts.append(f"{field}: {errors}")
        if parts:
            return "; ".join(parts)
    return str(exc) or exc.__class__.__name__
