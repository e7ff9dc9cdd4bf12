"""Shopping Cart aggregate (CQRS): per-user mapping of product id to quantity.

The cart stores no prices, only product ids and quantities, so it can never
go stale against the catalog. Every mutation builds a new mapping and rebinds
``cart_items``; a snapshot handed out earlier is never modified in place.

Derived reads (``count``, ``total_amount``, ``snapshot``, ``lines``) are
total: a missing or corrupt mapping reads as an empty cart and a missing or
lagging catalog simply contributes nothing.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from decimal import ROUND_FLOOR, Decimal, InvalidOperation

from protean.fields import DateTime, Dict, Identifier

from ordering.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartSaved,
)
from ordering.domain import ordering
from ordering.errors import InvalidRequest

CENT = Decimal("0.01")


def valid_items(raw) -> dict:
    """Keep only entries with a positive whole-number quantity.

    Anything that is not a mapping reads as an empty cart.
    """
    if not isinstance(raw, Mapping):
        return {}

    items = {}
    for product_id, quantity in raw.items():
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            continue
        items[str(product_id)] = quantity
    return items


def _index_catalog(catalog) -> Mapping:
    if catalog is None:
        return {}
    if isinstance(catalog, Mapping):
        return catalog
    try:
        return {str(product.product_id): product for product in catalog}
    except (TypeError, AttributeError):
        return {}


def _offer_price(catalog: Mapping, product_id: str) -> Decimal | None:
    product = catalog.get(product_id)
    if product is None:
        return None

    if isinstance(product, Mapping):
        raw_price = product.get("offer_price")
    else:
        raw_price = getattr(product, "offer_price", None)

    try:
        price = Decimal(str(raw_price))
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return price


def _check_quantity(product_id, quantity) -> None:
    if not product_id:
        raise InvalidRequest({"product_id": ["Product id is required"]})
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidRequest({"quantity": [f"Quantity for {product_id} must be a whole number"]})
    if quantity < 0:
        raise InvalidRequest({"quantity": [f"Quantity for {product_id} cannot be negative"]})


@ordering.aggregate
class ShoppingCart:
    user_id = Identifier(identifier=True)
    cart_items = Dict()  # {product_id: quantity}
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            cart_items={},
            created_at=now,
            updated_at=now,
        )

    def _rebind(self, items):
        self.cart_items = items
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, product_id):
        """Add one unit of a product, creating the line at quantity 1 if absent."""
        if not product_id:
            raise InvalidRequest({"product_id": ["Product id is required"]})

        product_id = str(product_id)
        items = self.snapshot()
        items[product_id] = items.get(product_id, 0) + 1
        self._rebind(items)

        self.raise_(
            CartItemAdded(
                user_id=str(self.user_id),
                product_id=product_id,
                quantity=items[product_id],
            )
        )

    def set_quantity(self, product_id, quantity):
        """Set a line's quantity. Zero removes the line; negatives are rejected."""
        _check_quantity(product_id, quantity)

        product_id = str(product_id)
        items = self.snapshot()
        previous_quantity = items.get(product_id, 0)

        if quantity == 0:
            if product_id not in items:
                return
            del items[product_id]
            self._rebind(items)
            self.raise_(
                CartItemRemoved(
                    user_id=str(self.user_id),
                    product_id=product_id,
                    previous_quantity=previous_quantity,
                )
            )
            return

        items[product_id] = quantity
        self._rebind(items)
        self.raise_(
            CartQuantityUpdated(
                user_id=str(self.user_id),
                product_id=product_id,
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def replace(self, cart_items):
        """Overwrite the whole mapping, as sent back by the client.

        Zero quantities are dropped. The mapping is validated in full before
        anything changes.
        """
        if not isinstance(cart_items, Mapping):
            raise InvalidRequest({"cart_items": ["Cart items must be a mapping of product id to quantity"]})

        for product_id, quantity in cart_items.items():
            _check_quantity(product_id, quantity)

        items = {str(product_id): quantity for product_id, quantity in cart_items.items() if quantity > 0}
        self._rebind(items)

        self.raise_(
            CartSaved(
                user_id=str(self.user_id),
                item_count=sum(items.values()),
            )
        )

    def clear(self):
        """Empty the cart."""
        self._rebind({})
        self.raise_(CartCleared(user_id=str(self.user_id)))

    def sanitize(self) -> bool:
        """Drop unreadable entries from a hydrated mapping. Returns True if anything changed."""
        items = valid_items(self.cart_items)
        current = self.cart_items if self.cart_items is not None else {}
        if items == current:
            return False
        self._rebind(items)
        return True

    # -------------------------------------------------------------------
    # Derived reads
    # -------------------------------------------------------------------
    def snapshot(self) -> dict:
        """Independent copy of the current valid mapping."""
        return valid_items(self.cart_items)

    def lines(self) -> list[dict]:
        """Cart lines in insertion order, shaped for checkout submission."""
        return [{"product_id": product_id, "quantity": quantity} for product_id, quantity in self.snapshot().items()]

    def count(self) -> int:
        """Total number of units across all lines."""
        return sum(self.snapshot().values())

    def total_amount(self, catalog=None) -> float:
        """Cart value against a read-only catalog snapshot, floored to the cent.

        Lines whose product is not in the snapshot are left out of the sum.
        """
        catalog = _index_catalog(catalog)
        total = Decimal(0)
        for product_id, quantity in self.snapshot().items():
            offer_price = _offer_price(catalog, product_id)
            if offer_price is None:
                continue
            total += offer_price * quantity
        return float(total.quantize(CENT, rounding=ROUND_FLOOR))
