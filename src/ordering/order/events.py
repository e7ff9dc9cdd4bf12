"""Domain events for the Order aggregate.

Orders are event sourced. OrderPlaced is the only fact this context records;
it carries the amount computed at checkout so the total can be rebuilt by
replaying history rather than re-reading the catalog.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A checkout was priced against the catalog and recorded as an order."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    address_id = String(required=True, max_length=255)
    items = Text(required=True)  # JSON: list of {id, product_id, quantity}
    amount = Float(required=True)
    idempotency_key = String(max_length=255)
    placed_at = DateTime(required=True)
