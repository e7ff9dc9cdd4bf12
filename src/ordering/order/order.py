"""Order aggregate (Event Sourced): an immutable record of a completed checkout.

State is established by the OrderPlaced event's @apply handler. Apart from
``status``, nothing on an order changes after placement.

State Machine:
    PLACED → PROCESSING → SHIPPED → DELIVERED
    PLACED → CANCELLED
Transitions past PLACED belong to fulfillment and are not performed here.
"""

import json
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import apply
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from ordering.domain import ordering
from ordering.order.events import OrderPlaced


class OrderStatus(Enum):
    PLACED = "Placed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


@ordering.entity(part_of="Order")
class OrderItem:
    """A product and the quantity ordered. Prices are not kept per line."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.aggregate(is_event_sourced=True)
class Order:
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    amount = Float(min_value=0.0)
    address_id = String(max_length=255)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PLACED.value,
    )
    idempotency_key = String(max_length=255)
    created_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, address_id, items_data, amount, idempotency_key=None):
        """Record a priced checkout.

        Args:
            user_id: The authenticated user placing the order.
            address_id: Opaque shipping address reference.
            items_data: List of dicts with product_id and quantity.
            amount: Total computed from catalog prices at this instant.
            idempotency_key: Client token identifying this submission, if any.
        """
        now = datetime.now(UTC)

        # Pre-generate item IDs for deterministic replay
        items_with_ids = [
            {"id": str(uuid4()), "product_id": str(item["product_id"]), "quantity": item["quantity"]}
            for item in items_data
        ]

        order = cls._create_new()
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                address_id=address_id,
                items=json.dumps(items_with_ids),
                amount=amount,
                idempotency_key=idempotency_key,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_order_placed(self, event: OrderPlaced):
        self.id = event.order_id
        self.user_id = event.user_id
        self.address_id = event.address_id
        self.amount = event.amount
        self.status = OrderStatus.PLACED.value
        self.idempotency_key = event.idempotency_key
        self.created_at = event.placed_at

        items_data = json.loads(event.items) if isinstance(event.items, str) else []
        self.items = [OrderItem(**item_data) for item_data in items_data]
