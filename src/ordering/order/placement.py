"""Order placement: command, handler, and the checkout entry point.

The handler is the order assembler: it validates the submission, prices it
against the catalog (never trusting client prices), and writes one Order.
Any failure raises before the write, so the unit of work leaves nothing
behind. A failed commit surfaces from ``checkout()`` as PersistenceFailure.
"""

import hashlib
import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.catalog import get_catalog
from ordering.dispatch import dispatch
from ordering.domain import ordering
from ordering.errors import InvalidRequest, PersistenceFailure, ProductNotFound, Unauthorized
from ordering.order.guard import checkout_guard
from ordering.order.order import Order
from ordering.order.pricing import parse_items, price_items
from ordering.utils.logging import bound_context, get_logger

logger = get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier()
    address_id = String(max_length=255)
    items = Text()  # JSON: list of {product_id, quantity}
    idempotency_key = String(max_length=255)


def _decode_items(raw_items):
    if not isinstance(raw_items, str):
        return raw_items
    try:
        return json.loads(raw_items)
    except json.JSONDecodeError:
        raise InvalidRequest({"items": ["Items must be a JSON list"]}) from None


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        if not command.user_id:
            raise Unauthorized({"user": ["Sign in to place an order"]})
        if not command.address_id or not command.address_id.strip():
            raise InvalidRequest({"address_id": ["A shipping address is required"]})

        items = parse_items(_decode_items(command.items))

        pricing = price_items(items, get_catalog())
        if not pricing.success:
            logger.warning("order_product_not_found", product_id=pricing.missing_product_id)
            raise ProductNotFound(pricing.missing_product_id)

        order = Order.place(
            user_id=command.user_id,
            address_id=command.address_id,
            items_data=items,
            amount=float(pricing.amount),
            idempotency_key=command.idempotency_key,
        )

        try:
            current_domain.repository_for(Order).add(order)
        except Exception as exc:
            logger.error("order_persistence_failed", error=str(exc))
            raise PersistenceFailure({"order": [f"Could not record the order: {exc}"]}) from exc

        logger.info("order_placed", order_id=str(order.id), amount=order.amount, item_count=len(items))
        return str(order.id)


def _fingerprint(address_id, items) -> str:
    payload = json.dumps({"address_id": address_id, "items": items}, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def checkout(user_id, address_id, items, idempotency_key=None) -> Order:
    """Turn a cart snapshot and an address reference into a persisted Order.

    Submissions from the same user are serialized. A repeated submission with
    an idempotency key that already produced an order returns that order; the
    same key with a different address or items is rejected. Clearing the
    user's cart afterwards is the caller's job.
    """
    if not user_id:
        raise Unauthorized({"user": ["Sign in to place an order"]})

    fingerprint = _fingerprint(address_id, items)
    with bound_context(user_id=str(user_id), idempotency_key=idempotency_key):
        with checkout_guard.hold(user_id):
            order_id = checkout_guard.recall(user_id, idempotency_key, fingerprint)
            if order_id is not None:
                logger.info("checkout_replayed", order_id=order_id)
            else:
                command = PlaceOrder(
                    user_id=str(user_id),
                    address_id=address_id,
                    items=json.dumps(items, default=str),
                    idempotency_key=idempotency_key,
                )
                order_id = dispatch(command)
                checkout_guard.remember(user_id, idempotency_key, order_id, fingerprint)

        return current_domain.repository_for(Order).get(order_id)
