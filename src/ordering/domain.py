"""Ordering bounded context: Shopping Cart and Order placement.

Handles the per-user shopping cart (CQRS) and the checkout flow that
re-prices a cart snapshot against the catalog and records an event-sourced
Order.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

ordering = Domain(name="ordering")
