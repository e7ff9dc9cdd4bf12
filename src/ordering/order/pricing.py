"""Server-side pricing of a checkout submission.

Client-supplied prices are never read. Every item is resolved against the
catalog in submission order; the first product the catalog cannot resolve
stops the pass, so a failed checkout performs no lookups after the offending
item and nothing is summed. Amounts are accumulated in Decimal and quantized
to cents.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from ordering.catalog.port import ProductCatalog
from ordering.errors import InvalidRequest

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    quantity: int
    offer_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.offer_price * self.quantity


@dataclass(frozen=True)
class PricingResult:
    """Outcome of pricing a submission: either an amount or the first unknown product."""

    success: bool
    amount: Decimal | None = None
    lines: tuple[PricedLine, ...] = field(default_factory=tuple)
    missing_product_id: str | None = None


def parse_items(raw_items) -> list[dict]:
    """Validate submitted items and merge repeated product ids.

    Returns ``[{"product_id", "quantity"}]`` in first-seen order.
    """
    if not isinstance(raw_items, list | tuple) or not raw_items:
        raise InvalidRequest({"items": ["At least one item is required"]})

    merged: dict[str, int] = {}
    for position, item in enumerate(raw_items):
        if not isinstance(item, Mapping):
            raise InvalidRequest({"items": [f"Item {position} must be an object with product_id and quantity"]})

        product_id = item.get("product_id")
        quantity = item.get("quantity")
        if product_id is None or str(product_id).strip() == "":
            raise InvalidRequest({"items": [f"Item {position} is missing a product id"]})
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidRequest({"items": [f"Item {position} must have a positive whole-number quantity"]})

        product_id = str(product_id)
        merged[product_id] = merged.get(product_id, 0) + quantity

    return [{"product_id": product_id, "quantity": quantity} for product_id, quantity in merged.items()]


def price_items(items: list[dict], catalog: ProductCatalog) -> PricingResult:
    """Resolve every item against the catalog, then sum.

    The catalog is queried fresh for each item; nothing is cached between
    checkouts.
    """
    lines = []
    for item in items:
        product = catalog.find(item["product_id"])
        if product is None:
            return PricingResult(success=False, missing_product_id=item["product_id"])
        lines.append(
            PricedLine(
                product_id=item["product_id"],
                quantity=item["quantity"],
                offer_price=Decimal(str(product.offer_price)),
            )
        )

    amount = sum((line.line_total for line in lines), Decimal(0))
    return PricingResult(
        success=True,
        amount=amount.quantize(CENT, rounding=ROUND_HALF_UP),
        lines=tuple(lines),
    )
