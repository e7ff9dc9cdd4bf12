"""Product catalog port (abstract interface).

The catalog is owned by another service; the ordering domain only reads
authoritative prices from it. Adapters implement this contract so the cart
totals and the order assembler never depend on how products are stored.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogProduct:
    """Read-only view of a catalog product, as far as ordering cares."""

    product_id: str
    offer_price: float
    name: str | None = None
    price: float | None = None
    category: str | None = None


class ProductCatalog(ABC):
    """Abstract product catalog reader."""

    @abstractmethod
    def find(self, product_id: str) -> CatalogProduct | None:
        """Return the product, or None when the id is unknown."""
        ...

    @abstractmethod
    def snapshot(self) -> Mapping[str, CatalogProduct]:
        """Return a read-only mapping of every listed product, keyed by id."""
        ...
