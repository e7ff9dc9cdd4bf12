"""In-memory product catalog for development and testing.

Holds products in a dict and records every call, so tests can assert how
many lookups an operation performed.
"""

from collections.abc import Mapping
from types import MappingProxyType

from ordering.catalog.port import CatalogProduct, ProductCatalog


class InMemoryCatalog(ProductCatalog):
    """Configurable in-memory product catalog."""

    def __init__(self, products=None) -> None:
        self._products: dict[str, CatalogProduct] = {}
        self.calls: list[dict] = []
        for product in products or []:
            self._products[product.product_id] = product

    def add_product(
        self,
        product_id: str,
        offer_price: float,
        name: str | None = None,
        price: float | None = None,
        category: str | None = None,
    ) -> CatalogProduct:
        """List (or re-price) a product."""
        product = CatalogProduct(
            product_id=str(product_id),
            offer_price=offer_price,
            name=name,
            price=price,
            category=category,
        )
        self._products[product.product_id] = product
        return product

    def remove_product(self, product_id: str) -> None:
        self._products.pop(str(product_id), None)

    def find(self, product_id: str) -> CatalogProduct | None:
        self.calls.append({"method": "find", "product_id": str(product_id)})
        return self._products.get(str(product_id))

    def snapshot(self) -> Mapping[str, CatalogProduct]:
        self.calls.append({"method": "snapshot"})
        return MappingProxyType(dict(self._products))

    def lookups(self) -> list[str]:
        """Product ids passed to find(), in call order."""
        return [call["product_id"] for call in self.calls if call["method"] == "find"]
