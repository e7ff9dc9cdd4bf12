"""Product catalog factory.

Provides get_catalog() / set_catalog() to swap implementations:
- InMemoryCatalog for development and testing
"""

import os

from ordering.catalog.fake_adapter import InMemoryCatalog
from ordering.catalog.port import CatalogProduct, ProductCatalog

__all__ = [
    "CatalogProduct",
    "InMemoryCatalog",
    "ProductCatalog",
    "get_catalog",
    "reset_catalog",
    "set_catalog",
]

_current_catalog: ProductCatalog | None = None


def get_catalog() -> ProductCatalog:
    """Return the configured catalog adapter. Defaults to InMemoryCatalog.

    The adapter is selected with the CATALOG_ADAPTER environment variable.
    """
    global _current_catalog
    if _current_catalog is None:
        adapter = os.environ.get("CATALOG_ADAPTER", "memory")
        if adapter == "memory":
            _current_catalog = InMemoryCatalog()
        else:
            raise ValueError(f"Unknown catalog adapter: {adapter}")
    return _current_catalog


def set_catalog(catalog: ProductCatalog) -> None:
    """Override the active catalog (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    """Reset to the default catalog."""
    global _current_catalog
    _current_catalog = None
