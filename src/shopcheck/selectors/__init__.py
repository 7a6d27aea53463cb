"""Selector catalogs and fallback resolution."""

from shopcheck.selectors.catalog import (
    CATALOG_FILES,
    CatalogHandle,
    SelectorCatalog,
    SelectorDefinition,
    Stability,
)
from shopcheck.selectors.fallback import get_fallback_sequence

__all__ = [
    "CATALOG_FILES",
    "CatalogHandle",
    "SelectorCatalog",
    "SelectorDefinition",
    "Stability",
    "get_fallback_sequence",
]
