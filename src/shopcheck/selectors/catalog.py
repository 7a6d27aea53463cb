"""Selector catalogs loaded from declarative JSON resources.

Each catalog (homepage, authentication, product, cart) is a nested JSON tree
whose leaves describe one logical element::

    {"header": {"login_link": {"primary": ".ico-login",
                               "secondary": "a[href='/login']",
                               "xpath": "//a[@class='ico-login']",
                               "stability": "High"}}}

Leaves are addressed by dotted paths (``header.login_link``). Parsed catalogs
are cached by the SelectorCatalog object that loaded them.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any

from shopcheck.core.locators import Locator, parse_locator
from shopcheck.utils.exceptions import (
    CatalogFormatError,
    CatalogNotFound,
    SelectorNotFound,
)

logger = logging.getLogger(__name__)

CATALOG_FILES: dict[str, str] = {
    "homepage": "homepage-selectors.json",
    "authentication": "authentication-selectors.json",
    "product": "product-selectors.json",
    "cart": "cart-checkout-selectors.json",
}


class Stability(Enum):
    """Advisory stability rating of a selector definition."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    UNKNOWN = "Unknown"

    @classmethod
    def from_raw(cls, raw: str | None) -> Stability:
        """Parse a rating case-insensitively; anything unrecognised is UNKNOWN."""
        if not raw:
            return cls.UNKNOWN
        for member in cls:
            if member.value.lower() == str(raw).strip().lower():
                return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class SelectorDefinition:
    """Locator set for one logical UI element.

    Attributes:
        catalog: Name of the catalog the definition belongs to.
        path: Dotted path of the definition inside its catalog.
        primary: Locator tried first.
        secondary: Optional locator tried second.
        path_expression: Optional XPath locator tried last.
        stability: Advisory rating; never used to reorder locators.
    """

    catalog: str
    path: str
    primary: Locator
    secondary: Locator | None = None
    path_expression: Locator | None = None
    stability: Stability = Stability.UNKNOWN

    @classmethod
    def from_node(
        cls, catalog: str, path: str, node: Mapping[str, Any]
    ) -> SelectorDefinition:
        """Build a definition from a catalog leaf.

        Args:
            catalog: Catalog name.
            path: Dotted path of the leaf.
            node: The leaf mapping (``primary``, ``secondary``, ``xpath``,
                ``stability``).

        Raises:
            SelectorNotFound: If the node has no primary locator.
        """
        primary = node.get("primary")
        if not isinstance(primary, str):
            raise SelectorNotFound(catalog, path)

        secondary = node.get("secondary")
        xpath = node.get("xpath")
        return cls(
            catalog=catalog,
            path=path,
            primary=parse_locator(primary),
            secondary=parse_locator(secondary) if secondary else None,
            path_expression=Locator.by_xpath(xpath.strip()) if xpath else None,
            stability=Stability.from_raw(node.get("stability")),
        )

    @property
    def description(self) -> str:
        """Human description derived from the last path segment.

        ``login_page.form_elements.login_button`` becomes ``login button``.
        """
        return self.path.rsplit(".", 1)[-1].replace("_", " ")


def is_selector_leaf(node: Any) -> bool:
    """Check whether a catalog node is a selector definition."""
    return isinstance(node, Mapping) and "primary" in node


class CatalogHandle:
    """A parsed, cached catalog.

    Attributes:
        name: Catalog name.
        tree: The parsed JSON document.
    """

    def __init__(self, name: str, tree: Mapping[str, Any]) -> None:
        self.name = name
        self.tree = tree

    def resolve(self, dotted_path: str) -> SelectorDefinition:
        """Walk the tree to a single definition.

        Args:
            dotted_path: Path such as ``header.login_link``.

        Returns:
            The SelectorDefinition at that path.

        Raises:
            SelectorNotFound: If a segment is missing or the node is not a leaf.
        """
        node: Any = self.tree
        for part in dotted_path.split("."):
            if not isinstance(node, Mapping) or part not in node:
                raise SelectorNotFound(self.name, dotted_path)
            node = node[part]

        if not is_selector_leaf(node):
            raise SelectorNotFound(self.name, dotted_path)
        return SelectorDefinition.from_node(self.name, dotted_path, node)

    def definitions(self) -> Iterator[SelectorDefinition]:
        """Iterate over every leaf definition in document order."""
        yield from self._walk(self.tree, "")

    def _walk(
        self, node: Mapping[str, Any], prefix: str
    ) -> Iterator[SelectorDefinition]:
        for key, value in node.items():
            path = f"{prefix}.{key}" if prefix else key
            if is_selector_leaf(value):
                yield SelectorDefinition.from_node(self.name, path, value)
            elif isinstance(value, Mapping):
                yield from self._walk(value, path)

    def __len__(self) -> int:
        return sum(1 for _ in self.definitions())

    def __repr__(self) -> str:
        return f"CatalogHandle(name={self.name!r})"


def _package_loader(resource: str) -> str:
    """Read a selector resource shipped inside the package."""
    return (
        resources.files("shopcheck.selectors")
        .joinpath("data")
        .joinpath(resource)
        .read_text(encoding="utf-8")
    )


class SelectorCatalog:
    """Loads and caches named selector catalogs.

    The cache lives on the instance; create one per test process (the
    ``selector_catalog`` pytest fixture or the CLI does this). First loads of
    a given name are serialised by a per-name lock, so concurrent readers
    never parse the same resource twice.

    Example:
        >>> catalog = SelectorCatalog()
        >>> definition = catalog.resolve("homepage", "header.login_link")
        >>> sequence = catalog.fallback_sequence("homepage", "header.login_link")
        >>> [str(loc) for loc in sequence]
    """

    def __init__(
        self,
        resources_map: Mapping[str, str] | None = None,
        loader: Callable[[str], str] | None = None,
    ) -> None:
        """Initialize the catalog.

        Args:
            resources_map: Catalog name to resource name mapping. Defaults to
                the catalogs shipped with shopcheck.
            loader: Callable returning the raw JSON text of a resource.
                Defaults to reading package data. Raising FileNotFoundError
                marks the catalog as missing.
        """
        self._resources = dict(
            resources_map if resources_map is not None else CATALOG_FILES
        )
        self._loader = loader or _package_loader
        self._cache: dict[str, CatalogHandle] = {}
        self._guard = threading.Lock()
        self._key_locks: dict[str, threading.Lock] = {}

    @classmethod
    def from_directory(
        cls, directory: Path, resources_map: Mapping[str, str] | None = None
    ) -> SelectorCatalog:
        """Create a catalog that reads resources from a directory on disk."""

        def load(resource: str) -> str:
            return (directory / resource).read_text(encoding="utf-8")

        return cls(resources_map=resources_map, loader=load)

    def available_catalogs(self) -> list[str]:
        """Names of all catalogs this instance knows about."""
        return sorted(self._resources)

    def load_catalog(self, name: str) -> CatalogHandle:
        """Load a catalog, parsing it only on first access.

        Args:
            name: Catalog name (homepage, authentication, product, cart).

        Returns:
            The cached CatalogHandle.

        Raises:
            CatalogNotFound: If no resource exists for name.
            CatalogFormatError: If the resource is not a JSON object.
        """
        cached = self._cache.get(name)
        if cached is not None:
            return cached

        with self._guard:
            key_lock = self._key_locks.setdefault(name, threading.Lock())

        with key_lock:
            cached = self._cache.get(name)
            if cached is not None:
                return cached
            handle = self._read(name)
            self._cache[name] = handle
            return handle

    def _read(self, name: str) -> CatalogHandle:
        resource = self._resources.get(name)
        if resource is None:
            raise CatalogNotFound(name)

        try:
            text = self._loader(resource)
        except FileNotFoundError as e:
            logger.error(f"Selector resource {resource} for catalog {name} is missing")
            raise CatalogNotFound(name) from e

        try:
            tree = json.loads(text)
        except json.JSONDecodeError as e:
            raise CatalogFormatError(
                f"Could not parse selector file {resource}: {e}"
            ) from e
        if not isinstance(tree, dict):
            raise CatalogFormatError(
                f"Selector file {resource} must contain a JSON object"
            )

        logger.info(f"Loaded selectors from: {resource}")
        return CatalogHandle(name, tree)

    def resolve(self, catalog_name: str, dotted_path: str) -> SelectorDefinition:
        """Resolve a dotted path within a catalog.

        Raises:
            CatalogNotFound: If the catalog does not exist.
            SelectorNotFound: If the path does not exist in the catalog.
        """
        return self.load_catalog(catalog_name).resolve(dotted_path)

    def fallback_sequence(self, catalog_name: str, dotted_path: str) -> list[Locator]:
        """Locators for a path in the order they should be tried."""
        from shopcheck.selectors.fallback import get_fallback_sequence

        return get_fallback_sequence(self.resolve(catalog_name, dotted_path))

    def stability(self, catalog_name: str, dotted_path: str) -> Stability:
        """Stability rating of a definition (UNKNOWN when not rated)."""
        return self.resolve(catalog_name, dotted_path).stability

    def clear_cache(self) -> None:
        """Drop all cached catalogs."""
        with self._guard:
            self._cache.clear()
            self._key_locks.clear()
        logger.info("Selector cache cleared")

    def is_cached(self, name: str) -> bool:
        """Check whether a catalog has already been parsed."""
        return name in self._cache
