"""Pure product filtering used by the catalog browsing screen."""

from __future__ import annotations

from collections.abc import Iterable

from storefront.models.product import Product


def contains_ci(haystack: str, needle: str) -> bool:
    """Case-insensitive substring test."""

    return needle.casefold() in haystack.casefold()


def matches(product: Product, search_text: str, category: str | None) -> bool:
    if category is not None and product.category != category:
        return False
    if not search_text:
        return True
    return contains_ci(product.title, search_text) or contains_ci(
        product.description, search_text
    )


def filter_products(
    products: Iterable[Product],
    search_text: str,
    category: str | None,
) -> tuple[Product, ...]:
    """Return the products matching the criteria, keeping their original order.

    An empty ``search_text`` disables the text filter and ``category=None``
    means every category. This is a full linear scan on every call.
    """

    return tuple(p for p in products if matches(p, search_text, category))
