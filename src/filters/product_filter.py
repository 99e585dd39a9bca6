# src/filters/product_filter.py

"""Predicate filtering of the cached catalog."""

import logging
import math
from collections.abc import Sequence
from typing import Any

from src.filters.product_normalizer import coerce_number
from src.models.product import Product
from src.models.query_state import FilterOptions

logger = logging.getLogger("catalog_sync.query")


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _bound(value: Any, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, float) and math.isinf(value):
        return value
    return coerce_number(value)


def price_bounds(filters: FilterOptions) -> tuple[float, float]:
    """Return the inclusive price range as given.

    A reversed pair admits no price. An unreadable range means no price
    constraint at all.
    """
    try:
        low, high = filters.price_range
    except (TypeError, ValueError):
        return 0.0, float("inf")
    low = _bound(low, 0.0)
    high = _bound(high, float("inf"))
    return low, high


class ProductFilter:
    """Evaluate the search text and every active filter against products."""

    @staticmethod
    def matches_search(product: Product, search_query: str) -> bool:
        """Case-insensitive substring match on name, brand or description."""
        if not search_query:
            return True
        needle = search_query.lower()
        return any(
            needle in _text(getattr(product, attr, "")).lower()
            for attr in ("name", "brand", "description")
        )

    @staticmethod
    def matches_filters(product: Product, filters: FilterOptions) -> bool:
        """Return True if *product* satisfies every active predicate.

        A product without a brand is never excluded by the brand filter.
        """
        if filters.category and product.category != filters.category:
            return False

        low, high = price_bounds(filters)
        price = coerce_number(product.price)
        if not low <= price <= high:
            return False

        brand = _text(product.brand)
        if filters.brand and brand and brand not in filters.brand:
            return False

        threshold = coerce_number(filters.rating)
        if threshold > 0 and coerce_number(product.rating) < threshold:
            return False

        if filters.in_stock and not product.in_stock:
            return False

        return True

    @staticmethod
    def filter_products(
        products: Sequence[Product],
        search_query: str,
        filters: FilterOptions,
    ) -> tuple[list[Product], int]:
        """Keep products matching the search and all filters.

        Returns the kept products in input order and the excluded count.
        """
        query = search_query if isinstance(search_query, str) else ""
        kept = [
            p
            for p in products
            if ProductFilter.matches_search(p, query)
            and ProductFilter.matches_filters(p, filters)
        ]
        excluded = len(products) - len(kept)
        if excluded:
            logger.debug(
                "Filtered out %d of %d products", excluded, len(products)
            )
        return kept, excluded
