# src/filters/product_sorter.py

"""Stable single-key ordering of query results."""

import locale
import logging
from collections.abc import Callable
from typing import Any

from src.filters.product_normalizer import coerce_number
from src.models.product import Product

logger = logging.getLogger("catalog_sync.query")


def configure_collation() -> bool:
    """Adopt the user's collation locale for name sorting.

    Under the default C locale ``strxfrm`` orders by code point. Returns
    False when the environment names a locale that is not installed.
    """
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        logger.warning(
            "Locale collation unavailable, sorting by code point: %s", exc
        )
        return False
    logger.debug(
        "Name collation locale: %s", locale.setlocale(locale.LC_COLLATE)
    )
    return True


def _name_key(product: Product) -> tuple[str, str]:
    # Case-insensitive first; case only breaks ties.
    name = product.name if isinstance(product.name, str) else ""
    return locale.strxfrm(name.casefold()), locale.strxfrm(name)


_SORT_KEYS: dict[str, Callable[[Product], Any]] = {
    "name": _name_key,
    "price": lambda p: coerce_number(p.price),
    "rating": lambda p: coerce_number(p.rating),
}


class ProductSorter:
    """Order products by name, price or rating."""

    @staticmethod
    def sort(
        products: list[Product],
        sort_by: str,
        sort_order: str,
    ) -> list[Product]:
        """Return a new list sorted by *sort_by*.

        ``sorted`` is stable in both directions, so tied products keep
        their input order even when ``sort_order`` is ``"desc"``. An
        unknown key returns the input order unchanged.
        """
        key = _SORT_KEYS.get(sort_by)
        if key is None:
            return list(products)
        return sorted(products, key=key, reverse=sort_order == "desc")
