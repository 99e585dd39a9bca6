# src/services/query_engine.py

"""Filter/sort pipeline over a catalog snapshot."""

import logging
from collections.abc import Sequence

from src.filters.product_filter import ProductFilter
from src.filters.product_sorter import ProductSorter
from src.models.product import Product
from src.models.query_state import FilterOptions, QueryState
from src.storage.query_cache import QueryCache

logger = logging.getLogger("catalog_sync.query")


def apply_query(
    catalog: Sequence[Product],
    search_query: str,
    filters: FilterOptions,
    sort_by: str,
    sort_order: str,
) -> list[Product]:
    """Filter *catalog* and order the survivors.

    Pure and deterministic: the same arguments always give the same
    ordered list, and nothing raises on odd input (bad numbers count as
    0, a reversed price range matches nothing, an unknown sort key
    keeps the catalog order).
    """
    kept, _excluded = ProductFilter.filter_products(
        catalog, search_query, filters
    )
    return ProductSorter.sort(kept, sort_by, sort_order)


class QueryEngine:
    """Memoizing front for :func:`apply_query`."""

    def __init__(self, cache: QueryCache | None = None) -> None:
        self.cache = cache if cache is not None else QueryCache()

    def apply(
        self,
        catalog: Sequence[Product],
        params: QueryState,
    ) -> list[Product]:
        """Return results for *params*, recomputing only on a new input tuple.

        Only tuples are memoized by identity; any other sequence is copied
        first so a later in-place change cannot hit a stale entry.
        """
        if not isinstance(catalog, tuple):
            catalog = tuple(catalog)
        cached = self.cache.find(catalog, params)
        if cached is not None:
            return cached

        results = apply_query(
            catalog,
            params.search_query,
            params.filters,
            params.sort_by,
            params.sort_order,
        )
        logger.debug(
            "Query recomputed: %d of %d products (search=%r, sort=%s %s)",
            len(results),
            len(catalog),
            params.search_query,
            params.sort_by,
            params.sort_order,
        )
        self.cache.store(catalog, params, results)
        return results
