# src/services/product_catalog.py

"""Consumer-facing catalog view: live snapshot plus query state."""

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from src.models.catalog_state import CatalogState, SyncStatus
from src.models.product import Product
from src.models.query_state import (
    SORT_KEYS,
    SORT_ORDERS,
    FilterOptions,
    QueryState,
)
from src.services.catalog_mutator import CatalogMutator
from src.services.query_engine import QueryEngine
from src.services.sync_manager import SyncManager
from src.storage.document_store import DocumentStore

logger = logging.getLogger("catalog_sync.catalog")


class ProductCatalog:
    """Live, queryable product catalog.

    Reading :attr:`products` runs the query engine over the current
    snapshot; the result is memoized until either the snapshot or the
    query state changes. Query state only changes through the setters
    below, never through synchronization.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str | None = None,
    ) -> None:
        self.sync = SyncManager(store, collection)
        self.mutator = CatalogMutator(store, self.sync.collection)
        self.engine = QueryEngine()
        self._query = QueryState()

    # ── Lifecycle ────────────────────────────────────────

    def start(self) -> None:
        self.sync.start()

    async def close(self) -> None:
        await self.sync.aclose()

    async def __aenter__(self) -> "ProductCatalog":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def wait_until_ready(
        self, timeout: float | None = None,
    ) -> CatalogState:
        return await self.sync.wait_until_ready(timeout)

    # ── Observable state ─────────────────────────────────

    @property
    def products(self) -> list[Product]:
        """Filtered and sorted view of the current snapshot."""
        return self.engine.apply(self.sync.catalog, self._query)

    @property
    def all_products(self) -> tuple[Product, ...]:
        return self.sync.catalog

    @property
    def loading(self) -> bool:
        return self.sync.loading

    @property
    def error(self) -> str | None:
        return self.sync.error

    @property
    def status(self) -> SyncStatus:
        return self.sync.status

    @property
    def query(self) -> QueryState:
        return self._query

    @property
    def search_query(self) -> str:
        return self._query.search_query

    @property
    def filters(self) -> FilterOptions:
        return self._query.filters

    @property
    def sort_by(self) -> str:
        return self._query.sort_by

    @property
    def sort_order(self) -> str:
        return self._query.sort_order

    def categories(self) -> list[str]:
        """Distinct non-empty categories in the snapshot, sorted."""
        return sorted({p.category for p in self.sync.catalog if p.category})

    def brands(self) -> list[str]:
        """Distinct non-empty brands in the snapshot, sorted."""
        return sorted({p.brand for p in self.sync.catalog if p.brand})

    # ── Setters ──────────────────────────────────────────

    def set_search_query(self, search_query: str) -> None:
        self._query = dataclasses.replace(
            self._query, search_query=search_query or ""
        )

    def set_filters(self, filters: FilterOptions) -> None:
        self._query = dataclasses.replace(self._query, filters=filters)

    def update_filters(
        self,
        *,
        category: str | None = None,
        price_range: tuple[float, float] | None = None,
        brand: Iterable[str] | None = None,
        rating: float | None = None,
        in_stock: bool | None = None,
    ) -> None:
        """Change only the given filter fields."""
        changes: dict[str, Any] = {}
        if category is not None:
            changes["category"] = category
        if price_range is not None:
            low, high = price_range
            changes["price_range"] = (float(low), float(high))
        if brand is not None:
            changes["brand"] = frozenset(brand)
        if rating is not None:
            changes["rating"] = float(rating)
        if in_stock is not None:
            changes["in_stock"] = bool(in_stock)
        self.set_filters(dataclasses.replace(self._query.filters, **changes))

    def reset_filters(self) -> None:
        self.set_filters(FilterOptions())

    def set_sort_by(self, sort_by: str) -> None:
        if sort_by not in SORT_KEYS:
            raise ValueError(
                f"sort_by must be one of {', '.join(SORT_KEYS)}, "
                f"got {sort_by!r}"
            )
        self._query = dataclasses.replace(self._query, sort_by=sort_by)

    def set_sort_order(self, sort_order: str) -> None:
        if sort_order not in SORT_ORDERS:
            raise ValueError(
                f"sort_order must be 'asc' or 'desc', got {sort_order!r}"
            )
        self._query = dataclasses.replace(self._query, sort_order=sort_order)

    # ── Mutations (observed via the next sync event) ─────

    async def create_product(self, fields: Mapping[str, Any]) -> str:
        return await self.mutator.create(fields)

    async def update_product(
        self, doc_id: str, changes: Mapping[str, Any],
    ) -> None:
        await self.mutator.update(doc_id, changes)

    async def delete_product(self, doc_id: str) -> None:
        await self.mutator.delete(doc_id)
