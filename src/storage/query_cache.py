# src/storage/query_cache.py

"""Bounded in-memory memo of query results keyed by the full input tuple."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from src.config.settings import Settings
from src.models.product import Product
from src.models.query_state import QueryState

logger = logging.getLogger("catalog_sync.cache")


@dataclass
class CacheEntry:
    """Results computed for one catalog snapshot and one query state."""

    catalog: tuple[Product, ...]
    params: QueryState
    results: tuple[Product, ...]


class QueryCache:
    """Memo of recent query results.

    A hit requires the *same* catalog object (snapshots are replaced
    wholesale, never patched, so identity is a sound change marker) and
    an equal :class:`QueryState`. Entries hold a reference to their
    catalog, so an identity can never be recycled while cached.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        self._entries: list[CacheEntry] = []
        self._max_entries: int = max(
            1, max_entries or Settings.QUERY_CACHE_SIZE
        )
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def find(
        self,
        catalog: tuple[Product, ...],
        params: QueryState,
    ) -> list[Product] | None:
        """Return a copy of the cached results, or ``None`` on a miss."""
        for entry in self._entries:
            if entry.catalog is catalog and entry.params == params:
                self.hits += 1
                return list(entry.results)
        self.misses += 1
        return None

    def store(
        self,
        catalog: tuple[Product, ...],
        params: QueryState,
        results: Sequence[Product],
    ) -> None:
        """Remember *results*, evicting the oldest entry when full."""
        self._entries.append(
            CacheEntry(
                catalog=catalog,
                params=params,
                results=tuple(results),
            )
        )
        overflow = len(self._entries) - self._max_entries
        if overflow > 0:
            del self._entries[:overflow]
            logger.debug("Evicted %d memoized result sets", overflow)

    def clear(self) -> int:
        """Purge all entries and return how many were removed."""
        count = len(self._entries)
        self._entries.clear()
        logger.debug("Query cache cleared (%d entries removed)", count)
        return count
