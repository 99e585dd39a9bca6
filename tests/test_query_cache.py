# tests/test_query_cache.py

"""Tests for the memoized query result cache."""

import unittest

from src.models.product import Product
from src.models.query_state import FilterOptions, QueryState
from src.storage.query_cache import QueryCache


def _p(name: str) -> Product:
    """Create a minimal Product for testing."""
    return Product(id=name, name=name, price=10.0, image="i.jpg")


class TestQueryCache(unittest.TestCase):
    """QueryCache unit tests."""

    def setUp(self) -> None:
        self.cache = QueryCache(max_entries=3)
        self.catalog = (_p("A"), _p("B"))

    # ── Store & retrieve ─────────────────────────────────

    def test_exact_match_hit(self) -> None:
        """Same catalog object and equal params → hit."""
        self.cache.store(self.catalog, QueryState(), [self.catalog[0]])
        result = self.cache.find(self.catalog, QueryState())
        self.assertEqual(result, [self.catalog[0]])
        self.assertEqual(self.cache.hits, 1)

    def test_different_params_miss(self) -> None:
        self.cache.store(self.catalog, QueryState(), list(self.catalog))
        result = self.cache.find(self.catalog, QueryState(sort_order="desc"))
        self.assertIsNone(result)
        self.assertEqual(self.cache.misses, 1)

    def test_equal_but_distinct_catalog_miss(self) -> None:
        """Catalog identity, not equality, keys the cache."""
        self.cache.store(self.catalog, QueryState(), list(self.catalog))
        copy = tuple(list(self.catalog))
        self.assertIsNone(self.cache.find(copy, QueryState()))

    def test_filter_value_equality_hits(self) -> None:
        params = QueryState(filters=FilterOptions(brand=frozenset({"x"})))
        self.cache.store(self.catalog, params, [])
        again = QueryState(filters=FilterOptions(brand=frozenset({"x"})))
        self.assertEqual(self.cache.find(self.catalog, again), [])

    def test_empty_cache_miss(self) -> None:
        self.assertIsNone(self.cache.find(self.catalog, QueryState()))

    # ── Eviction ─────────────────────────────────────────

    def test_oldest_entry_evicted_when_full(self) -> None:
        for term in ("a", "b", "c", "d"):
            self.cache.store(
                self.catalog, QueryState(search_query=term), []
            )
        self.assertEqual(len(self.cache), 3)
        self.assertIsNone(
            self.cache.find(self.catalog, QueryState(search_query="a"))
        )
        self.assertIsNotNone(
            self.cache.find(self.catalog, QueryState(search_query="d"))
        )

    # ── Result isolation ─────────────────────────────────

    def test_returns_copy_not_reference(self) -> None:
        """Mutating a returned list does not corrupt the cache."""
        self.cache.store(self.catalog, QueryState(), list(self.catalog))
        result = self.cache.find(self.catalog, QueryState())
        assert result is not None
        result.append(_p("Extra"))
        second = self.cache.find(self.catalog, QueryState())
        assert second is not None
        self.assertEqual(len(second), 2)

    # ── clear() ──────────────────────────────────────────

    def test_clear_returns_purged_count(self) -> None:
        self.cache.store(self.catalog, QueryState(), [])
        self.cache.store(self.catalog, QueryState(search_query="x"), [])
        self.assertEqual(self.cache.clear(), 2)
        self.assertIsNone(self.cache.find(self.catalog, QueryState()))

    def test_clear_on_empty_cache_returns_zero(self) -> None:
        self.assertEqual(self.cache.clear(), 0)


if __name__ == "__main__":
    unittest.main()
