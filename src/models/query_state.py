# src/models/query_state.py

"""User-controlled search, filter and sort state."""

from dataclasses import dataclass, field
from typing import Literal

from src.config.settings import Settings

SortKey = Literal["name", "price", "rating"]
SortOrder = Literal["asc", "desc"]

SORT_KEYS: tuple[str, ...] = ("name", "price", "rating")
SORT_ORDERS: tuple[str, ...] = ("asc", "desc")


@dataclass(frozen=True)
class FilterOptions:
    """Active filter predicates. Defaults mean "no constraint"."""

    category: str = ""
    price_range: tuple[float, float] = Settings.DEFAULT_PRICE_RANGE
    brand: frozenset[str] = field(default_factory=frozenset)
    rating: float = 0.0
    in_stock: bool = False


@dataclass(frozen=True)
class QueryState:
    """Snapshot of every query input other than the catalog itself."""

    search_query: str = ""
    filters: FilterOptions = field(default_factory=FilterOptions)
    sort_by: SortKey = "name"
    sort_order: SortOrder = "asc"
