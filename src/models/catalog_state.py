# src/models/catalog_state.py

"""Observable state published by the sync manager."""

from dataclasses import dataclass
from enum import Enum

from src.models.product import Product


class SyncStatus(Enum):
    """Lifecycle of a :class:`~src.services.sync_manager.SyncManager`."""

    INITIALIZING = "initializing"
    SUBSCRIBED = "subscribed"
    RELOADING = "reloading"
    DEGRADED = "degraded"
    DISPOSED = "disposed"


@dataclass(frozen=True)
class CatalogState:
    """One atomically published view of the catalog.

    ``version`` increases by one on every publish so consumers can tell
    two snapshots apart without comparing the products.
    """

    catalog: tuple[Product, ...] = ()
    loading: bool = True
    error: str | None = None
    version: int = 0
