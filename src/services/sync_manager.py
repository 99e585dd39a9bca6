# src/services/sync_manager.py

"""Keep a published catalog snapshot in sync with the remote store."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from src.config.settings import Settings
from src.filters.product_normalizer import ProductNormalizer
from src.models.catalog_state import CatalogState, SyncStatus
from src.models.errors import (
    CatalogError,
    FetchFailed,
    SubscriptionFailed,
    describe,
)
from src.models.product import Product
from src.storage.document_store import Document, DocumentStore, Unsubscribe

logger = logging.getLogger("catalog_sync.sync")

StateListener = Callable[[CatalogState], None]


class SyncManager:
    """Owns the live subscription and the published :class:`CatalogState`.

    Lifecycle::

        INITIALIZING ──event──▶ SUBSCRIBED ──stream error──▶ RELOADING
              │                     ▲                           │
              └──fetch failed──▶ DEGRADED ◀───fetch failed──────┘
                                    │
        any state ──dispose()──▶ DISPOSED

    Every change event carries the full collection, so each publish
    replaces the whole snapshot with one assignment. Publishes land in
    completion order: an older fetch may briefly overwrite a newer
    event until the next event arrives. Nothing is published after
    :meth:`dispose`, even by a fetch that was already in flight.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str | None = None,
    ) -> None:
        self.store = store
        self.collection = collection or Settings.COLLECTION_NAME
        self._status = SyncStatus.INITIALIZING
        self._state = CatalogState()
        self._last_error: CatalogError | None = None
        self._started = False
        self._unsubscribe: Unsubscribe | None = None
        self._fetch_task: asyncio.Task[None] | None = None
        self._listeners: list[StateListener] = []
        self._ready = asyncio.Event()

    # ── Observable state ─────────────────────────────────

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def catalog(self) -> tuple[Product, ...]:
        return self._state.catalog

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def last_error(self) -> CatalogError | None:
        """Typed form of :attr:`error` (FetchFailed or SubscriptionFailed)."""
        return self._last_error

    @property
    def is_disposed(self) -> bool:
        return self._status is SyncStatus.DISPOSED

    @property
    def has_subscription(self) -> bool:
        return self._unsubscribe is not None

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* with every published state; returns a remover."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # ── Lifecycle ────────────────────────────────────────

    def start(self) -> None:
        """Kick off the initial fetch and open the live subscription.

        Must be called from a running event loop.
        """
        if self.is_disposed:
            raise RuntimeError("SyncManager has been disposed")
        if self._started:
            raise RuntimeError("SyncManager already started")
        self._started = True
        logger.info("Starting catalog sync for '%s'", self.collection)
        self._schedule_fetch("initial load")
        self._open_subscription()

    def retry(self) -> None:
        """External retry trigger for a degraded manager.

        Re-opens the subscription if none is held and schedules a full
        fetch unless one is already running.
        """
        if self.is_disposed or not self._started:
            logger.debug("Ignoring retry on an inactive SyncManager")
            return
        logger.info("Retrying catalog sync for '%s'", self.collection)
        if self._unsubscribe is None:
            self._open_subscription()
        self._schedule_fetch("retry")

    def dispose(self) -> None:
        """Stop syncing. Idempotent; never publishes afterwards."""
        if self.is_disposed:
            return
        self._status = SyncStatus.DISPOSED
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        self._listeners.clear()
        try:
            if unsubscribe is not None:
                unsubscribe()
        except Exception:
            logger.error("Error releasing products listener", exc_info=True)
        finally:
            self._ready.set()
        logger.info("Catalog sync for '%s' disposed", self.collection)

    async def aclose(self) -> None:
        """Dispose and wait for any in-flight fetch to settle."""
        self.dispose()
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait until no fetch is in flight."""
        task = self._fetch_task
        if task is not None and not task.done():
            await asyncio.gather(task, return_exceptions=True)

    async def wait_until_ready(
        self, timeout: float | None = None,
    ) -> CatalogState:
        """Wait for the first completed publish and return the state.

        Raises ``asyncio.TimeoutError`` if nothing is published within
        *timeout*.
        """
        await asyncio.wait_for(self._ready.wait(), timeout)
        return self._state

    async def __aenter__(self) -> "SyncManager":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ── Fetching ─────────────────────────────────────────

    async def fetch_catalog(self) -> list[Product]:
        """List and normalize the whole collection once.

        Raises:
            FetchFailed: the listing call (or its payload) was unusable.
        """
        try:
            documents = await self.store.list_all(self.collection)
            products, _rejected = ProductNormalizer.normalize_batch(
                documents
            )
        except Exception as exc:
            raise FetchFailed(
                describe(exc, FetchFailed.default_message)
            ) from exc
        return products

    def _schedule_fetch(self, reason: str) -> None:
        if self.is_disposed:
            return
        if self._fetch_task is not None and not self._fetch_task.done():
            logger.debug("Fetch already in flight, not starting %s", reason)
            return
        self._fetch_task = asyncio.get_running_loop().create_task(
            self._run_fetch(reason)
        )

    async def _run_fetch(self, reason: str) -> None:
        logger.info("Fetching full catalog (%s)", reason)
        try:
            products = await self.fetch_catalog()
        except FetchFailed as exc:
            if self.is_disposed:
                logger.debug("Fetch failed after dispose: %s", exc)
                return
            logger.error("Error loading products: %s", exc, exc_info=True)
            self._last_error = exc
            self._status = SyncStatus.DEGRADED
            self._publish((), str(exc))
            return

        if self.is_disposed:
            logger.debug("Discarding fetch result after dispose")
            return
        self._last_error = None
        self._status = SyncStatus.SUBSCRIBED
        self._publish(tuple(products), None)

    # ── Subscription ─────────────────────────────────────

    def _open_subscription(self) -> None:
        try:
            unsubscribe = self.store.subscribe(
                self.collection,
                self._on_snapshot,
                self._on_subscription_error,
            )
        except Exception:
            logger.error("Error setting up products listener", exc_info=True)
            self._schedule_fetch("listener setup failed")
            return
        if self.is_disposed:
            unsubscribe()
            return
        self._unsubscribe = unsubscribe

    def _on_snapshot(self, documents: list[Document]) -> None:
        if self.is_disposed:
            return
        try:
            products, _rejected = ProductNormalizer.normalize_batch(
                documents
            )
        except Exception as exc:
            self._on_subscription_error(exc)
            return
        self._last_error = None
        self._status = SyncStatus.SUBSCRIBED
        self._publish(tuple(products), None)

    def _on_subscription_error(self, error: Exception) -> None:
        if self.is_disposed:
            return
        failure = SubscriptionFailed(
            describe(error, SubscriptionFailed.default_message)
        )
        logger.error("Error in products snapshot: %s", failure, exc_info=error)
        self._last_error = failure
        self._status = SyncStatus.RELOADING
        self._publish(
            self._state.catalog, str(failure), loading=self._state.loading
        )
        self._schedule_fetch("subscription error")

    # ── Publishing ───────────────────────────────────────

    def _publish(
        self,
        catalog: tuple[Product, ...],
        error: str | None,
        loading: bool = False,
    ) -> None:
        if self.is_disposed:
            return
        self._state = CatalogState(
            catalog=catalog,
            loading=loading,
            error=error,
            version=self._state.version + 1,
        )
        logger.debug(
            "Published catalog v%d: %d products, error=%r",
            self._state.version,
            len(catalog),
            error,
        )
        if not loading:
            self._ready.set()
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.error("Catalog listener raised", exc_info=True)
