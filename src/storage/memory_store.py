# src/storage/memory_store.py

"""Dict-backed document store with live change notifications."""

import asyncio
import copy
import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from src.models.errors import StoreError
from src.storage.document_store import (
    Document,
    DocumentStore,
    ErrorCallback,
    SnapshotCallback,
    Unsubscribe,
)

logger = logging.getLogger("catalog_sync.store")


@dataclass
class _Subscription:
    collection: str
    on_event: SnapshotCallback
    on_error: ErrorCallback
    active: bool = True


class InMemoryDocumentStore(DocumentStore):
    """In-process store used for seed files, demos and tests.

    Subscribers receive the current listing right after subscribing and
    again after every write to their collection, mirroring a real-time
    document database. Deliveries are scheduled on the running loop so
    they never re-enter the caller.
    """

    def __init__(
        self,
        documents: dict[str, Iterable[Document]] | None = None,
    ) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._subscriptions: list[_Subscription] = []
        self.list_error: Exception | None = None
        self.write_error: Exception | None = None
        for collection, docs in (documents or {}).items():
            self._collections[collection] = {
                doc_id: dict(fields) for doc_id, fields in docs
            }

    # ── Private helpers ──────────────────────────────────

    def _listing(self, collection: str) -> list[Document]:
        docs = self._collections.get(collection, {})
        return [
            (doc_id, copy.deepcopy(fields))
            for doc_id, fields in docs.items()
        ]

    def _deliver(self, sub: _Subscription) -> None:
        if sub.active:
            sub.on_event(self._listing(sub.collection))

    def _notify(self, collection: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        for sub in list(self._subscriptions):
            if sub.active and sub.collection == collection:
                loop.call_soon(self._deliver, sub)

    def _check_write(self, operation: str) -> None:
        if self.write_error is not None:
            raise StoreError(
                f"{operation} failed: {self.write_error}"
            ) from self.write_error

    # ── DocumentStore API ────────────────────────────────

    async def list_all(self, collection: str) -> list[Document]:
        if self.list_error is not None:
            raise StoreError(str(self.list_error)) from self.list_error
        return self._listing(collection)

    def subscribe(
        self,
        collection: str,
        on_event: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        loop = asyncio.get_running_loop()
        sub = _Subscription(collection, on_event, on_error)
        self._subscriptions.append(sub)
        loop.call_soon(self._deliver, sub)
        logger.debug("Subscribed to '%s'", collection)

        def unsubscribe() -> None:
            if not sub.active:
                return
            sub.active = False
            self._subscriptions.remove(sub)
            logger.debug("Unsubscribed from '%s'", collection)

        return unsubscribe

    async def create(
        self, collection: str, fields: dict[str, Any],
    ) -> str:
        self._check_write("create")
        doc_id = uuid.uuid4().hex[:20]
        self._collections.setdefault(collection, {})[doc_id] = dict(fields)
        self._notify(collection)
        return doc_id

    async def update(
        self, collection: str, doc_id: str, fields: dict[str, Any],
    ) -> None:
        self._check_write("update")
        docs = self._collections.get(collection, {})
        if doc_id not in docs:
            raise StoreError(f"No document to update: {doc_id}")
        docs[doc_id].update(fields)
        self._notify(collection)

    async def delete(self, collection: str, doc_id: str) -> None:
        self._check_write("delete")
        self._collections.get(collection, {}).pop(doc_id, None)
        self._notify(collection)

    # ── Test / demo hooks ────────────────────────────────

    def put(self, collection: str, doc_id: str, fields: Any) -> None:
        """Write a raw document as-is (no coercion) and notify subscribers."""
        self._collections.setdefault(collection, {})[doc_id] = fields
        self._notify(collection)

    def emit_error(self, error: Exception) -> None:
        """Report a stream failure to every active subscriber."""
        for sub in list(self._subscriptions):
            if sub.active:
                sub.on_error(error)

    @property
    def subscriber_count(self) -> int:
        """Number of live subscriptions."""
        return len(self._subscriptions)
