# src/storage/document_store.py

"""Abstract remote document store consumed by the sync pipeline."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

Document = tuple[str, dict[str, Any]]
SnapshotCallback = Callable[[list[Document]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class DocumentStore(ABC):
    """Capability interface for a remote collection of documents.

    All network-bound calls are coroutines. Implementations raise
    :class:`~src.models.errors.StoreError` when a call fails.
    """

    @abstractmethod
    async def list_all(self, collection: str) -> list[Document]:
        """Return every ``(id, fields)`` pair currently in *collection*."""
        ...

    @abstractmethod
    def subscribe(
        self,
        collection: str,
        on_event: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        """Start delivering the full listing of *collection* on every change.

        Must be called from a running event loop; callbacks run on that
        loop. The returned function cancels the subscription, after
        which neither callback fires again.
        """
        ...

    @abstractmethod
    async def create(
        self, collection: str, fields: dict[str, Any],
    ) -> str:
        """Insert a document and return its store-assigned id."""
        ...

    @abstractmethod
    async def update(
        self, collection: str, doc_id: str, fields: dict[str, Any],
    ) -> None:
        """Merge *fields* into an existing document."""
        ...

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Remove a document."""
        ...

    def close(self) -> None:
        """Release transport resources. No-op by default."""
