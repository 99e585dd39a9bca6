# src/services/catalog_mutator.py

"""Create, update and delete catalog documents in the remote store."""

import logging
from collections.abc import Mapping
from typing import Any

from src.config.settings import Settings
from src.filters.product_normalizer import ProductNormalizer
from src.models.errors import MutationFailed, describe
from src.storage.document_store import DocumentStore

logger = logging.getLogger("catalog_sync.mutator")


class CatalogMutator:
    """Thin write path to the store.

    Outgoing fields go through the same coercion as incoming documents,
    so whatever the next sync event returns is already valid. Results
    are never patched into the local catalog; the subscription is the
    source of truth.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str | None = None,
    ) -> None:
        self.store = store
        self.collection = collection or Settings.COLLECTION_NAME

    async def create(self, fields: Mapping[str, Any]) -> str:
        """Insert a new product and return its id.

        Raises:
            RecordRejected: the record would not pass the validity gate.
            MutationFailed: the store refused or could not be reached.
        """
        payload = ProductNormalizer.to_store_fields(fields)
        try:
            doc_id = await self.store.create(self.collection, payload)
        except Exception as exc:
            logger.error("Error creating product: %s", exc, exc_info=True)
            raise MutationFailed(
                "create",
                describe(
                    exc,
                    "Failed to create product. "
                    "Please check your permissions and try again.",
                ),
            ) from exc
        logger.info("Created product %s (%s)", doc_id, payload["name"])
        return doc_id

    async def update(
        self, doc_id: str, changes: Mapping[str, Any],
    ) -> None:
        """Apply a partial update; unknown fields are dropped."""
        payload = ProductNormalizer.coerce_changes(changes)
        if not payload:
            logger.debug("Update of %s has no known fields, skipped", doc_id)
            return
        try:
            await self.store.update(self.collection, doc_id, payload)
        except Exception as exc:
            logger.error(
                "Error updating product %s: %s", doc_id, exc, exc_info=True
            )
            raise MutationFailed(
                "update",
                describe(
                    exc,
                    "Failed to update product. "
                    "Please check your permissions and try again.",
                ),
                doc_id=doc_id,
            ) from exc
        logger.info("Updated product %s (%s)", doc_id, ", ".join(payload))

    async def delete(self, doc_id: str) -> None:
        """Delete a product by id."""
        try:
            await self.store.delete(self.collection, doc_id)
        except Exception as exc:
            logger.error(
                "Error deleting product %s: %s", doc_id, exc, exc_info=True
            )
            raise MutationFailed(
                "delete",
                describe(
                    exc,
                    "Failed to delete product. "
                    "Please check your permissions and try again.",
                ),
                doc_id=doc_id,
            ) from exc
        logger.info("Deleted product %s", doc_id)
