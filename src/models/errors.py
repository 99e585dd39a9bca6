# src/models/errors.py

"""Error taxonomy for the catalog sync pipeline.

Per-record problems (:class:`RecordRejected`) are absorbed by the
normalizer. Pipeline problems (:class:`FetchFailed`,
:class:`SubscriptionFailed`) end up as the human-readable ``error`` of
the published :class:`~src.models.catalog_state.CatalogState`.
:class:`MutationFailed` is raised to whoever called the write.
"""


class CatalogError(Exception):
    """Base class for every catalog_sync error."""


class StoreError(CatalogError):
    """A document store call failed (transport, permission, missing doc)."""


class RecordRejected(CatalogError):
    """A single raw document could not become a valid Product."""

    def __init__(
        self,
        doc_id: str,
        reason: str,
        malformed: bool = False,
    ) -> None:
        super().__init__(f"Product {doc_id!r} rejected: {reason}")
        self.doc_id = doc_id
        self.reason = reason
        # False for data-quality drops, True for unparseable documents
        self.malformed = malformed


class FetchFailed(CatalogError):
    """The one-shot full listing of the collection failed."""

    default_message = (
        "Failed to fetch products. "
        "Please check your connection and try again."
    )


class SubscriptionFailed(CatalogError):
    """The live change stream reported an error."""

    default_message = "Failed to sync products"


class MutationFailed(CatalogError):
    """A create, update or delete call against the store failed."""

    def __init__(
        self,
        operation: str,
        message: str,
        doc_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.doc_id = doc_id


def describe(exc: BaseException, fallback: str) -> str:
    """Return a user-facing message for *exc*, or *fallback* if it is blank."""
    message = str(exc).strip()
    return message or fallback
