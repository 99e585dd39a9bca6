# src/services/health_checker.py

"""Document store connectivity health check."""

import logging
import time
from dataclasses import dataclass

from src.config.settings import Settings
from src.filters.product_normalizer import ProductNormalizer
from src.storage.document_store import DocumentStore

logger = logging.getLogger("catalog_sync.health")


@dataclass
class HealthResult:
    """Result of probing one collection."""

    collection: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str
    document_count: int = 0
    valid_count: int = 0


async def probe_store(
    store: DocumentStore,
    collection: str | None = None,
) -> HealthResult:
    """Time one full listing and report how much of it is usable."""
    name = collection or Settings.COLLECTION_NAME
    start = time.monotonic()
    try:
        documents = await store.list_all(name)
    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        result = HealthResult(
            collection=name,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )
    else:
        elapsed_ms = (time.monotonic() - start) * 1000
        products, rejected = ProductNormalizer.normalize_batch(documents)
        slow = elapsed_ms > Settings.HEALTH_SLOW_MS
        notes = [f"{rejected} invalid"] if rejected else []
        if slow:
            notes.insert(0, "High latency")
        result = HealthResult(
            collection=name,
            status="slow" if slow else "ok",
            latency_ms=elapsed_ms,
            message=", ".join(notes),
            document_count=len(documents),
            valid_count=len(products),
        )

    logger.info(
        "Health check %s: %s (%.0fms) %s",
        result.collection,
        result.status,
        result.latency_ms,
        result.message,
    )
    return result
