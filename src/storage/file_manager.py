# src/storage/file_manager.py

"""Seed-file loading and result export."""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.models.product import Product
from src.storage.document_store import Document

logger = logging.getLogger("catalog_sync.storage")

_CSV_COLUMNS = [
    "id", "name", "price", "category", "brand",
    "rating", "reviews", "inStock", "image",
]


def load_documents(path: Path) -> list[Document]:
    """Read raw ``(id, fields)`` documents from a JSON seed file.

    Accepts either an ``{id: fields}`` object or a list of objects that
    each carry an ``id``. List entries without one get a positional id.
    Field values are not coerced; the sync pipeline does that.
    """
    with open(path, encoding="utf-8") as f:
        data: Any = json.load(f)

    if isinstance(data, dict):
        docs = [(str(doc_id), fields) for doc_id, fields in data.items()]
    elif isinstance(data, list):
        docs = []
        for idx, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning("Skipping non-object seed entry #%d", idx)
                continue
            doc_id = str(item.get("id") or f"seed-{idx}")
            docs.append((doc_id, {k: v for k, v in item.items() if k != "id"}))
    else:
        raise ValueError(f"{path}: expected a JSON object or list")

    logger.info("Loaded %d seed documents from %s", len(docs), path)
    return docs


class FileManager:
    """Handles saving query results to disk."""

    def __init__(self) -> None:
        self.results_dir: Path = Settings.RESULTS_DIR
        self.results_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileManager initialised — results_dir=%s", self.results_dir)

    def _target(self, label: str, suffix: str) -> Path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        safe_label = label.replace(" ", "_") or "catalog"
        return self.results_dir / f"{safe_label}_{timestamp}.{suffix}"

    def save_results(self, label: str, products: list[Product]) -> Path:
        """Save products to a timestamped JSON file."""
        filepath = self._target(label, "json")
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(
                [p.to_dict() for p in products],
                f,
                ensure_ascii=False,
                indent=2,
            )
        logger.info("Saved %d products to %s", len(products), filepath)
        return filepath

    def export_csv(self, label: str, products: list[Product]) -> Path:
        """Export products to CSV, in the order given."""
        filepath = self._target(label, "csv")
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(_CSV_COLUMNS)
            for p in products:
                row = p.to_dict()
                writer.writerow([row[col] for col in _CSV_COLUMNS])
        logger.info("Exported %d products to %s", len(products), filepath)
        return filepath
