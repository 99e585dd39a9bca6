# src/filters/product_normalizer.py

"""Turn loosely-typed store documents into validated Product records."""

import logging
import math
import numbers
from collections.abc import Iterable, Mapping
from typing import Any

from src.config.settings import Settings
from src.filters.product_validator import ProductValidator
from src.models.errors import RecordRejected
from src.models.product import Product

logger = logging.getLogger("catalog_sync.normalizer")

# Python-side spellings accepted for camelCase store fields
_FIELD_ALIASES: dict[str, str] = {
    "in_stock": "inStock",
    "original_price": "originalPrice",
}

_TEXT_FIELDS = ("name", "image", "category", "description", "brand")
_NUMBER_FIELDS = ("price", "rating")
_LIST_FIELDS = ("images", "features")


def coerce_number(value: Any) -> float:
    """Coerce numeric-like input to a finite float.

    Booleans count as 0/1, numeric strings are parsed after stripping
    whitespace. Anything else, including NaN and infinities, becomes 0.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    elif isinstance(value, numbers.Real):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def coerce_count(value: Any) -> int:
    """Coerce to a non-negative integer (review counts)."""
    return max(0, int(coerce_number(value)))


def _is_truthy(value: Any) -> bool:
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def _coerce_text(value: Any, default: str = "") -> str:
    if not _is_truthy(value):
        return default
    return value if isinstance(value, str) else str(value)


def _coerce_name(value: Any) -> str:
    # An explicit empty string is kept so the validity gate drops it.
    if isinstance(value, str):
        return value
    return _coerce_text(value, Settings.UNNAMED_PRODUCT)


def _coerce_strings(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(
        item if isinstance(item, str) else str(item)
        for item in value
        if item is not None
    )


def _coerce_optional_price(value: Any) -> float | None:
    # 0 is indistinguishable from "absent" here; kept as observed.
    if not _is_truthy(value):
        return None
    return coerce_number(value)


def _coerce_discount(value: Any) -> dict[str, Any] | None:
    if isinstance(value, Mapping):
        return dict(value)
    return None


def _canonical_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {_FIELD_ALIASES.get(key, key): value for key, value in raw.items()}


class ProductNormalizer:
    """Coerce raw documents into the strict :class:`Product` schema."""

    @staticmethod
    def parse(raw: Any, doc_id: str) -> Product:
        """Build a valid Product or raise :class:`RecordRejected`.

        Missing or mistyped fields fall back to their defaults; the
        record is only rejected when it is not a mapping, when field
        extraction blows up, or when the result fails the validity gate.
        """
        if not isinstance(raw, Mapping):
            raise RecordRejected(
                doc_id,
                f"expected a mapping, got {type(raw).__name__}",
                malformed=True,
            )
        try:
            data = _canonical_keys(raw)
            product = Product(
                id=str(doc_id),
                name=_coerce_name(data.get("name")),
                price=coerce_number(data.get("price")),
                image=_coerce_text(data.get("image")),
                images=_coerce_strings(data.get("images")),
                category=_coerce_text(data.get("category")),
                description=_coerce_text(data.get("description")),
                brand=_coerce_text(data.get("brand")),
                rating=coerce_number(data.get("rating")),
                reviews=coerce_count(data.get("reviews")),
                in_stock=data.get("inStock") is not False,
                features=_coerce_strings(data.get("features")),
                original_price=_coerce_optional_price(
                    data.get("originalPrice")
                ),
                discount=_coerce_discount(data.get("discount")),
            )
        except Exception as exc:
            raise RecordRejected(
                doc_id, f"malformed field data: {exc}", malformed=True
            ) from exc

        reason = ProductValidator.check(product)
        if reason is not None:
            raise RecordRejected(doc_id, reason)
        return product

    @staticmethod
    def normalize(raw: Any, doc_id: str) -> Product | None:
        """Return a valid Product, or ``None`` after logging the rejection."""
        try:
            return ProductNormalizer.parse(raw, doc_id)
        except RecordRejected as exc:
            if exc.malformed:
                logger.error(
                    "Error parsing product %s: %s",
                    doc_id,
                    exc.reason,
                    exc_info=exc.__cause__ is not None,
                )
            else:
                logger.debug(
                    "Dropped invalid product %s (%s)", doc_id, exc.reason
                )
            return None

    @staticmethod
    def normalize_batch(
        documents: Iterable[tuple[str, Any]],
    ) -> tuple[list[Product], int]:
        """Normalize a full collection listing.

        Returns the valid products in listing order and the number of
        documents that were rejected.
        """
        products: list[Product] = []
        rejected = 0
        for doc_id, raw in documents:
            product = ProductNormalizer.normalize(raw, doc_id)
            if product is None:
                rejected += 1
            else:
                products.append(product)

        if rejected:
            logger.info(
                "Normalization dropped %d of %d documents",
                rejected,
                rejected + len(products),
            )
        return products, rejected

    @staticmethod
    def to_store_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
        """Coerce a complete outgoing record to store field names.

        Raises :class:`RecordRejected` when the record would be dropped
        by the next sync anyway.
        """
        fields = {k: v for k, v in fields.items() if k != "id"}
        return ProductNormalizer.parse(fields, "<new>").to_fields()

    @staticmethod
    def coerce_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
        """Coerce a partial update, keeping only recognised fields.

        A falsy ``originalPrice`` becomes ``None`` so the store clears it.
        """
        data = _canonical_keys(changes)
        coerced: dict[str, Any] = {}
        for key, value in data.items():
            if key in _TEXT_FIELDS:
                coerced[key] = "" if value is None else str(value)
            elif key in _NUMBER_FIELDS:
                coerced[key] = coerce_number(value)
            elif key == "reviews":
                coerced[key] = coerce_count(value)
            elif key in _LIST_FIELDS:
                coerced[key] = list(_coerce_strings(value))
            elif key == "inStock":
                coerced[key] = value is not False
            elif key == "originalPrice":
                coerced[key] = _coerce_optional_price(value)
            elif key == "discount":
                coerced[key] = _coerce_discount(value)
            else:
                logger.debug("Ignoring unknown product field %r", key)
        return coerced
