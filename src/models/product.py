# src/models/product.py

"""Canonical Product record published by the sync pipeline."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Product:
    """A validated catalog entry.

    Instances are only built by the normalizer, so every field already
    carries its documented default. ``original_price`` and ``discount``
    are ``None`` when the source document did not provide them.
    """

    id: str
    name: str
    price: float
    image: str = ""
    images: tuple[str, ...] = ()
    category: str = ""
    description: str = ""
    brand: str = ""
    rating: float = 0.0
    reviews: int = 0
    in_stock: bool = True
    features: tuple[str, ...] = ()
    original_price: float | None = None
    # Compared but not hashed; a dict is unhashable
    discount: dict[str, Any] | None = field(default=None, hash=False)

    def to_fields(self) -> dict[str, Any]:
        """Serialise to store field names (no ``id``; optionals omitted)."""
        fields: dict[str, Any] = {
            "name": self.name,
            "price": self.price,
            "image": self.image,
            "images": list(self.images),
            "category": self.category,
            "description": self.description,
            "rating": self.rating,
            "reviews": self.reviews,
            "inStock": self.in_stock,
            "features": list(self.features),
            "brand": self.brand,
        }
        if self.original_price is not None:
            fields["originalPrice"] = self.original_price
        if self.discount is not None:
            fields["discount"] = dict(self.discount)
        return fields

    def to_dict(self) -> dict[str, Any]:
        """Serialise including the document id, for JSON output."""
        return {"id": self.id, **self.to_fields()}
