# src/filters/product_validator.py

"""Data-quality gate applied to every normalized product."""

from src.models.product import Product


class ProductValidator:
    """Decide whether a normalized product may enter the catalog."""

    @staticmethod
    def check(product: Product) -> str | None:
        """Return the reason *product* is invalid, or ``None`` if it passes.

        A product needs a non-empty name, a strictly positive price and
        a primary image.
        """
        if not product.name:
            return "empty name"
        if not product.price > 0:
            return f"non-positive price ({product.price})"
        if not product.image:
            return "missing image"
        return None

    @staticmethod
    def is_valid(product: Product) -> bool:
        """Shorthand for ``check(product) is None``."""
        return ProductValidator.check(product) is None
