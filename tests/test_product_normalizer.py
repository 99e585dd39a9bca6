# tests/test_product_normalizer.py

"""Tests for raw-document normalization."""

import math
import unittest

from src.filters.product_normalizer import (
    ProductNormalizer,
    coerce_count,
    coerce_number,
)
from src.models.errors import RecordRejected


def _raw(**overrides: object) -> dict[str, object]:
    """A minimal raw document that passes the validity gate."""
    doc: dict[str, object] = {
        "name": "Trail Runner",
        "price": 89.5,
        "image": "https://cdn.example.com/trail.jpg",
    }
    doc.update(overrides)
    return doc


class TestCoerceNumber(unittest.TestCase):
    """coerce_number behaviour."""

    def test_numbers_pass_through(self) -> None:
        self.assertEqual(coerce_number(12), 12.0)
        self.assertEqual(coerce_number(4.5), 4.5)

    def test_numeric_strings_are_parsed(self) -> None:
        self.assertEqual(coerce_number("19.99"), 19.99)
        self.assertEqual(coerce_number("  7 "), 7.0)

    def test_garbage_becomes_zero(self) -> None:
        """Non-numeric input never yields NaN."""
        for value in ("abc", "", None, [], {}, object()):
            with self.subTest(value=value):
                self.assertEqual(coerce_number(value), 0.0)

    def test_nan_and_infinity_become_zero(self) -> None:
        self.assertEqual(coerce_number(float("nan")), 0.0)
        self.assertEqual(coerce_number("nan"), 0.0)
        self.assertEqual(coerce_number(float("inf")), 0.0)

    def test_booleans_count_as_zero_or_one(self) -> None:
        self.assertEqual(coerce_number(True), 1.0)
        self.assertEqual(coerce_number(False), 0.0)

    def test_coerce_count_is_non_negative_int(self) -> None:
        self.assertEqual(coerce_count("42"), 42)
        self.assertEqual(coerce_count(3.9), 3)
        self.assertEqual(coerce_count(-5), 0)
        self.assertEqual(coerce_count("many"), 0)


class TestNormalize(unittest.TestCase):
    """ProductNormalizer.normalize field rules."""

    def test_full_document(self) -> None:
        """Every field is carried over with its coerced type."""
        product = ProductNormalizer.normalize(
            _raw(
                price="120",
                images=["a.jpg", "b.jpg"],
                category="Shoes",
                description="Lightweight",
                brand="Acme",
                rating="4.5",
                reviews="17",
                inStock=True,
                features=["Waterproof"],
                originalPrice="150",
                discount={"percent": 20},
            ),
            "doc-1",
        )
        assert product is not None
        self.assertEqual(product.id, "doc-1")
        self.assertEqual(product.price, 120.0)
        self.assertEqual(product.images, ("a.jpg", "b.jpg"))
        self.assertEqual(product.rating, 4.5)
        self.assertEqual(product.reviews, 17)
        self.assertEqual(product.features, ("Waterproof",))
        self.assertEqual(product.original_price, 150.0)
        self.assertEqual(product.discount, {"percent": 20})

    def test_missing_in_stock_defaults_true(self) -> None:
        """Absence of inStock does not mean out of stock."""
        product = ProductNormalizer.normalize(_raw(), "doc-1")
        assert product is not None
        self.assertTrue(product.in_stock)

    def test_explicit_false_in_stock(self) -> None:
        product = ProductNormalizer.normalize(_raw(inStock=False), "doc-1")
        assert product is not None
        self.assertFalse(product.in_stock)

    def test_other_falsy_in_stock_still_true(self) -> None:
        """Only the literal False marks a product out of stock."""
        for value in (None, 0, ""):
            with self.subTest(value=value):
                product = ProductNormalizer.normalize(
                    _raw(inStock=value), "doc-1"
                )
                assert product is not None
                self.assertTrue(product.in_stock)

    def test_missing_name_gets_sentinel(self) -> None:
        raw = _raw()
        del raw["name"]
        product = ProductNormalizer.normalize(raw, "doc-1")
        assert product is not None
        self.assertEqual(product.name, "Unnamed Product")

    def test_non_sequence_lists_default_empty(self) -> None:
        product = ProductNormalizer.normalize(
            _raw(images="a.jpg", features={"x": 1}), "doc-1"
        )
        assert product is not None
        self.assertEqual(product.images, ())
        self.assertEqual(product.features, ())

    def test_bad_rating_and_reviews_default_zero(self) -> None:
        product = ProductNormalizer.normalize(
            _raw(rating="great", reviews=None), "doc-1"
        )
        assert product is not None
        self.assertEqual(product.rating, 0.0)
        self.assertFalse(math.isnan(product.rating))
        self.assertEqual(product.reviews, 0)

    def test_whitespace_only_name_is_admitted(self) -> None:
        product = ProductNormalizer.normalize(
            {"name": "  ", "price": 5, "image": "i.jpg"}, "w"
        )
        assert product is not None
        self.assertEqual(product.name, "  ")

    def test_zero_original_price_is_absent(self) -> None:
        """A 0 originalPrice is treated the same as a missing one."""
        product = ProductNormalizer.normalize(
            _raw(originalPrice=0), "doc-1"
        )
        assert product is not None
        self.assertIsNone(product.original_price)

    def test_discount_requires_mapping(self) -> None:
        for value in ("10%", 10, None, ["x"]):
            with self.subTest(value=value):
                product = ProductNormalizer.normalize(
                    _raw(discount=value), "doc-1"
                )
                assert product is not None
                self.assertIsNone(product.discount)

    def test_empty_discount_mapping_is_kept(self) -> None:
        product = ProductNormalizer.normalize(_raw(discount={}), "doc-1")
        assert product is not None
        self.assertEqual(product.discount, {})

    def test_snake_case_aliases_accepted(self) -> None:
        product = ProductNormalizer.normalize(
            _raw(in_stock=False, original_price=99), "doc-1"
        )
        assert product is not None
        self.assertFalse(product.in_stock)
        self.assertEqual(product.original_price, 99.0)

    def test_idempotent(self) -> None:
        """Normalizing the same document twice gives equal products."""
        raw = _raw(brand="Acme", features=["a", "b"], discount={"p": 1})
        first = ProductNormalizer.normalize(raw, "doc-1")
        second = ProductNormalizer.normalize(raw, "doc-1")
        self.assertEqual(first, second)

    def test_discount_is_copied(self) -> None:
        """Mutating the raw document later does not leak into the product."""
        discount = {"percent": 10}
        product = ProductNormalizer.normalize(
            _raw(discount=discount), "doc-1"
        )
        discount["percent"] = 99
        assert product is not None
        assert product.discount is not None
        self.assertEqual(product.discount["percent"], 10)


class TestRejection(unittest.TestCase):
    """Invalid documents are dropped, never raised."""

    def test_empty_name_rejected(self) -> None:
        self.assertIsNone(ProductNormalizer.normalize(_raw(name=""), "d"))

    def test_non_positive_price_rejected(self) -> None:
        for price in (0, -1, "free", None):
            with self.subTest(price=price):
                self.assertIsNone(
                    ProductNormalizer.normalize(_raw(price=price), "d")
                )

    def test_empty_image_rejected(self) -> None:
        self.assertIsNone(ProductNormalizer.normalize(_raw(image=""), "d"))

    def test_non_mapping_rejected(self) -> None:
        for raw in (None, "text", 42, ["a"]):
            with self.subTest(raw=raw):
                self.assertIsNone(ProductNormalizer.normalize(raw, "d"))

    def test_exploding_field_rejected_and_logged(self) -> None:
        """An exception during extraction rejects only that record."""

        class Exploding(dict):
            def items(self):  # type: ignore[override]
                raise RuntimeError("boom")

        with self.assertLogs("catalog_sync.normalizer", "ERROR") as logs:
            result = ProductNormalizer.normalize(Exploding(), "bad-doc")
        self.assertIsNone(result)
        self.assertIn("bad-doc", logs.output[0])

    def test_parse_raises_record_rejected(self) -> None:
        with self.assertRaises(RecordRejected) as ctx:
            ProductNormalizer.parse(_raw(price=0), "doc-9")
        self.assertEqual(ctx.exception.doc_id, "doc-9")
        self.assertFalse(ctx.exception.malformed)


class TestNormalizeBatch(unittest.TestCase):
    """normalize_batch over a full listing."""

    def test_drops_invalid_keeps_order(self) -> None:
        docs = [
            ("a", _raw(name="A")),
            ("b", _raw(price=0)),
            ("c", "not a document"),
            ("d", _raw(name="D")),
        ]
        products, rejected = ProductNormalizer.normalize_batch(docs)
        self.assertEqual([p.id for p in products], ["a", "d"])
        self.assertEqual(rejected, 2)

    def test_empty_listing(self) -> None:
        products, rejected = ProductNormalizer.normalize_batch([])
        self.assertEqual(products, [])
        self.assertEqual(rejected, 0)


class TestOutgoingCoercion(unittest.TestCase):
    """to_store_fields and coerce_changes used by the mutator."""

    def test_to_store_fields_applies_defaults(self) -> None:
        fields = ProductNormalizer.to_store_fields(
            {"name": "Lamp", "price": "25", "image": "lamp.jpg"}
        )
        self.assertEqual(fields["price"], 25.0)
        self.assertIs(fields["inStock"], True)
        self.assertEqual(fields["images"], [])
        self.assertNotIn("originalPrice", fields)

    def test_to_store_fields_ignores_id(self) -> None:
        fields = ProductNormalizer.to_store_fields(
            {"id": "x", "name": "Lamp", "price": 1, "image": "i"}
        )
        self.assertNotIn("id", fields)

    def test_to_store_fields_rejects_invalid(self) -> None:
        with self.assertRaises(RecordRejected):
            ProductNormalizer.to_store_fields({"name": "Lamp", "price": 5})

    def test_coerce_changes_only_known_fields(self) -> None:
        changes = ProductNormalizer.coerce_changes(
            {"price": "12.5", "colour": "red", "in_stock": False}
        )
        self.assertEqual(changes, {"price": 12.5, "inStock": False})

    def test_coerce_changes_clears_falsy_original_price(self) -> None:
        changes = ProductNormalizer.coerce_changes({"originalPrice": 0})
        self.assertEqual(changes, {"originalPrice": None})

    def test_coerce_changes_lists_and_counts(self) -> None:
        changes = ProductNormalizer.coerce_changes(
            {"images": "nope", "features": ["a", 2], "reviews": "-3"}
        )
        self.assertEqual(changes["images"], [])
        self.assertEqual(changes["features"], ["a", "2"])
        self.assertEqual(changes["reviews"], 0)


if __name__ == "__main__":
    unittest.main()
