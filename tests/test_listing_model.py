# tests/test_listing_model.py

"""Tests for NormalizedListing, ScoredListing and the result envelope."""

import dataclasses
import json
import unittest
from datetime import timezone

from fake_source import make_listing

from src.models.listing import Availability, ScoredListing
from src.models.search import (
    FacetItem,
    FetchOutcome,
    SearchResult,
    SourceError,
)


class TestNormalizedListing(unittest.TestCase):
    """Construction invariants and derived fields."""

    def test_discount_when_original_above_price(self) -> None:
        listing = make_listing(price=80.0, original_price=100.0)
        self.assertEqual(listing.discount, "20%")

    def test_original_below_price_is_dropped(self) -> None:
        listing = make_listing(price=100.0, original_price=80.0)
        self.assertIsNone(listing.original_price)
        self.assertIsNone(listing.discount)

    def test_equal_original_price_has_no_discount(self) -> None:
        listing = make_listing(price=100.0, original_price=100.0)
        self.assertEqual(listing.original_price, 100.0)
        self.assertIsNone(listing.discount)

    def test_discount_is_rounded(self) -> None:
        listing = make_listing(price=899.0, original_price=1099.0)
        self.assertEqual(listing.discount, "18%")

    def test_rating_is_clamped(self) -> None:
        self.assertEqual(make_listing(rating=7.2).rating, 5.0)
        self.assertEqual(make_listing(rating=-1).rating, 0.0)

    def test_negative_review_count_is_clamped(self) -> None:
        self.assertEqual(make_listing(review_count=-5).review_count, 0)

    def test_empty_title_rejected(self) -> None:
        with self.assertRaises(ValueError):
            make_listing(title="   ")

    def test_negative_price_rejected(self) -> None:
        with self.assertRaises(ValueError):
            make_listing(price=-1.0)

    def test_non_finite_price_rejected(self) -> None:
        for price in (float("nan"), float("inf")):
            with self.subTest(price=price):
                with self.assertRaises(ValueError):
                    make_listing(price=price)

    def test_non_finite_original_price_is_dropped(self) -> None:
        listing = make_listing(price=100.0, original_price=float("nan"))
        self.assertIsNone(listing.original_price)

    def test_images_become_tuple(self) -> None:
        listing = make_listing(images=["a.jpg", "b.jpg"])
        self.assertEqual(listing.images, ("a.jpg", "b.jpg"))
        self.assertEqual(listing.image, "a.jpg")
        self.assertEqual(make_listing().image, "")

    def test_listing_is_frozen(self) -> None:
        listing = make_listing()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            listing.price = 1.0  # type: ignore[misc]

    def test_fetched_at_is_utc(self) -> None:
        self.assertEqual(make_listing().fetched_at.tzinfo, timezone.utc)

    def test_to_dict_is_json_serialisable(self) -> None:
        listing = make_listing(
            original_price=150.0,
            availability=Availability.LIMITED_STOCK,
        )
        data = listing.to_dict()
        json.dumps(data)
        self.assertEqual(data["availability"], "limited_stock")
        self.assertEqual(data["discount"], "33%")
        self.assertEqual(data["platform"]["id"], "test")


class TestScoredListing(unittest.TestCase):
    def test_to_dict_flattens_scores(self) -> None:
        scored = ScoredListing(
            listing=make_listing(),
            relevance_score=70.0,
            authenticity_score=55.5,
            price_competitiveness=100.0,
            availability_score=100.0,
            overall_score=77.123456,
        )
        data = scored.to_dict()
        self.assertEqual(data["id"], "test:1")
        self.assertEqual(data["overall_score"], 77.12)
        self.assertEqual(data["price_competitiveness"], 100.0)


class TestSearchEnvelope(unittest.TestCase):
    def test_has_next(self) -> None:
        result = SearchResult(
            query="q", country_code="AE", currency="AED",
            total_found=45, page=2, page_size=20,
        )
        self.assertTrue(result.has_next)
        last = dataclasses.replace(result, page=3)
        self.assertFalse(last.has_next)

    def test_to_dict(self) -> None:
        result = SearchResult(
            query="q",
            country_code="AE",
            currency="AED",
            errors=[SourceError("Noon UAE", "HTTP 503")],
            facets={"brands": [FacetItem("Apple", "Apple", 2)]},
        )
        data = result.to_dict()
        json.dumps(data)
        self.assertEqual(
            data["errors"], [{"source": "Noon UAE", "message": "HTTP 503"}]
        )
        self.assertEqual(data["facets"]["brands"][0]["count"], 2)
        self.assertFalse(data["has_next"])

    def test_all_failed(self) -> None:
        self.assertFalse(FetchOutcome().all_failed)
        self.assertTrue(FetchOutcome(sources_queried=["A"]).all_failed)
        self.assertFalse(
            FetchOutcome(sources_queried=["A"], succeeded=1).all_failed
        )


if __name__ == "__main__":
    unittest.main()
