# tests/test_result_assembler.py

"""Tests for pagination, facets and suggestions in ResultAssembler."""

import time
import unittest

from fake_source import make_listing

from src.models.listing import Platform, ScoredListing
from src.models.search import SourceError
from src.services.result_assembler import (
    AssemblyMeta,
    ResultAssembler,
    build_facets,
    build_suggestions,
)

NOON = Platform(id="noon_ae", name="Noon UAE", domain="noon.com")


def _scored(listing_id: str, price: float, **overrides: object) -> ScoredListing:
    return ScoredListing(
        listing=make_listing(listing_id, price=price, **overrides),
        relevance_score=50.0,
        authenticity_score=50.0,
        price_competitiveness=50.0,
        availability_score=100.0,
        overall_score=60.0,
    )


def _meta(**overrides: object) -> AssemblyMeta:
    fields: dict[str, object] = {
        "query": "iphone 15",
        "country_code": "US",
        "currency": "USD",
        "currency_symbol": "$",
        "started_at": time.monotonic(),
        "sources_queried": ["Amazon US", "Walmart US"],
    }
    fields.update(overrides)
    return AssemblyMeta(**fields)  # type: ignore[arg-type]


ORDERED = [_scored(str(i), price=10.0 * (i + 1)) for i in range(45)]


class TestPagination(unittest.TestCase):
    """total_found counts everything; listings hold one page."""

    def test_first_page(self) -> None:
        result = ResultAssembler.assemble(ORDERED, 1, 20, _meta())
        self.assertEqual(len(result.listings), 20)
        self.assertEqual(result.total_found, 45)
        self.assertIs(result.listings[0], ORDERED[0])
        self.assertTrue(result.has_next)

    def test_last_partial_page(self) -> None:
        result = ResultAssembler.assemble(ORDERED, 3, 20, _meta())
        self.assertEqual(len(result.listings), 5)
        self.assertIs(result.listings[-1], ORDERED[-1])
        self.assertFalse(result.has_next)

    def test_page_past_the_end_is_empty(self) -> None:
        result = ResultAssembler.assemble(ORDERED, 10, 20, _meta())
        self.assertEqual(result.listings, [])
        self.assertEqual(result.total_found, 45)

    def test_metadata_carried_over(self) -> None:
        errors = [SourceError("Walmart US", "HTTP 403")]
        result = ResultAssembler.assemble(ORDERED, 1, 20, _meta(errors=errors))
        self.assertEqual(result.query, "iphone 15")
        self.assertEqual(result.country_code, "US")
        self.assertEqual(result.currency, "USD")
        self.assertEqual(result.sources_queried, ["Amazon US", "Walmart US"])
        self.assertEqual(result.errors, errors)
        self.assertGreaterEqual(result.elapsed_ms, 0.0)

    def test_empty_input(self) -> None:
        result = ResultAssembler.assemble([], 1, 20, _meta())
        self.assertEqual(result.total_found, 0)
        self.assertFalse(result.has_next)
        self.assertEqual(
            [f.count for f in result.facets["price_ranges"]], [0, 0, 0, 0]
        )


class TestFacets(unittest.TestCase):
    def test_counts_sorted_by_frequency(self) -> None:
        listings = [
            _scored("1", 50.0, brand="Apple"),
            _scored("2", 150.0, brand="Samsung", platform=NOON),
            _scored("3", 750.0, brand="Samsung"),
            _scored("4", 1500.0, brand="Apple", category="Laptops"),
            _scored("5", 100.0, brand="Samsung", platform=NOON),
        ]
        facets = build_facets(listings, "$")

        self.assertEqual(
            [(f.value, f.count) for f in facets["brands"]],
            [("Samsung", 3), ("Apple", 2)],
        )
        self.assertEqual(
            [(f.value, f.count) for f in facets["categories"]],
            [("Smartphones", 4), ("Laptops", 1)],
        )
        self.assertEqual(
            [(f.value, f.label, f.count) for f in facets["platforms"]],
            [("test", "Test Shop", 3), ("noon_ae", "Noon UAE", 2)],
        )
        self.assertEqual(
            [(f.value, f.label, f.count) for f in facets["price_ranges"]],
            [
                ("0-100", "Under $100", 1),
                ("100-500", "$100 - $500", 2),
                ("500-1000", "$500 - $1,000", 1),
                ("1000-inf", "Over $1,000", 1),
            ],
        )

    def test_facets_cover_all_filtered_listings_not_just_page(self) -> None:
        result = ResultAssembler.assemble(ORDERED, 1, 5, _meta())
        self.assertEqual(
            sum(f.count for f in result.facets["price_ranges"]), 45
        )


class TestSuggestions(unittest.TestCase):
    def test_known_keyword(self) -> None:
        self.assertIn("iphone case", build_suggestions("iPhone 15"))

    def test_generic_fallback(self) -> None:
        self.assertEqual(
            build_suggestions("kettle"),
            ["kettle deals", "kettle review", "best kettle", "kettle price"],
        )

    def test_at_most_four(self) -> None:
        for query in ("gaming chair", "nike", "toaster"):
            with self.subTest(query=query):
                self.assertLessEqual(len(build_suggestions(query)), 4)


if __name__ == "__main__":
    unittest.main()
