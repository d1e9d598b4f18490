# tests/test_rainforest_source.py

"""Tests for the Rainforest-backed Amazon source using mocked HTTP responses."""

import json
import unittest
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from src.models.errors import SourceFetchError
from src.models.listing import Availability, Platform
from src.sources.base_source import SourceContext
from src.sources.rainforest_source import RainforestSource

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _amazon_context() -> SourceContext:
    return SourceContext(
        source_id="amazon_ae",
        label="Amazon UAE",
        platform=Platform(id="amazon_ae", name="Amazon UAE", domain="amazon.ae"),
        country_code="AE",
        currency="AED",
        currency_symbol="د.إ",
    )


class TestRainforestSource(unittest.IsolatedAsyncioTestCase):
    """Tests for the Rainforest source using mocked HTTP responses."""

    def _make_mock_response(
        self, data: dict[str, Any], status_code: int = 200,
    ) -> MagicMock:
        mock_resp = MagicMock()
        mock_resp.status_code = status_code
        mock_resp.json.return_value = data
        mock_resp.text = json.dumps(data)
        return mock_resp

    def _make_source(self, data: dict[str, Any] | None = None) -> RainforestSource:
        if data is None:
            with open(FIXTURES_DIR / "rainforest_search.json", encoding="utf-8") as f:
                data = json.load(f)
        session = MagicMock()
        session.get = AsyncMock(return_value=self._make_mock_response(data))
        return RainforestSource(_amazon_context(), session, api_key="test-key")

    async def test_search_returns_listings(self) -> None:
        """Items without a price are dropped; the rest are normalized."""
        source = self._make_source()
        listings = await source.search("iphone 15")
        self.assertEqual(
            [x.id for x in listings],
            ["amazon_ae:B0CHX1W1XY", "amazon_ae:B0CHX5Y7ZZ", "amazon_ae:B0CHARGER2"],
        )
        self.assertTrue(all(x.currency == "AED" for x in listings))

    async def test_request_parameters(self) -> None:
        source = self._make_source()
        await source.search("iphone 15")
        _args, kwargs = source.session.get.call_args
        self.assertEqual(kwargs["params"]["api_key"], "test-key")
        self.assertEqual(kwargs["params"]["type"], "search")
        self.assertEqual(kwargs["params"]["amazon_domain"], "amazon.ae")
        self.assertEqual(kwargs["params"]["search_term"], "iphone 15")

    async def test_first_item_fields(self) -> None:
        listings = await self._make_source().search("iphone 15")
        first = listings[0]
        self.assertEqual(first.title, "Apple iPhone 15 (128 GB) - Black")
        self.assertEqual(first.price, 2899.0)
        self.assertEqual(first.original_price, 3399.0)
        self.assertEqual(first.discount, "15%")
        self.assertEqual(first.rating, 4.6)
        self.assertEqual(first.review_count, 1520)
        self.assertEqual(first.brand, "Apple")
        self.assertEqual(first.seller, "Amazon.ae")
        self.assertTrue(first.shipping.free)
        self.assertIs(first.availability, Availability.IN_STOCK)

    async def test_url_built_from_asin_when_link_missing(self) -> None:
        listings = await self._make_source().search("iphone 15")
        case = listings[1]
        self.assertEqual(case.url, "https://www.amazon.ae/dp/B0CHX5Y7ZZ")
        self.assertIs(case.availability, Availability.LIMITED_STOCK)
        self.assertFalse(case.shipping.free)
        self.assertIsNone(case.seller)

    async def test_price_from_prices_list_and_images_deduplicated(self) -> None:
        listings = await self._make_source().search("iphone 15")
        charger = listings[2]
        self.assertEqual(charger.price, 59.0)
        self.assertEqual(
            charger.images,
            (
                "https://m.media-amazon.com/images/I/51anker.jpg",
                "https://m.media-amazon.com/images/I/52anker.jpg",
            ),
        )
        self.assertEqual(charger.seller, "Anker Direct")

    async def test_unsuccessful_request_raises(self) -> None:
        source = self._make_source(
            {"request_info": {"success": False, "message": "Invalid api_key"}}
        )
        with self.assertRaises(SourceFetchError) as ctx:
            await source.search("iphone")
        self.assertEqual(ctx.exception.message, "Invalid api_key")

    async def test_http_error_raises(self) -> None:
        source = self._make_source({})
        source.session.get = AsyncMock(
            return_value=self._make_mock_response({}, status_code=401)
        )
        with self.assertRaises(SourceFetchError):
            await source.search("iphone")

    async def test_no_results(self) -> None:
        source = self._make_source({"request_info": {"success": True}})
        self.assertEqual(await source.search("zzzz"), [])


if __name__ == "__main__":
    unittest.main()
